from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from altari_bot.schemas.quote import BasicQuote
from altari_bot.services.quote_resolver import FAILURE_TEXT, QuoteResolver
from altari_bot.services.quote_text import render_quote_text

QUOTE_COMMANDS: dict[str, list[str]] = {
    "/k": ["259960"],  # 크래프톤
    "/n": ["036570"],  # 엔씨소프트
    "/a": ["027360"],  # 아주IB투자
    "/skh": ["000660"],  # SK하이닉스
    "/energy": ["385510"],  # KODEX K-신재생에너지액티브
    "/kg": ["293490"],  # 카카오게임즈
    "/lgd": ["034220"],  # LG디스플레이
    "/p": ["263750"],  # 펄어비스
    "/c": ["078340"],  # 컴투스
    "/N": ["036570", "251270", "095660"],  # 엔씨소프트, 넷마블, 네오위즈
    "/kospi": ["kospi"],
    "/spy": ["SPY"],
    "/qqq": ["QQQ"],
    "/botz": ["BOTZ"],
    "/qsi": ["QSI"],
    "/pump": ["PUMP"],
}

IMAGE_COMMANDS: dict[str, str] = {
    "/ggul": "ggul_bird.png",
    "/palggul": "parggul.jpg",
    "/salggul": "salggul.png",
    "/racoon": "racoon.jpg",
}

DREAM_QUOTE = BasicQuote(
    item_code="259960",
    stock_name="크래프톤",
    close_price="1000000",
    compare_to_previous_close_price="230000",
)


class BotReply(BaseModel):
    text: str | None = None
    photo_path: str | None = None


def symbols_for(words: list[str]) -> list[str]:
    if not words:
        return []
    command = words[0]
    if command == "/s":
        return words[1:2]
    return list(QUOTE_COMMANDS.get(command, []))


class CommandHandler:
    def __init__(self, resolver: QuoteResolver, image_dir: str | Path = "images") -> None:
        self.resolver = resolver
        self.image_dir = Path(image_dir)

    def handle(self, text: str) -> BotReply | None:
        words = text.split()
        if not words:
            return None

        if words[0] == "/kdream":
            return BotReply(text=render_quote_text(DREAM_QUOTE, False))

        symbols = symbols_for(words)
        if symbols:
            return BotReply(text=self.resolver.resolve_many(symbols))

        image_name = IMAGE_COMMANDS.get(words[0])
        if image_name is not None:
            path = self.image_dir / image_name
            if path.is_file():
                return BotReply(photo_path=str(path))

        return BotReply(text=FAILURE_TEXT)
