from __future__ import annotations

from typing import Any, Optional

import requests
from pydantic import ValidationError

from altari_bot.errors import QuoteNotFoundError
from altari_bot.integrations.base import fetch_json
from altari_bot.schemas.quote import BasicQuote, MajorsQuote, ResolvedQuote


class NaverStockClient:
    """Naver Financial quotes for domestic stocks, the KOSPI index and SPY."""

    name = "naver"

    MAJORS_URL = "https://m.stock.naver.com/api/home/majors"
    STOCK_URL = "https://m.stock.naver.com/api/stock/{symbol}/basic"
    ETF_URL = "https://api.stock.naver.com/etf/{symbol}/basic"

    def __init__(self, session: Optional[Any] = None) -> None:
        self.session = session or requests

    def build_url(self, symbol: str) -> tuple[str, bool]:
        if symbol == "kospi":
            return self.MAJORS_URL, False
        if symbol == "SPY":
            return self.ETF_URL.format(symbol=symbol), True
        return self.STOCK_URL.format(symbol=symbol), False

    def parse(self, payload: Any, symbol: str) -> BasicQuote | MajorsQuote:
        if not isinstance(payload, dict):
            raise QuoteNotFoundError("payload must be an object", provider=self.name, symbol=symbol)

        try:
            basic = BasicQuote.model_validate(payload)
        except ValidationError:
            basic = None
        if basic is not None and basic.has_price_fields():
            return basic

        try:
            majors = MajorsQuote.model_validate(payload)
        except ValidationError as exc:
            raise QuoteNotFoundError("unrecognized quote payload", provider=self.name, symbol=symbol) from exc
        if not majors.home_majors:
            raise QuoteNotFoundError("unrecognized quote payload", provider=self.name, symbol=symbol)
        if majors.home_major() is None:
            raise QuoteNotFoundError(
                f"index {majors.target_code} missing from majors",
                provider=self.name,
                symbol=symbol,
            )
        return majors

    def get_quote(self, symbol: str) -> ResolvedQuote:
        url, frac = self.build_url(symbol)
        payload = fetch_json(self.session, url, provider=self.name, symbol=symbol)
        item = self.parse(payload, symbol)
        return ResolvedQuote(item=item, frac=frac, source=self.name)
