from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests

from altari_bot.services.commands import BotReply, CommandHandler


class TelegramBotClient:
    """Minimal Telegram Bot API client: long polling plus message/photo replies."""

    _BASE_URL = "https://api.telegram.org"

    def __init__(
        self,
        token: str,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        poll_timeout_sec: int = 60,
    ) -> None:
        if not token:
            raise ValueError("bot token is required")
        self.token = token
        self.session = session or requests
        self.base_url = base_url or self._BASE_URL
        self.poll_timeout_sec = poll_timeout_sec

    def _method_url(self, method: str) -> str:
        return f"{self.base_url}/bot{self.token}/{method}"

    def _call(self, method: str, *, timeout: float = 10, **kwargs: Any) -> Any:
        response = self.session.post(self._method_url(method), timeout=timeout, **kwargs)
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError(f"telegram {method} failed: {payload.get('description')}")
        return payload.get("result")

    def get_me(self) -> Dict[str, Any]:
        return self._call("getMe")

    def get_updates(self, offset: int = 0) -> list[Dict[str, Any]]:
        return self._call(
            "getUpdates",
            json={"offset": offset, "timeout": self.poll_timeout_sec},
            timeout=self.poll_timeout_sec + 5,
        )

    def send_message(self, chat_id: int, text: str) -> Dict[str, Any]:
        return self._call(
            "sendMessage",
            json={
                "chat_id": chat_id,
                "text": text,
                "parse_mode": "MarkdownV2",
                "disable_web_page_preview": False,
            },
        )

    def send_photo(self, chat_id: int, photo_path: str) -> Dict[str, Any]:
        path = Path(photo_path)
        with path.open("rb") as fp:
            return self._call(
                "sendPhoto",
                data={"chat_id": chat_id},
                files={"photo": (path.name, fp)},
                timeout=30,
            )

    def send_reply(self, chat_id: int, reply: BotReply) -> None:
        if reply.photo_path:
            self.send_photo(chat_id, reply.photo_path)
        elif reply.text:
            self.send_message(chat_id, reply.text)


class BotPoller:
    """Processes updates one at a time until ``stop`` is called."""

    def __init__(
        self,
        client: TelegramBotClient,
        handler: CommandHandler,
        *,
        sleep_fn: Callable[[float], None] = time.sleep,
        error_backoff_sec: float = 3.0,
    ) -> None:
        self.client = client
        self.handler = handler
        self.sleep_fn = sleep_fn
        self.error_backoff_sec = error_backoff_sec
        self.offset = 0
        self.running = False

    def stop(self) -> None:
        self.running = False

    def handle_update(self, update: Dict[str, Any]) -> None:
        message = update.get("message")
        if not message or message.get("reply_to_message") is not None:
            return

        text = message.get("text") or ""
        username = (message.get("from") or {}).get("username", "")
        print(f"[BOT][command] user={username} text={text}", flush=True)

        reply = self.handler.handle(text)
        if reply is None:
            return
        self.client.send_reply(message["chat"]["id"], reply)

    def poll_once(self) -> int:
        updates = self.client.get_updates(offset=self.offset)
        for update in updates:
            self.offset = max(self.offset, int(update["update_id"]) + 1)
            try:
                self.handle_update(update)
            except requests.RequestException as exc:
                print(f"[BOT][reply_error] update_id={update['update_id']} error={exc}", flush=True)
        return len(updates)

    def run(self) -> None:
        self.running = True
        while self.running:
            try:
                self.poll_once()
            except (requests.RequestException, RuntimeError) as exc:
                print(f"[BOT][poll_error] error={exc}", flush=True)
                if self.running:
                    self.sleep_fn(self.error_backoff_sec)
