from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from altari_bot.errors import ProviderUnavailableError, QuoteNotFoundError

REQUEST_TIMEOUT_SEC = 5


def is_foreign_symbol(symbol: str) -> bool:
    """Tickers starting with an ASCII letter are quoted on overseas exchanges."""
    if not symbol or symbol == "kospi":
        return False
    head = symbol[0]
    return head.isascii() and head.isalpha()


def fetch_json(
    session: Any,
    url: str,
    *,
    provider: str,
    symbol: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    try:
        response = session.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT_SEC)
        response.raise_for_status()
    except requests.RequestException as exc:
        print(f"[QUOTE][provider_unavailable] provider={provider} symbol={symbol} error={exc}", flush=True)
        raise ProviderUnavailableError(str(exc), provider=provider, symbol=symbol) from exc

    try:
        return response.json()
    except ValueError as exc:
        raise QuoteNotFoundError("response is not valid JSON", provider=provider, symbol=symbol) from exc
