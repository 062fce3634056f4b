from __future__ import annotations

from typing import Optional, Protocol

import requests

from altari_bot.errors import NoProviderSucceededError, QuoteProviderError
from altari_bot.integrations.base import is_foreign_symbol
from altari_bot.integrations.kis_proxy import KisProxyClient
from altari_bot.integrations.naver_rest import NaverStockClient
from altari_bot.integrations.yahoo_rest import YahooChartClient
from altari_bot.schemas.quote import ResolvedQuote
from altari_bot.services.quote_text import render_quote_text

FAILURE_TEXT = "오류"


class QuoteAdapter(Protocol):
    name: str

    def get_quote(self, symbol: str) -> ResolvedQuote: ...


class QuoteResolver:
    """Ordered provider fallback chain; first adapter to produce a quote wins."""

    def __init__(self, adapters: list[QuoteAdapter]) -> None:
        if not adapters:
            raise ValueError("at least one quote adapter is required")
        self.adapters = list(adapters)

    def resolve(self, symbol: str) -> ResolvedQuote:
        # Every adapter hands domestic symbols to the same primary client,
        # so walking the chain for them would only repeat that call.
        chain = self.adapters if is_foreign_symbol(symbol) else self.adapters[:1]

        errors: list[QuoteProviderError] = []
        for adapter in chain:
            try:
                resolved = adapter.get_quote(symbol)
            except QuoteProviderError as exc:
                print(
                    f"[QUOTE][provider_failed] provider={adapter.name} symbol={symbol} "
                    f"kind={type(exc).__name__} error={exc}",
                    flush=True,
                )
                errors.append(exc)
                continue
            print(f"[QUOTE][resolved] provider={resolved.source} symbol={symbol}", flush=True)
            return resolved

        raise NoProviderSucceededError(symbol, errors)

    def resolve_text(self, symbol: str) -> str:
        try:
            resolved = self.resolve(symbol)
        except NoProviderSucceededError as exc:
            print(f"[QUOTE][unresolved] symbol={symbol} attempts={len(exc.errors)}", flush=True)
            return FAILURE_TEXT
        return render_quote_text(resolved.item, resolved.frac)

    def resolve_many(self, symbols: list[str]) -> str:
        return "".join(f"{self.resolve_text(symbol)}\n" for symbol in symbols)


def build_default_resolver(
    session: Optional[requests.Session] = None,
    kis_proxy_url: Optional[str] = None,
) -> QuoteResolver:
    primary = NaverStockClient(session=session)
    return QuoteResolver(
        [
            YahooChartClient(primary, session=session),
            KisProxyClient("AMS", primary, session=session, base_url=kis_proxy_url),
            KisProxyClient("NAS", primary, session=session, base_url=kis_proxy_url),
        ]
    )
