from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

import requests
from pydantic import ValidationError

from altari_bot.errors import QuoteNotFoundError
from altari_bot.integrations.base import fetch_json, is_foreign_symbol
from altari_bot.integrations.naver_rest import NaverStockClient
from altari_bot.schemas.providers import YahooChartResponse
from altari_bot.schemas.quote import BasicQuote, ResolvedQuote


class YahooChartClient:
    """Yahoo Finance chart meta for overseas tickers; domestic symbols go to Naver."""

    name = "yahoo"

    CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
    # Yahoo rejects the default python-requests agent.
    HEADERS = {"user-agent": "Mozilla/5.0 (compatible; cheap-altari-bot)"}

    def __init__(self, primary: NaverStockClient, session: Optional[Any] = None) -> None:
        self.primary = primary
        self.session = session or requests

    def get_quote(self, symbol: str) -> ResolvedQuote:
        if not is_foreign_symbol(symbol):
            return self.primary.get_quote(symbol)

        ticker = symbol.upper()
        payload = fetch_json(
            self.session,
            self.CHART_URL.format(symbol=ticker),
            provider=self.name,
            symbol=symbol,
            params={"interval": "3mo"},
            headers=self.HEADERS,
        )
        try:
            chart = YahooChartResponse.model_validate(payload)
        except ValidationError as exc:
            raise QuoteNotFoundError("unrecognized chart payload", provider=self.name, symbol=symbol) from exc

        results = chart.chart.result or []
        if not results:
            raise QuoteNotFoundError("empty chart result", provider=self.name, symbol=symbol)

        meta = results[0].meta
        if meta is None or meta.regular_market_price is None or meta.chart_previous_close is None:
            raise QuoteNotFoundError("chart meta lacks price fields", provider=self.name, symbol=symbol)

        price = Decimal(str(meta.regular_market_price))
        previous_close = Decimal(str(meta.chart_previous_close))
        item = BasicQuote(
            item_code=ticker,
            stock_name=meta.symbol or ticker,
            close_price=f"{price:.2f}",
            compare_to_previous_close_price=f"{price - previous_close:.2f}",
        )
        return ResolvedQuote(item=item, frac=True, source=self.name)
