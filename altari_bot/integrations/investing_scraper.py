from __future__ import annotations

from typing import Any, Optional

import requests
from bs4 import BeautifulSoup, NavigableString, Tag
from pydantic import ValidationError

from altari_bot.errors import QuoteNotFoundError
from altari_bot.integrations.base import fetch_json
from altari_bot.integrations.naver_rest import NaverStockClient
from altari_bot.schemas.providers import InvestingChartResponse
from altari_bot.schemas.quote import BasicQuote, ResolvedQuote, parse_decimal

# Investing pair ids for the instruments this path ever served.
INVESTING_PAIR_IDS = {
    "BOTZ": "1056565",
    "QQQ": "651",
    "SPY": "525",
}

SYMBOL_ELEMENT_ID = "chart-info-symbol"
LAST_ELEMENT_ID = "chart-info-last"
CHANGE_ELEMENT_ID = "chart-info-change"


def find_text_by_id(root: Tag, element_id: str) -> str | None:
    """Depth-first search for ``id=element_id``; returns its first non-blank text."""
    stack: list[Tag] = [root]
    while stack:
        node = stack.pop()
        if node.get("id") == element_id:
            for descendant in node.descendants:
                if isinstance(descendant, NavigableString) and descendant.strip():
                    return descendant.strip()
            return None
        children = [child for child in node.children if isinstance(child, Tag)]
        stack.extend(reversed(children))
    return None


class InvestingChartClient:
    """Legacy scraper of the Investing chart-info widget.

    Not part of the default resolver chain; kept for the allow-listed ETFs.
    """

    name = "investing"

    CHART_INFO_URL = "https://www.investing.com/common/modules/js_instrument_chart/api/data.php"
    HEADERS = {
        "user-agent": "Mozilla/5.0 (compatible; cheap-altari-bot)",
        "x-requested-with": "XMLHttpRequest",
    }

    def __init__(
        self,
        primary: NaverStockClient,
        session: Optional[Any] = None,
        pair_ids: Optional[dict[str, str]] = None,
    ) -> None:
        self.primary = primary
        self.session = session or requests
        self.pair_ids = dict(INVESTING_PAIR_IDS if pair_ids is None else pair_ids)

    def parse_chart_info(self, markup: str, symbol: str) -> BasicQuote:
        soup = BeautifulSoup(markup, "html.parser")
        name = find_text_by_id(soup, SYMBOL_ELEMENT_ID)
        last = find_text_by_id(soup, LAST_ELEMENT_ID)
        change = find_text_by_id(soup, CHANGE_ELEMENT_ID)
        if not name or not last:
            raise QuoteNotFoundError("chart info markup lacks symbol or price", provider=self.name, symbol=symbol)

        price = parse_decimal(last)
        delta = parse_decimal(change)
        return BasicQuote(
            item_code=symbol,
            stock_name=name,
            close_price=f"{price:.2f}",
            compare_to_previous_close_price=f"{delta:.2f}",
        )

    def get_quote(self, symbol: str) -> ResolvedQuote:
        ticker = symbol.upper()
        pair_id = self.pair_ids.get(ticker)
        if pair_id is None:
            return self.primary.get_quote(symbol)

        payload = fetch_json(
            self.session,
            self.CHART_INFO_URL,
            provider=self.name,
            symbol=symbol,
            params={"pair_id": pair_id, "chart_type": "area", "pair_interval": "86400"},
            headers=self.HEADERS,
        )
        try:
            chart = InvestingChartResponse.model_validate(payload)
        except ValidationError as exc:
            raise QuoteNotFoundError("unrecognized chart info payload", provider=self.name, symbol=symbol) from exc
        if not chart.html.chart_info:
            raise QuoteNotFoundError("empty chart info", provider=self.name, symbol=symbol)

        item = self.parse_chart_info(chart.html.chart_info, ticker)
        return ResolvedQuote(item=item, frac=True, source=self.name)
