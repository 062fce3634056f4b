from __future__ import annotations

from typing import Any, Optional

import requests
from pydantic import ValidationError

from altari_bot.errors import QuoteNoDataError, QuoteNotFoundError
from altari_bot.integrations.base import fetch_json, is_foreign_symbol
from altari_bot.integrations.naver_rest import NaverStockClient
from altari_bot.schemas.providers import KisProxyResponse
from altari_bot.schemas.quote import BasicQuote, ResolvedQuote, parse_decimal


class KisProxyClient:
    """Overseas price via the local KIS companion service.

    The companion holds the KIS credentials and answers
    ``GET /query?excd=<exchange>&symb=<ticker>`` with the raw
    ``overseas-price`` response. ``rsym`` carries a 4 character realtime
    market prefix (e.g. ``DNASAAPL``) in front of the ticker.
    """

    DEFAULT_BASE_URL = "http://localhost:26704"
    _RSYM_PREFIX_LEN = 4

    def __init__(
        self,
        exchange_code: str,
        primary: NaverStockClient,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.exchange_code = exchange_code
        self.primary = primary
        self.session = session or requests
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

    @property
    def name(self) -> str:
        return f"kis-{self.exchange_code.lower()}"

    def get_quote(self, symbol: str) -> ResolvedQuote:
        if not is_foreign_symbol(symbol):
            return self.primary.get_quote(symbol)

        ticker = symbol.upper()
        payload = fetch_json(
            self.session,
            f"{self.base_url}/query",
            provider=self.name,
            symbol=symbol,
            params={"excd": self.exchange_code, "symb": ticker},
        )
        try:
            result = KisProxyResponse.model_validate(payload)
        except ValidationError as exc:
            raise QuoteNotFoundError("unrecognized proxy payload", provider=self.name, symbol=symbol) from exc

        output = result.output
        if not output.last:
            raise QuoteNoDataError(
                f"no last price rt_cd={result.rt_cd} msg={result.msg1}",
                provider=self.name,
                symbol=symbol,
            )

        last = parse_decimal(output.last)
        base = parse_decimal(output.base)
        display_name = output.rsym[self._RSYM_PREFIX_LEN:] if len(output.rsym) > self._RSYM_PREFIX_LEN else ticker
        item = BasicQuote(
            item_code=ticker,
            stock_name=display_name,
            close_price=f"{last:.2f}",
            compare_to_previous_close_price=f"{last - base:.2f}",
        )
        return ResolvedQuote(item=item, frac=True, source=self.name)
