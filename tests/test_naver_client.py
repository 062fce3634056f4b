import unittest
from decimal import Decimal
from unittest.mock import MagicMock

import requests

from altari_bot.errors import ProviderUnavailableError, QuoteNotFoundError
from altari_bot.integrations.naver_rest import NaverStockClient
from altari_bot.schemas.quote import BasicQuote, MajorsQuote


def _session_returning(payload):
    session = MagicMock()
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session


class TestNaverStockClient(unittest.TestCase):
    def test_domestic_stock_uses_basic_endpoint(self):
        session = _session_returning(
            {
                "itemCode": "259960",
                "stockName": "크래프톤",
                "closePrice": "1,000,000",
                "compareToPreviousClosePrice": "230,000",
            }
        )
        client = NaverStockClient(session=session)

        resolved = client.get_quote("259960")

        self.assertIsInstance(resolved.item, BasicQuote)
        self.assertFalse(resolved.frac)
        self.assertEqual(resolved.source, "naver")
        self.assertEqual(resolved.item.price, Decimal("1000000"))
        session.get.assert_called_once_with(
            "https://m.stock.naver.com/api/stock/259960/basic",
            params=None,
            headers=None,
            timeout=5,
        )

    def test_kospi_uses_majors_endpoint(self):
        session = _session_returning(
            {
                "homeMajors": [
                    {"itemCode": "KOSPI", "name": "코스피", "closePrice": "2,650.31", "compareToPreviousClosePrice": "12.40"}
                ]
            }
        )
        client = NaverStockClient(session=session)

        resolved = client.get_quote("kospi")

        self.assertIsInstance(resolved.item, MajorsQuote)
        self.assertFalse(resolved.frac)
        self.assertEqual(resolved.item.name, "코스피")
        self.assertEqual(session.get.call_args.args[0], "https://m.stock.naver.com/api/home/majors")

    def test_spy_uses_etf_endpoint_with_fraction(self):
        session = _session_returning(
            {"itemCode": "SPY", "stockName": "SPDR S&P 500", "closePrice": "512.10", "compareToPreviousClosePrice": "-1.20"}
        )
        client = NaverStockClient(session=session)

        resolved = client.get_quote("SPY")

        self.assertTrue(resolved.frac)
        self.assertEqual(session.get.call_args.args[0], "https://api.stock.naver.com/etf/SPY/basic")

    def test_majors_without_target_index_is_not_found(self):
        session = _session_returning(
            {"homeMajors": [{"itemCode": "KOSDAQ", "name": "코스닥", "closePrice": "870.12"}]}
        )
        client = NaverStockClient(session=session)

        with self.assertRaises(QuoteNotFoundError):
            client.get_quote("kospi")

    def test_unrecognized_payload_is_not_found(self):
        for payload in ({"code": "StockConflict"}, {"homeMajors": []}, [], "oops"):
            client = NaverStockClient(session=_session_returning(payload))
            with self.assertRaises(QuoteNotFoundError):
                client.get_quote("999999")

    def test_invalid_json_is_not_found(self):
        session = MagicMock()
        response = MagicMock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("Expecting value")
        session.get.return_value = response

        with self.assertRaises(QuoteNotFoundError):
            NaverStockClient(session=session).get_quote("259960")

    def test_transport_error_is_typed_and_recoverable(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("dns failure")

        with self.assertRaises(ProviderUnavailableError) as ctx:
            NaverStockClient(session=session).get_quote("259960")

        self.assertEqual(ctx.exception.provider, "naver")
        self.assertEqual(ctx.exception.symbol, "259960")

    def test_http_error_status_is_unavailable(self):
        session = MagicMock()
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")
        session.get.return_value = response

        with self.assertRaises(ProviderUnavailableError):
            NaverStockClient(session=session).get_quote("259960")


if __name__ == "__main__":
    unittest.main()
