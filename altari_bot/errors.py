from __future__ import annotations


class QuoteProviderError(Exception):
    """Base error for a single provider failing to produce a quote."""

    def __init__(self, message: str, *, provider: str = "", symbol: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.symbol = symbol


class ProviderUnavailableError(QuoteProviderError):
    pass


class QuoteNotFoundError(QuoteProviderError):
    pass


class QuoteNoDataError(QuoteNotFoundError):
    pass


class NoProviderSucceededError(Exception):
    def __init__(self, symbol: str, errors: list[QuoteProviderError] | None = None) -> None:
        super().__init__(f"no provider resolved symbol={symbol}")
        self.symbol = symbol
        self.errors = list(errors or [])


class WebhookSignatureError(Exception):
    pass
