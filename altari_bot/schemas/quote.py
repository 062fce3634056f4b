from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

KOSPI_INDEX_CODE = "KOSPI"

_COMPARE_ALIASES = AliasChoices("compareToPreviousClosePrice", "CompareToPreviousClosePrice")


def parse_decimal(value: Any) -> Decimal:
    """Parse a provider number such as "1,000,000"; anything unparsable is zero."""
    if value is None:
        return Decimal(0)
    try:
        parsed = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not parsed.is_finite():
        return Decimal(0)
    return parsed


class StockItem(Protocol):
    @property
    def stock_id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def price(self) -> Decimal: ...

    @property
    def compare_to_previous_price(self) -> Decimal: ...


class _NaverRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Naver sends most numbers as strings but not all of them.
        if value is None:
            return ""
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value


class BasicQuote(_NaverRecord):
    item_code: str = Field(default="", alias="itemCode")
    stock_name: str = Field(default="", alias="stockName")
    close_price: str = Field(default="", alias="closePrice")
    compare_to_previous_close_price: str = Field(default="", validation_alias=_COMPARE_ALIASES)

    @property
    def stock_id(self) -> str:
        return self.item_code

    @property
    def name(self) -> str:
        return self.stock_name

    @property
    def price(self) -> Decimal:
        return parse_decimal(self.close_price)

    @property
    def compare_to_previous_price(self) -> Decimal:
        return parse_decimal(self.compare_to_previous_close_price)

    def has_price_fields(self) -> bool:
        return bool(self.close_price or self.compare_to_previous_close_price)


class HomeMajor(_NaverRecord):
    item_code: str = Field(default="", alias="itemCode")
    name: str = ""
    close_price: str = Field(default="", alias="closePrice")
    compare_to_previous_close_price: str = Field(default="", validation_alias=_COMPARE_ALIASES)
    fluctuation_ratio: str = Field(default="", alias="fluctuationRatio")


class MajorsQuote(BaseModel):
    """Naver home majors list, projected onto one index entry (KOSPI)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    home_majors: list[HomeMajor] = Field(default_factory=list, alias="homeMajors")
    target_code: str = KOSPI_INDEX_CODE

    def home_major(self) -> HomeMajor | None:
        for major in self.home_majors:
            if major.item_code == self.target_code:
                return major
        return None

    def _require_major(self) -> HomeMajor:
        major = self.home_major()
        if major is None:
            raise LookupError(f"no home major with itemCode={self.target_code}")
        return major

    @property
    def stock_id(self) -> str:
        return self._require_major().item_code

    @property
    def name(self) -> str:
        return self._require_major().name

    @property
    def price(self) -> Decimal:
        return parse_decimal(self._require_major().close_price)

    @property
    def compare_to_previous_price(self) -> Decimal:
        return parse_decimal(self._require_major().compare_to_previous_close_price)


class ResolvedQuote(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    item: Any
    frac: bool
    source: str
