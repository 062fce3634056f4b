from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from altari_bot.schemas.quote import StockItem

UP_ICON = "🔺"
DOWN_ICON = "🦋"

PRICE_LABEL = "현재가"
CHANGE_LABEL = "전일비"

# Characters Telegram MarkdownV2 requires to be escaped outside entities.
MARKDOWN_V2_RESERVED = "_*[]()~`>#+-=|{}.!"

_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class QuoteChange:
    previous_close: Decimal
    delta: Decimal
    percent: Decimal
    icon: str


def escape_markdown(text: str) -> str:
    return "".join(f"\\{ch}" if ch in MARKDOWN_V2_RESERVED else ch for ch in text)


def _icon_for(value: Decimal) -> str:
    if value > 0:
        return UP_ICON
    if value < 0:
        return DOWN_ICON
    return ""


def compute_change(item: StockItem) -> QuoteChange:
    """Previous close, percent change and direction icon for a quote.

    A zero previous close has no meaningful ratio; percent is reported as 0
    and the icon follows the sign of the raw delta.
    """
    price = item.price
    delta = item.compare_to_previous_price
    previous_close = price - delta

    if previous_close == 0:
        return QuoteChange(previous_close=previous_close, delta=delta, percent=Decimal(0), icon=_icon_for(delta))

    percent = delta / previous_close * _HUNDRED
    return QuoteChange(previous_close=previous_close, delta=delta, percent=percent, icon=_icon_for(percent))


def format_amount(value: Decimal, frac: bool) -> str:
    # str.format grouping is locale independent: "," thousands, "." decimals.
    return f"{value:,.2f}" if frac else f"{value:,.0f}"


def render_quote_text(item: StockItem, frac: bool) -> str:
    change = compute_change(item)
    price_text = f"{PRICE_LABEL}: {format_amount(item.price, frac)}"
    delta_text = (
        f"{CHANGE_LABEL}: {change.icon}{format_amount(abs(change.delta), frac)} "
        f"({abs(change.percent):.2f}%)"
    )
    # MarkdownV2 rejects a bare ".", "(" or ")", so the numeric lines are escaped whole.
    return f"*{escape_markdown(item.name)}*\n{escape_markdown(price_text)}\n{escape_markdown(delta_text)}"
