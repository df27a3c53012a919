"""Number, money and date formatting shared by the preview and the exports."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from dateutil import parser as date_parser

import config

_CENTS = Decimal("0.01")
_THOUSANDTHS = Decimal("0.001")


def _to_decimal(value: float) -> Decimal:
    # repr() keeps the shortest round-tripping form, so 2.675 stays 2.675
    return Decimal(repr(float(value)))


def format_currency(amount: float) -> str:
    """Render an amount with two decimals and comma grouping: 3495.3625 -> "3,495.36"."""
    rounded = _to_decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:,.2f}"


def format_number(num: float) -> str:
    """Like format_currency but keeps up to three decimals and drops trailing zeros."""
    rounded = _to_decimal(num).quantize(_THOUSANDTHS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "0"
    text = f"{rounded:,.3f}"
    return text.rstrip("0").rstrip(".")


def format_money(amount: float) -> str:
    return f"{config.CURRENCY_SYMBOL}{format_currency(amount)}"


def format_rate(vat_rate: float) -> str:
    """VAT percentage as typed: 7.5 -> "7.5", 15.0 -> "15"."""
    return format_number(vat_rate).replace(",", "")


def format_date(value: str | date | None, placeholder: str = "") -> str:
    """Render a stored date as "October 19, 2026"; empty or unparsable input gives the placeholder."""
    if not value:
        return placeholder
    if isinstance(value, (date, datetime)):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            return placeholder
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def today_iso() -> str:
    return date.today().isoformat()
