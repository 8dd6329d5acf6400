"""
Values -- numeric primitives shared by every billing computation.

Responsibility:
    Coerces raw record and form values into ``Decimal``, rounds to cents,
    formats amounts for display, and recognizes ``YYYY-MM`` billing months.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Monetary amounts and hours are ``Decimal``, never ``float``.  Floats
      arriving from JSON are converted through ``str`` so no binary noise
      leaks into amounts.
    - Rounding is ROUND_HALF_UP to two places.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")

# Largest amount a payment or derived total may carry.
AMOUNT_CEILING = Decimal("999999999999")

_BILLING_MONTH = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_decimal(value: Any) -> Decimal:
    """
    Read a raw value as a Decimal without defaulting.

    Unreadable input (None, empty strings, booleans, garbage) becomes
    ``Decimal("NaN")`` so that amount validation can reject it as not finite.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        return Decimal("NaN")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).strip().replace(",", ".")
    if not text:
        return Decimal("NaN")
    try:
        return Decimal(text)
    except InvalidOperation:
        return Decimal("NaN")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Read a raw record field as a Decimal, falling back to ``default``.

    Missing, unreadable and non-finite values all fall back.
    """
    parsed = parse_decimal(value)
    if not parsed.is_finite():
        return default
    return parsed


def round_money(amount: Decimal) -> Decimal:
    """Round an amount to cents."""
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_billing_month(value: Any) -> bool:
    """True when ``value`` is a ``YYYY-MM`` string with a real month."""
    return isinstance(value, str) and _BILLING_MONTH.match(value) is not None


def format_amount(amount: Decimal, currency: str = "COP", places: int = 0) -> str:
    """
    Format an amount the way es-CO renders currency: ``$ 1.500.000``.

    Thousands are separated by dots and decimals by a comma.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{abs(rounded):,.{places}f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if rounded < 0 else ""
    symbol = "$" if currency in ("COP", "USD") else currency
    return f"{sign}{symbol} {text}"
