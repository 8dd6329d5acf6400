"""
Module: billing_engines.amounts
Responsibility:
    Bounds-check a monetary amount: finite, strictly positive and not above
    the numeric ceiling.  Valid amounts come back rounded to cents.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - ``validate_amount`` never raises; it returns a failed ``AmountResult``.
    - ``require_valid_amount`` raises the matching ``AmountError`` subclass
      and is what the other engines use internally.

Usage:
    from billing_engines.amounts import validate_amount

    result = validate_amount("1500000")
    if result:
        store(result.amount)
    else:
        show(result.error.message)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from billing_kernel.domain.dtos import AmountResult, CalculationError
from billing_kernel.domain.values import (
    AMOUNT_CEILING,
    ZERO,
    parse_decimal,
    round_money,
)
from billing_kernel.exceptions import (
    AmountError,
    AmountTooLargeError,
    NonPositiveAmountError,
    NotFiniteAmountError,
)
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.amounts")


def require_valid_amount(
    value: Any,
    *,
    ceiling: Decimal = AMOUNT_CEILING,
    reason: str | None = None,
) -> Decimal:
    """
    Validate ``value`` and return it rounded to two decimal places.

    Args:
        value: Raw amount (Decimal, int, float or numeric string).
        ceiling: Largest accepted amount.
        reason: Extra context appended to the error message, naming the
            inputs the amount was derived from.

    Raises:
        NotFiniteAmountError: NaN, infinite or unreadable.
        NonPositiveAmountError: zero or negative once rounded to cents.
        AmountTooLargeError: greater than ``ceiling``.
    """
    amount = parse_decimal(value)
    if not amount.is_finite():
        raise NotFiniteAmountError(value)
    if amount <= ZERO:
        raise NonPositiveAmountError(amount, reason)
    if amount > ceiling:
        raise AmountTooLargeError(amount, ceiling, reason)
    rounded = round_money(amount)
    # Sub-cent amounts round to 0.00.
    if rounded <= ZERO:
        raise NonPositiveAmountError(amount, reason)
    return rounded


def ensure_within_ceiling(
    amount: Decimal,
    *,
    ceiling: Decimal = AMOUNT_CEILING,
    reason: str | None = None,
) -> Decimal:
    """Raise ``AmountTooLargeError`` if ``amount`` exceeds the ceiling.

    Zero is allowed; used for intermediate products such as derived totals.
    """
    if amount > ceiling:
        raise AmountTooLargeError(amount, ceiling, reason)
    return amount


def validate_amount(value: Any, *, ceiling: Decimal = AMOUNT_CEILING) -> AmountResult:
    """
    Check ``0 < value <= ceiling`` and finiteness.

    Pure function; returns a result instead of raising.
    """
    try:
        amount = require_valid_amount(value, ceiling=ceiling)
    except AmountError as exc:
        logger.debug("amount_rejected", extra={
            "value": str(value),
            "code": exc.code,
        })
        return AmountResult.fail(CalculationError.from_exception(exc))
    return AmountResult.ok(amount)
