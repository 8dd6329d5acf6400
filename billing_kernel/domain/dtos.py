"""
Result DTOs for expected, recoverable failures.

Engines return these instead of raising when the failure is a user-input
condition the caller is expected to render (invalid amount, bad
percentage).  Programming errors still raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from billing_kernel.exceptions import BillingError


@dataclass(frozen=True)
class CalculationError:
    """
    A single calculation failure.

    Contract:
        Carries the machine-readable code of the exception it was built
        from, its human-readable message, and the structured values that
        caused it (percentage, hourly rate, estimated hours...).

    Non-goals:
        - Does NOT raise -- it IS the error representation.
    """

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BillingError) -> CalculationError:
        return cls(code=exc.code, message=str(exc), details=exc.details())


@dataclass(frozen=True)
class AmountResult:
    """Outcome of validating one amount.

    ``bool(result)`` is True only when validation succeeded.
    """

    success: bool
    amount: Decimal | None = None
    error: CalculationError | None = None

    @classmethod
    def ok(cls, amount: Decimal) -> AmountResult:
        return cls(success=True, amount=amount)

    @classmethod
    def fail(cls, error: CalculationError) -> AmountResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success
