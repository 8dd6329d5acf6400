"""
Pure domain layer.

Immutable records, numeric helpers and result DTOs with NO dependencies on
the ORM, the database, the clock or any I/O.
"""

from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.dtos import AmountResult, CalculationError
from billing_kernel.domain.records import (
    Client,
    Contract,
    ItemType,
    Payment,
    PaymentStatus,
    PaymentType,
    Project,
    ProjectPaymentType,
    RecordId,
    TargetRef,
    TimeEntry,
)
from billing_kernel.domain.values import (
    AMOUNT_CEILING,
    ZERO,
    format_amount,
    parse_decimal,
    round_money,
    to_decimal,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AmountResult",
    "CalculationError",
    "Client",
    "Contract",
    "ItemType",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "Project",
    "ProjectPaymentType",
    "RecordId",
    "TargetRef",
    "TimeEntry",
    "AMOUNT_CEILING",
    "ZERO",
    "format_amount",
    "parse_decimal",
    "round_money",
    "to_decimal",
]
