"""
Module: billing_engines.status
Responsibility:
    Classify payment progress from paid and total amounts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

    classify(0, 0)        -> no_value
    classify(t, t)        -> paid
    classify(150, 100)    -> paid
    classify(30, 100)     -> partial
    classify(0, 100)      -> pending
"""

from __future__ import annotations

from decimal import Decimal

from billing_kernel.domain.records import PaymentStatus
from billing_kernel.domain.values import HUNDRED, ZERO


def payment_percentage(paid_amount: Decimal, total_value: Decimal) -> Decimal:
    """``paid / total x 100``, or zero when there is no total."""
    if total_value <= ZERO:
        return ZERO
    return paid_amount / total_value * HUNDRED


def pending_amount(paid_amount: Decimal, total_value: Decimal) -> Decimal:
    """Outstanding balance, never negative."""
    return max(ZERO, total_value - paid_amount)


def classify(paid_amount: Decimal, total_value: Decimal) -> PaymentStatus:
    """Map paid vs. total to a payment status."""
    if total_value == ZERO:
        return PaymentStatus.NO_VALUE
    percentage = payment_percentage(paid_amount, total_value)
    if percentage >= HUNDRED:
        return PaymentStatus.PAID
    if percentage > ZERO:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING
