"""
Module: billing_engines.history
Responsibility:
    Payment history of a single contract or project: its payment rows,
    grouped by payment type with Spanish labels and per-type totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Usage:
    from billing_engines.history import group_payments_by_type, payments_for

    rows = payments_for(TargetRef.project(7), all_payments)
    for group in group_payments_by_type(rows):
        print(group.label, group.total_amount)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from billing_kernel.domain.records import ItemType, Payment, PaymentType, TargetRef
from billing_kernel.domain.values import ZERO

PAYMENT_TYPE_LABELS: dict[PaymentType, str] = {
    PaymentType.RECURRING_SUPPORT: "Soporte Fijo Mensual",
    PaymentType.PROJECT_SCOPE: "Proyectos de Alcance Fijo",
    PaymentType.SUPPORT_EVOLUTIVE: "Soporte y Evolutivos",
    PaymentType.FIXED: "Pago Fijo",
    PaymentType.PERCENTAGE: "Porcentaje",
}


@dataclass(frozen=True)
class PaymentTypeGroup:
    """Payments of one type, newest first."""

    payment_type: PaymentType | str
    label: str
    payments: tuple[Payment, ...]
    total_amount: Decimal

    @property
    def payment_count(self) -> int:
        return len(self.payments)


def payment_type_label(payment_type: PaymentType | str | None) -> str:
    if isinstance(payment_type, PaymentType):
        return PAYMENT_TYPE_LABELS[payment_type]
    return str(payment_type) if payment_type else PAYMENT_TYPE_LABELS[PaymentType.FIXED]


def payments_for(target: TargetRef, payments: Iterable[Payment]) -> list[Payment]:
    """The payment rows billed against ``target``."""
    if target.item_type == ItemType.CONTRACT:
        return [p for p in payments if p.contract_id == target.item_id]
    return [p for p in payments if p.project_id == target.item_id]


def last_payment_date(payments: Iterable[Payment]) -> date | None:
    dates = [p.payment_date for p in payments if p.payment_date is not None]
    return max(dates) if dates else None


def _payment_day(payment: Payment) -> date:
    return payment.payment_date or date.min


def group_payments_by_type(payments: Iterable[Payment]) -> list[PaymentTypeGroup]:
    """
    Group one entity's payments by type.

    Groups keep first-seen order.  Untyped payments count as ``fixed``;
    unknown stored tags get their own group labelled with the raw tag.
    Payments without a date sort last.
    """
    grouped: dict[PaymentType | str, list[Payment]] = {}
    for payment in payments:
        key = payment.payment_type or PaymentType.FIXED
        grouped.setdefault(key, []).append(payment)

    return [
        PaymentTypeGroup(
            payment_type=key,
            label=payment_type_label(key),
            payments=tuple(sorted(rows, key=_payment_day, reverse=True)),
            total_amount=sum((p.amount for p in rows), ZERO),
        )
        for key, rows in grouped.items()
    ]
