"""Tests for payment history grouping (billing_engines.history)."""

from datetime import date
from decimal import Decimal

from billing_engines.history import (
    group_payments_by_type,
    last_payment_date,
    payments_for,
)
from billing_kernel.domain.records import Payment, PaymentType, TargetRef


def _payment(pid, amount, payment_type, day=None, **kwargs):
    return Payment(
        id=pid,
        amount=Decimal(amount),
        payment_type=payment_type,
        payment_date=day,
        **kwargs,
    )


class TestGroupPaymentsByType:
    def test_groups_in_first_seen_order_with_labels(self):
        rows = [
            _payment(1, "100", PaymentType.SUPPORT_EVOLUTIVE, date(2024, 1, 1)),
            _payment(2, "200", PaymentType.RECURRING_SUPPORT, date(2024, 1, 5)),
            _payment(3, "50", PaymentType.SUPPORT_EVOLUTIVE, date(2024, 2, 1)),
        ]
        groups = group_payments_by_type(rows)
        assert [g.label for g in groups] == ["Soporte y Evolutivos", "Soporte Fijo Mensual"]
        assert groups[0].total_amount == Decimal("150")
        assert [p.id for p in groups[0].payments] == [3, 1]
        assert groups[0].payment_count == 2

    def test_untyped_counts_as_fixed_and_unknown_kept(self):
        groups = group_payments_by_type([
            _payment(1, "10", None),
            _payment(2, "20", "canje"),
            _payment(3, "5", PaymentType.PERCENTAGE),
        ])
        assert [g.label for g in groups] == ["Pago Fijo", "canje", "Porcentaje"]

    def test_undated_sort_last(self):
        groups = group_payments_by_type([
            _payment(1, "10", PaymentType.PROJECT_SCOPE),
            _payment(2, "10", PaymentType.PROJECT_SCOPE, date(2024, 1, 1)),
        ])
        assert groups[0].label == "Proyectos de Alcance Fijo"
        assert [p.id for p in groups[0].payments] == [2, 1]


class TestSelection:
    def test_payments_for_target(self, payments):
        assert [p.id for p in payments_for(TargetRef.contract(1), payments)] == [1, 2]
        assert [p.id for p in payments_for(TargetRef.project(1), payments)] == [3]
        assert payments_for(TargetRef.project(99), payments) == []

    def test_last_payment_date(self, payments):
        assert last_payment_date(payments) == date(2024, 2, 20)
        assert last_payment_date([]) is None
