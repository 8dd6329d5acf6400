"""Tests for payment status classification (billing_engines.status)."""

from decimal import Decimal

import pytest

from billing_engines.status import classify, payment_percentage, pending_amount
from billing_kernel.domain.records import PaymentStatus


class TestClassify:
    @pytest.mark.parametrize(
        "paid,total,expected",
        [
            ("0", "0", PaymentStatus.NO_VALUE),
            ("50", "0", PaymentStatus.NO_VALUE),
            ("100", "100", PaymentStatus.PAID),
            ("150", "100", PaymentStatus.PAID),
            ("30", "100", PaymentStatus.PARTIAL),
            ("0.01", "100", PaymentStatus.PARTIAL),
            ("0", "100", PaymentStatus.PENDING),
        ],
    )
    def test_classification(self, paid, total, expected):
        assert classify(Decimal(paid), Decimal(total)) == expected


class TestAmounts:
    def test_pending_never_negative(self):
        assert pending_amount(Decimal("150"), Decimal("100")) == Decimal("0")

    def test_pending_balance(self):
        assert pending_amount(Decimal("300000"), Decimal("1000000")) == Decimal("700000")

    def test_percentage_zero_without_total(self):
        assert payment_percentage(Decimal("10"), Decimal("0")) == Decimal("0")

    def test_percentage(self):
        pct = payment_percentage(Decimal("800000"), Decimal("1500000"))
        assert round(pct, 1) == Decimal("53.3")
