"""Tests for amount validation (billing_engines.amounts)."""

from decimal import Decimal

import pytest

from billing_engines.amounts import (
    ensure_within_ceiling,
    require_valid_amount,
    validate_amount,
)
from billing_kernel.exceptions import (
    AmountTooLargeError,
    NonPositiveAmountError,
    NotFiniteAmountError,
)


class TestValidateAmount:
    """validate_amount returns results, never raises."""

    def test_valid_amount_rounded_to_cents(self):
        result = validate_amount("1500.005")
        assert result
        assert result.amount == Decimal("1500.01")

    def test_comma_decimal_separator_accepted(self):
        assert validate_amount("12,5").amount == Decimal("12.50")

    def test_ceiling_itself_is_valid(self):
        result = validate_amount(Decimal("999999999999"))
        assert result.success
        assert result.amount == Decimal("999999999999.00")

    def test_above_ceiling_fails_too_large(self):
        result = validate_amount(Decimal("999999999999.01"))
        assert not result
        assert result.error.code == "TOO_LARGE"
        assert result.error.details["ceiling"] == "999999999999"

    @pytest.mark.parametrize("value", [0, "0", -1, "-0.01"])
    def test_non_positive_fails(self, value):
        result = validate_amount(value)
        assert result.error.code == "NON_POSITIVE"

    @pytest.mark.parametrize("value", ["0.004", Decimal("0.001"), "0,0049"])
    def test_sub_cent_amount_fails_non_positive(self, value):
        result = validate_amount(value)
        assert not result
        assert result.error.code == "NON_POSITIVE"

    def test_half_cent_rounds_up_to_valid(self):
        assert validate_amount("0.005").amount == Decimal("0.01")

    @pytest.mark.parametrize("value", [None, "", "abc", float("nan"), float("inf"), True])
    def test_unreadable_fails_not_finite(self, value):
        result = validate_amount(value)
        assert result.error.code == "NOT_FINITE"

    def test_configured_ceiling(self):
        assert validate_amount(150, ceiling=Decimal("100")).error.code == "TOO_LARGE"
        assert validate_amount(100, ceiling=Decimal("100"))

    def test_error_message_in_spanish(self):
        result = validate_amount(0)
        assert "mayor a 0" in result.error.message


class TestRequireValidAmount:
    def test_raises_typed_errors(self):
        with pytest.raises(NotFiniteAmountError):
            require_valid_amount("x")
        with pytest.raises(NonPositiveAmountError):
            require_valid_amount(0)
        with pytest.raises(AmountTooLargeError):
            require_valid_amount(Decimal("1e13"))

    def test_reason_appended_to_message(self):
        with pytest.raises(NonPositiveAmountError, match="valor total"):
            require_valid_amount(0, reason="Revisa el valor total")


class TestEnsureWithinCeiling:
    def test_zero_allowed(self):
        assert ensure_within_ceiling(Decimal("0")) == Decimal("0")

    def test_overflow_raises(self):
        with pytest.raises(AmountTooLargeError):
            ensure_within_ceiling(Decimal("1000000000000"))
