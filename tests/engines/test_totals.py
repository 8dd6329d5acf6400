"""Tests for total resolution (billing_engines.totals)."""

from decimal import Decimal

import pytest

from billing_engines.totals import (
    contract_total,
    effective_hourly_rate,
    find_linked_contract,
    project_total,
    resolve_total,
)
from billing_kernel.domain.records import Contract, Project
from billing_kernel.exceptions import AmountTooLargeError


@pytest.fixture
def rate_contract():
    return Contract(id=7, hourly_rate=Decimal("80000"), total_hours=Decimal("40"))


class TestResolveTotal:
    """Fallback order: explicit total, own rate, contract rate, zero."""

    def test_explicit_total_wins_over_rate(self):
        project = Project(
            id=1,
            total_amount=Decimal("500000"),
            hourly_rate=Decimal("90000"),
            estimated_hours=Decimal("100"),
        )
        assert resolve_total(project) == Decimal("500000")

    def test_own_rate_times_hours(self):
        project = Project(
            id=1, hourly_rate=Decimal("50000"), estimated_hours=Decimal("10")
        )
        assert resolve_total(project) == Decimal("500000")

    def test_linked_contract_rate(self, rate_contract):
        project = Project(id=1, contract_id=7, estimated_hours=Decimal("20"))
        assert resolve_total(project, rate_contract) == Decimal("1600000")

    def test_independent_project_ignores_contract_rate(self, rate_contract):
        project = Project(
            id=1, contract_id=7, is_independent=True, estimated_hours=Decimal("20")
        )
        assert resolve_total(project, rate_contract) == Decimal("0")

    def test_no_hours_resolves_zero(self, rate_contract):
        project = Project(id=1, contract_id=7, hourly_rate=Decimal("50000"))
        assert resolve_total(project, rate_contract) == Decimal("0")

    def test_contract_total(self, rate_contract):
        assert resolve_total(rate_contract) == Decimal("3200000")

    def test_contract_without_rate_is_zero(self):
        assert contract_total(Contract(id=1, total_hours=Decimal("10"))) == Decimal("0")

    def test_overflow_raises_too_large(self):
        project = Project(
            id=1,
            hourly_rate=Decimal("999999999"),
            estimated_hours=Decimal("100000"),
        )
        with pytest.raises(AmountTooLargeError) as exc_info:
            project_total(project)
        assert exc_info.value.code == "TOO_LARGE"
        assert "horas estimadas" in str(exc_info.value)


class TestLinkedContract:
    def test_find_by_id(self, rate_contract):
        project = Project(id=1, contract_id=7)
        assert find_linked_contract(project, [Contract(id=3), rate_contract]) is rate_contract

    def test_missing_contract(self, rate_contract):
        assert find_linked_contract(Project(id=1, contract_id=99), [rate_contract]) is None
        assert find_linked_contract(Project(id=1), [rate_contract]) is None

    def test_effective_rate_prefers_project(self, rate_contract):
        own = Project(id=1, contract_id=7, hourly_rate=Decimal("50000"))
        inherited = Project(id=2, contract_id=7)
        assert effective_hourly_rate(own, rate_contract) == Decimal("50000")
        assert effective_hourly_rate(inherited, rate_contract) == Decimal("80000")
        assert effective_hourly_rate(inherited, None) == Decimal("0")
