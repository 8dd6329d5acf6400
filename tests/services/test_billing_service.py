"""Tests for BillingService over the JSON store."""

from datetime import date
from decimal import Decimal

import pytest

from billing_config import BillingConfig
from billing_engines import FixedPayment, PercentagePayment, ProjectScopePayment
from billing_kernel.domain.records import (
    ItemType,
    PaymentStatus,
    PaymentType,
    ProjectPaymentType,
    TargetRef,
)
from billing_kernel.exceptions import (
    HoursExceededError,
    InvalidHoursError,
    RecordInUseError,
    RecordNotFoundError,
)
from billing_services import BillingService, JsonFileStore


class TestOverview:
    def test_groups_sorted_by_client(self, service):
        groups = service.billing_overview()
        assert [g.client_name for g in groups] == ["Acme", "Globex Ltda"]
        assert groups[0].paid_amount == Decimal("800000")

    def test_sorting_can_be_disabled(self, json_store, clock):
        service = BillingService(json_store, BillingConfig(sort_groups=False), clock)
        names = [g.client_name for g in service.billing_overview()]
        assert names == ["Acme", "Globex Ltda"]
        assert [g.client_name for g in service.billing_overview(sort=True)] == names

    def test_configured_placeholder(self, tmp_path, clock):
        store = JsonFileStore(tmp_path)
        store.contracts.add({"client_id": 9, "total_hours": 1, "hourly_rate": 1})
        config = BillingConfig(unknown_client_label="Sin cliente")
        groups = BillingService(store, config, clock).billing_overview()
        assert groups[0].client_name == "Sin cliente"

    def test_filtered_items(self, service):
        items = service.billing_items(payment_status="pending", item_type="contract")
        assert [i.name for i in items] == ["CT-002"]


class TestRegisterPayment:
    def test_percentage_payment_stored(self, service, json_store):
        outcome = service.register_payment(
            TargetRef.contract(1), PercentagePayment(percentage="10")
        )
        assert outcome
        assert outcome.payment.id == 4
        assert outcome.payment.amount == Decimal("100000")
        assert outcome.payment.payment_date == date(2024, 3, 15)
        assert json_store.payments.get(4).contract_id == 1

    def test_overview_reflects_new_payment(self, service):
        service.register_payment(TargetRef.contract(2), FixedPayment(amount="1600000"))
        globex = service.billing_overview()[1]
        assert globex.payment_status == PaymentStatus.PAID

    def test_rejected_payment_not_stored(self, service, json_store):
        outcome = service.register_payment(
            TargetRef.contract(1), FixedPayment(amount="-5")
        )
        assert not outcome
        assert outcome.error.code == "NON_POSITIVE"
        assert outcome.payment is None
        assert len(json_store.payments.get_all()) == 3

    def test_project_scope_through_service(self, service):
        outcome = service.register_payment(
            TargetRef.contract(2),
            ProjectScopePayment(
                selected_project_id=2,
                project_payment_type=ProjectPaymentType.PERCENTAGE,
                percentage="50",
            ),
        )
        assert outcome.payment.amount == Decimal("800000")
        assert outcome.payment.payment_type == PaymentType.PROJECT_SCOPE

    def test_from_form(self, service):
        outcome = service.register_payment_from_form(
            TargetRef.project(1),
            {
                "paymentType": "support_evolutive",
                "amount": "75000",
                "description": "Ajustes",
                "paymentDate": "2024-03-10",
            },
        )
        assert outcome.payment.description == "Soporte y evolutivos - Ajustes"
        assert outcome.payment.payment_date == date(2024, 3, 10)

    def test_from_form_unknown_type(self, service):
        outcome = service.register_payment_from_form(
            TargetRef.project(1), {"paymentType": "barter", "amount": "1"}
        )
        assert outcome.error.code == "UNSUPPORTED_PAYMENT_TYPE"

    def test_unknown_target(self, service):
        with pytest.raises(RecordNotFoundError):
            service.register_payment(TargetRef.contract(99), FixedPayment(amount=1))

    def test_configured_ceiling(self, json_store, clock):
        service = BillingService(
            json_store, BillingConfig(amount_ceiling=Decimal("1000")), clock
        )
        outcome = service.register_payment(TargetRef.contract(1), FixedPayment(amount=5000))
        assert outcome.error.code == "TOO_LARGE"


class TestEditPayment:
    def test_legacy_fixed_payment_edits_as_recurring(self, service):
        edit = service.edit_payment_form(2)
        assert edit.payment_type == PaymentType.RECURRING_SUPPORT
        assert edit.billing_month == "2024-03"
        assert edit.amount == Decimal("100000")

    def test_update_payment(self, service, json_store):
        edit = service.edit_payment_form(2)
        outcome = service.update_payment(2, edit)
        assert outcome
        stored = json_store.payments.get(2)
        assert stored.payment_type == PaymentType.RECURRING_SUPPORT
        assert stored.description == "Soporte fijo - 2024-03 - Anticipo"
        assert stored.billing_month == "2024-03"
        assert stored.contract_id == 1

    def test_update_unknown(self, service):
        with pytest.raises(RecordNotFoundError):
            service.edit_payment_form(99)

    def test_delete_payment(self, service, json_store):
        service.delete_payment(3)
        assert json_store.payments.get(3) is None


class TestHistoryAndUsage:
    def test_payment_history(self, service):
        groups = service.payment_history(TargetRef.contract(1))
        assert [g.label for g in groups] == ["Soporte Fijo Mensual", "Pago Fijo"]

    def test_contract_usage(self, service):
        usage = service.contract_usage(1)
        assert usage.used_hours == Decimal("40.5")
        assert usage.entries_count == 2

    def test_project_usage_with_contract(self, service):
        assert service.project_usage(3).current_cost == Decimal("200000")

    def test_add_time_entry(self, service):
        entry = service.add_time_entry(TargetRef.contract(1), Decimal("9.5"))
        assert entry.id == 4
        assert entry.entry_date == date(2024, 3, 15)
        assert service.contract_usage(1).remaining_hours == Decimal("50")

    def test_time_entry_over_budget(self, service):
        with pytest.raises(HoursExceededError):
            service.add_time_entry(TargetRef.contract(1), Decimal("60"))

    def test_project_time_entry(self, service):
        entry = service.add_time_entry(TargetRef.project(1), Decimal("3"), "Diseño")
        assert entry.project_id == 1

    @pytest.mark.parametrize("hours", [Decimal("-50"), Decimal("0"), "abc", None])
    def test_contract_entry_rejects_non_positive_hours(self, service, json_store, hours):
        with pytest.raises(InvalidHoursError) as exc_info:
            service.add_time_entry(TargetRef.contract(1), hours)
        assert exc_info.value.code == "INVALID_HOURS"
        assert len(json_store.time_entries.get_all()) == 3
        assert service.contract_usage(1).remaining_hours == Decimal("59.5")

    @pytest.mark.parametrize("hours", [Decimal("0"), Decimal("-1"), "x"])
    def test_project_entry_rejects_non_positive_hours(self, service, json_store, hours):
        with pytest.raises(InvalidHoursError):
            service.add_time_entry(TargetRef.project(1), hours)
        assert len(json_store.time_entries.get_all()) == 3


class TestDeletion:
    def test_contract_with_entries_in_use(self, service):
        with pytest.raises(RecordInUseError) as exc_info:
            service.delete_contract(1)
        assert exc_info.value.entries_count == 2

    def test_delete_contract(self, service, json_store):
        service.delete_contract(2)
        assert json_store.contracts.get(2) is None

    def test_project_with_entries_in_use(self, service):
        with pytest.raises(RecordInUseError):
            service.delete_project(3)

    def test_delete_project(self, service, json_store):
        service.delete_project(1)
        assert [i.item_type for i in service.billing_items()] == [
            ItemType.CONTRACT,
            ItemType.CONTRACT,
        ]

    def test_delete_unknown(self, service):
        with pytest.raises(RecordNotFoundError):
            service.delete_project(99)
