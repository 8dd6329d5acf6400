"""Tests for the JSON file store (billing_services.json_store)."""

import json
from datetime import date
from decimal import Decimal

import pytest

from billing_kernel.exceptions import RecordNotFoundError, StoreError
from billing_services.json_store import JsonFileStore
from billing_services.repositories import BillingStore, PaymentRepository


class TestReads:
    def test_records_from_files(self, json_store):
        contracts = json_store.contracts.get_all()
        assert [c.contract_number for c in contracts] == ["CT-001", "CT-002"]
        assert contracts[0].hourly_rate == Decimal("10000")

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "empty")
        assert store.payments.get_all() == []
        assert store.clients.get_all() == []

    def test_get_by_target(self, json_store):
        assert [p.id for p in json_store.payments.get_by_contract(1)] == [1, 2]
        assert [p.id for p in json_store.payments.get_by_project(1)] == [3]

    def test_get_unknown(self, json_store):
        assert json_store.projects.get(99) is None

    def test_invalid_json(self, data_dir):
        (data_dir / "payments.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError) as exc_info:
            JsonFileStore(data_dir).payments.get_all()
        assert exc_info.value.collection == "payments"

    def test_not_an_array(self, data_dir):
        (data_dir / "clients.json").write_text('{"id": 1}', encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileStore(data_dir).clients.get_all()

    def test_satisfies_protocols(self, json_store):
        assert isinstance(json_store, BillingStore)
        assert isinstance(json_store.payments, PaymentRepository)


class TestWrites:
    def test_add_assigns_next_id(self, json_store, data_dir):
        payment = json_store.payments.add({
            "contract_id": 2,
            "amount": Decimal("1500.50"),
            "payment_date": date(2024, 3, 1),
            "payment_type": "fixed",
        })
        assert payment.id == 4
        assert payment.amount == Decimal("1500.50")

        rows = json.loads((data_dir / "payments.json").read_text(encoding="utf-8"))
        assert rows[-1]["amount"] == 1500.5
        assert rows[-1]["payment_date"] == "2024-03-01"

    def test_integral_decimals_written_as_ints(self, json_store, data_dir):
        json_store.payments.add({"contract_id": 1, "amount": Decimal("200000.00")})
        rows = json.loads((data_dir / "payments.json").read_text(encoding="utf-8"))
        assert rows[-1]["amount"] == 200000
        assert isinstance(rows[-1]["amount"], int)

    def test_first_id_in_new_collection(self, tmp_path):
        store = JsonFileStore(tmp_path)
        assert store.time_entries.add({"contract_id": 1, "hours_used": 2}).id == 1

    def test_update_merges(self, json_store):
        payment = json_store.payments.update(2, {"amount": Decimal("120000")})
        assert payment.amount == Decimal("120000")
        assert payment.description == "Anticipo"

    def test_update_unknown(self, json_store):
        with pytest.raises(RecordNotFoundError):
            json_store.payments.update(99, {"amount": 1})

    def test_delete(self, json_store):
        json_store.payments.delete(1)
        assert [p.id for p in json_store.payments.get_all()] == [2, 3]
        with pytest.raises(RecordNotFoundError):
            json_store.payments.delete(1)

    def test_no_temp_files_left(self, json_store, data_dir):
        json_store.payments.add({"contract_id": 1, "amount": 1})
        assert not list(data_dir.glob("*.tmp"))
