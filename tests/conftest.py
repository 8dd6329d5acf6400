"""
Pytest fixtures for the billing test suite.

Provides:
- Sample clients, contracts, projects, payments and time entries
- A JSON data directory seeded with the same records
- JSON and in-memory SQLite stores
- A deterministic clock and a clean logging state
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from billing_config import BillingConfig
from billing_kernel.db.engine import create_tables, init_engine_from_url, reset_engine
from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.domain.records import Client, Contract, Payment, Project, TimeEntry
from billing_kernel.logging_config import LogContext, reset_logging
from billing_services import BillingService, JsonFileStore, SqlStore


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def clock():
    """Clock fixed at 2024-03-15 10:00 UTC."""
    return DeterministicClock(datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc))


# ============================================================================
# Raw rows, as stored in the JSON files
# ============================================================================


@pytest.fixture
def client_rows():
    return [
        {"id": 1, "name": "Acme", "company": "Acme SAS", "email": "pagos@acme.co"},
        {"id": 2, "name": "", "company": "Globex Ltda"},
    ]


@pytest.fixture
def contract_rows():
    return [
        # 100 h x 10,000 = 1,000,000
        {
            "id": 1,
            "client_id": 1,
            "contract_number": "CT-001",
            "description": "Soporte anual",
            "total_hours": 100,
            "hourly_rate": 10000,
            "billed_amount": 999,
            "status": "active",
        },
        # 20 h x 80,000 = 1,600,000
        {
            "id": 2,
            "client_id": 2,
            "contract_number": "CT-002",
            "total_hours": 20,
            "hourly_rate": 80000,
            "status": "active",
        },
    ]


@pytest.fixture
def project_rows():
    return [
        {
            "id": 1,
            "name": "Portal clientes",
            "is_independent": True,
            "client_name": "Acme",
            "total_amount": 500000,
            "status": "in_progress",
        },
        {
            "id": 2,
            "name": "Migración",
            "contract_id": 2,
            "is_independent": False,
            "estimated_hours": 20,
        },
        {
            "id": 3,
            "name": "App móvil",
            "contract_id": 2,
            "is_independent": False,
            "hourly_rate": 50000,
            "estimated_hours": 10,
        },
    ]


@pytest.fixture
def payment_rows():
    return [
        {
            "id": 1,
            "contract_id": 1,
            "amount": 200000,
            "description": "Soporte fijo - 2024-01",
            "payment_date": "2024-01-31",
            "payment_type": "recurring_support",
            "billing_month": "2024-01",
        },
        {
            "id": 2,
            "contract_id": 1,
            "amount": 100000,
            "description": "Anticipo",
            "payment_date": "2024-02-15",
            "payment_type": "fixed",
        },
        {
            "id": 3,
            "project_id": 1,
            "amount": 500000,
            "description": "Pago total",
            "payment_date": "2024-02-20",
            "payment_type": "fixed",
        },
    ]


@pytest.fixture
def time_entry_rows():
    return [
        {"id": 1, "contract_id": 1, "hours_used": 30, "entry_date": "2024-02-01"},
        {"id": 2, "contract_id": 1, "hours_used": 10.5, "entry_date": "2024-02-02"},
        {"id": 3, "project_id": 3, "hours_used": 4, "entry_date": "2024-02-03"},
    ]


# ============================================================================
# Domain records
# ============================================================================


@pytest.fixture
def clients(client_rows):
    return [Client.from_mapping(row) for row in client_rows]


@pytest.fixture
def contracts(contract_rows):
    return [Contract.from_mapping(row) for row in contract_rows]


@pytest.fixture
def projects(project_rows):
    return [Project.from_mapping(row) for row in project_rows]


@pytest.fixture
def payments(payment_rows):
    return [Payment.from_mapping(row) for row in payment_rows]


@pytest.fixture
def time_entries(time_entry_rows):
    return [TimeEntry.from_mapping(row) for row in time_entry_rows]


# ============================================================================
# Stores
# ============================================================================


@pytest.fixture
def data_dir(tmp_path, client_rows, contract_rows, project_rows, payment_rows, time_entry_rows):
    """Data directory with one JSON file per collection."""
    directory = tmp_path / "data"
    directory.mkdir()
    for name, rows in (
        ("clients", client_rows),
        ("contracts", contract_rows),
        ("projects", project_rows),
        ("payments", payment_rows),
        ("time_entries", time_entry_rows),
    ):
        (directory / f"{name}.json").write_text(json.dumps(rows), encoding="utf-8")
    return directory


@pytest.fixture
def json_store(data_dir):
    return JsonFileStore(data_dir)


@pytest.fixture
def sql_engine():
    """In-memory SQLite with all billing tables."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture
def sql_store(sql_engine, client_rows, contract_rows, project_rows, payment_rows, time_entry_rows):
    """SQL store seeded with the sample rows (ids assigned in the same order)."""
    store = SqlStore()
    for row in client_rows:
        store.clients.add(row)
    for row in contract_rows:
        store.contracts.add(row)
    for row in project_rows:
        store.projects.add(row)
    for row in payment_rows:
        store.payments.add(row)
    for row in time_entry_rows:
        store.time_entries.add(row)
    return store


@pytest.fixture
def config():
    return BillingConfig()


@pytest.fixture
def service(json_store, config, clock):
    return BillingService(json_store, config, clock)


def money(value) -> Decimal:
    return Decimal(str(value))
