"""
Billing services -- stores and the orchestration shell.

Services own I/O and the clock; the engines they call stay pure.
"""

from billing_services.billing_service import BillingService, PaymentOutcome
from billing_services.export import build_workbook, write_billing_xlsx
from billing_services.json_store import JsonFileStore
from billing_services.repositories import BillingStore
from billing_services.sql_store import SqlStore

__all__ = [
    "BillingService",
    "BillingStore",
    "JsonFileStore",
    "PaymentOutcome",
    "SqlStore",
    "build_workbook",
    "write_billing_xlsx",
]
