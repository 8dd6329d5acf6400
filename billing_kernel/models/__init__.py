"""
ORM models for the billing tables.

Importing this package registers every table on ``Base.metadata``.
"""

from billing_kernel.models.client import ClientModel
from billing_kernel.models.contract import ContractModel
from billing_kernel.models.payment import PaymentModel
from billing_kernel.models.project import ProjectModel
from billing_kernel.models.time_entry import TimeEntryModel

__all__ = [
    "ClientModel",
    "ContractModel",
    "PaymentModel",
    "ProjectModel",
    "TimeEntryModel",
]
