"""
Records -- immutable snapshots of the stored billing entities.

Responsibility:
    Typed, frozen views of clients, contracts, projects, payments and time
    entries as read from any store.  ``from_mapping`` is deliberately
    lenient: stored data is frequently incomplete (missing rates, hours,
    client links), and a malformed row must become a record with zero
    values rather than an exception.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Stores build these;
    engines consume them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Union

from billing_kernel.domain.values import ZERO, parse_decimal, to_decimal

RecordId = Union[int, str]


class PaymentType(str, Enum):
    """How a payment amount is derived."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"
    RECURRING_SUPPORT = "recurring_support"
    PROJECT_SCOPE = "project_scope"
    SUPPORT_EVOLUTIVE = "support_evolutive"


class ProjectPaymentType(str, Enum):
    """Sub-type of a project-scope payment."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


class PaymentStatus(str, Enum):
    """Payment progress of a billable entity or client group."""

    NO_VALUE = "no_value"
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"


class ItemType(str, Enum):
    """Kind of billable entity."""

    CONTRACT = "contract"
    PROJECT = "project"


def parse_id(value: Any) -> RecordId | None:
    """Normalize a stored id: digit strings become ints, blanks become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    return text


def parse_date(value: Any) -> date | None:
    """Read an ISO date (or the date part of an ISO timestamp)."""
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


_TRUE_FLAGS = frozenset({"1", "true", "t", "yes", "y", "si", "sí", "on"})


def parse_flag(value: Any) -> bool:
    """Read a stored boolean; MySQL exports send 0/1 and "0"/"1" strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float, Decimal)):
        return value == 1
    return str(value).strip().lower() in _TRUE_FLAGS


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_decimal(value: Any) -> Decimal | None:
    parsed = parse_decimal(value)
    return parsed if parsed.is_finite() else None


@dataclass(frozen=True)
class TargetRef:
    """Reference to the contract or project a payment is billed against."""

    item_type: ItemType
    item_id: RecordId

    @classmethod
    def contract(cls, contract_id: RecordId) -> TargetRef:
        return cls(ItemType.CONTRACT, contract_id)

    @classmethod
    def project(cls, project_id: RecordId) -> TargetRef:
        return cls(ItemType.PROJECT, project_id)

    def __str__(self) -> str:
        return f"{self.item_type.value}:{self.item_id}"


@dataclass(frozen=True)
class Client:
    id: RecordId | None
    name: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    status: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.company

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Client:
        return cls(
            id=parse_id(data.get("id")),
            name=_text(data.get("name")),
            company=_text(data.get("company")),
            email=_text(data.get("email")),
            phone=_text(data.get("phone")),
            status=_text(data.get("status")),
        )


@dataclass(frozen=True)
class Contract:
    """
    An hourly-rate agreement with a total hour budget.

    ``billed_amount`` is the legacy stored figure; aggregation sums payment
    rows instead.
    """

    id: RecordId | None
    client_id: RecordId | None = None
    contract_number: str | None = None
    description: str | None = None
    total_hours: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    billed_amount: Decimal = ZERO
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Contract:
        return cls(
            id=parse_id(data.get("id")),
            client_id=parse_id(data.get("client_id")),
            contract_number=_text(data.get("contract_number")),
            description=_text(data.get("description")),
            total_hours=to_decimal(data.get("total_hours")),
            hourly_rate=to_decimal(data.get("hourly_rate")),
            billed_amount=to_decimal(data.get("billed_amount")),
            start_date=parse_date(data.get("start_date")),
            end_date=parse_date(data.get("end_date")),
            status=_text(data.get("status")),
        )


@dataclass(frozen=True)
class Project:
    """
    A billable engagement, either under a contract or independent.

    Independent projects carry their own client contact fields.
    """

    id: RecordId | None
    name: str | None = None
    contract_id: RecordId | None = None
    client_id: RecordId | None = None
    is_independent: bool = False
    description: str | None = None
    estimated_hours: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    status: str | None = None

    @property
    def is_well_formed(self) -> bool:
        """Exactly one of independent / linked to a contract."""
        return self.is_independent != (self.contract_id is not None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Project:
        return cls(
            id=parse_id(data.get("id")),
            name=_text(data.get("name")),
            contract_id=parse_id(data.get("contract_id")),
            client_id=parse_id(data.get("client_id")),
            is_independent=parse_flag(data.get("is_independent")),
            description=_text(data.get("description")),
            estimated_hours=to_decimal(data.get("estimated_hours")),
            hourly_rate=to_decimal(data.get("hourly_rate")),
            total_amount=to_decimal(data.get("total_amount")),
            paid_amount=to_decimal(data.get("paid_amount")),
            client_name=_text(data.get("client_name")),
            client_email=_text(data.get("client_email")),
            client_phone=_text(data.get("client_phone")),
            status=_text(data.get("status")),
        )


@dataclass(frozen=True)
class Payment:
    """
    A stored payment row.

    ``payment_type`` is a ``PaymentType`` when the stored tag is known and
    the raw string otherwise.
    """

    id: RecordId | None
    amount: Decimal = ZERO
    contract_id: RecordId | None = None
    project_id: RecordId | None = None
    description: str | None = None
    payment_date: date | None = None
    payment_type: PaymentType | str | None = None
    billing_month: str | None = None
    equivalent_hours: Decimal | None = None

    @property
    def target(self) -> TargetRef | None:
        if self.contract_id is not None:
            return TargetRef.contract(self.contract_id)
        if self.project_id is not None:
            return TargetRef.project(self.project_id)
        return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Payment:
        raw_type = _text(data.get("payment_type"))
        try:
            payment_type: PaymentType | str | None = (
                PaymentType(raw_type) if raw_type else None
            )
        except ValueError:
            payment_type = raw_type
        return cls(
            id=parse_id(data.get("id")),
            amount=to_decimal(data.get("amount")),
            contract_id=parse_id(data.get("contract_id")),
            project_id=parse_id(data.get("project_id")),
            description=_text(data.get("description")),
            payment_date=parse_date(data.get("payment_date")),
            payment_type=payment_type,
            billing_month=_text(data.get("billing_month")),
            equivalent_hours=_optional_decimal(data.get("equivalent_hours")),
        )


@dataclass(frozen=True)
class TimeEntry:
    id: RecordId | None
    hours_used: Decimal = ZERO
    project_id: RecordId | None = None
    contract_id: RecordId | None = None
    description: str | None = None
    entry_date: date | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TimeEntry:
        return cls(
            id=parse_id(data.get("id")),
            hours_used=to_decimal(data.get("hours_used")),
            project_id=parse_id(data.get("project_id")),
            contract_id=parse_id(data.get("contract_id")),
            description=_text(data.get("description")),
            entry_date=parse_date(data.get("entry_date")),
        )
