"""
Module: billing_engines.usage
Responsibility:
    Hour consumption of contracts and projects from their time entries,
    and the guards that protect hour budgets and referenced records.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - InvalidHoursError from ``require_positive_hours``.
    - HoursExceededError from ``check_hours_available``.
    - RecordInUseError from ``ensure_deletable``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from billing_kernel.domain.records import (
    Contract,
    ItemType,
    Project,
    RecordId,
    TimeEntry,
)
from billing_kernel.domain.values import ZERO, parse_decimal
from billing_kernel.exceptions import (
    HoursExceededError,
    InvalidHoursError,
    RecordInUseError,
)
from billing_kernel.logging_config import get_logger
from billing_engines.totals import effective_hourly_rate

logger = get_logger("engines.usage")


@dataclass(frozen=True)
class ContractUsage:
    contract_id: RecordId | None
    used_hours: Decimal
    remaining_hours: Decimal
    billed_amount: Decimal
    remaining_amount: Decimal
    entries_count: int


@dataclass(frozen=True)
class ProjectUsage:
    project_id: RecordId | None
    used_hours: Decimal
    remaining_hours: Decimal
    current_cost: Decimal
    entries_count: int


def _entries_for(kind: ItemType, record_id: Any, entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    if kind == ItemType.CONTRACT:
        return [e for e in entries if e.contract_id == record_id]
    return [e for e in entries if e.project_id == record_id]


def contract_usage(contract: Contract, entries: Iterable[TimeEntry]) -> ContractUsage:
    """
    Hours used against a contract and their value at the contract rate.

    ``remaining_hours`` goes negative when the budget is overrun.
    """
    rows = _entries_for(ItemType.CONTRACT, contract.id, entries)
    used = sum((e.hours_used for e in rows), ZERO)
    remaining = contract.total_hours - used
    return ContractUsage(
        contract_id=contract.id,
        used_hours=used,
        remaining_hours=remaining,
        billed_amount=used * contract.hourly_rate,
        remaining_amount=remaining * contract.hourly_rate,
        entries_count=len(rows),
    )


def project_usage(
    project: Project,
    entries: Iterable[TimeEntry],
    linked_contract: Contract | None = None,
) -> ProjectUsage:
    """Hours used on a project; cost at the project rate, else the contract rate."""
    rows = _entries_for(ItemType.PROJECT, project.id, entries)
    used = sum((e.hours_used for e in rows), ZERO)
    return ProjectUsage(
        project_id=project.id,
        used_hours=used,
        remaining_hours=project.estimated_hours - used,
        current_cost=used * effective_hourly_rate(project, linked_contract),
        entries_count=len(rows),
    )


def require_positive_hours(hours: Any) -> Decimal:
    """Read ``hours`` as a Decimal; it must be finite and greater than zero."""
    parsed = parse_decimal(hours)
    if not parsed.is_finite() or parsed <= ZERO:
        raise InvalidHoursError(hours)
    return parsed


def check_hours_available(
    contract: Contract, entries: Iterable[TimeEntry], hours: Any
) -> Decimal:
    """
    Ensure a new entry of ``hours`` fits in the contract's remaining hours.

    Returns:
        The hours the contract has left before the new entry.

    Raises:
        InvalidHoursError: ``hours`` is unreadable, zero or negative.
        HoursExceededError: the entry would overrun the budget.
    """
    requested = require_positive_hours(hours)
    remaining = contract_usage(contract, entries).remaining_hours
    if requested > remaining:
        logger.warning("contract_hours_exceeded", extra={
            "contract_id": contract.id,
            "requested": str(requested),
            "remaining": str(remaining),
        })
        raise HoursExceededError(contract.id, requested, remaining)
    return remaining


def ensure_deletable(
    kind: ItemType | str, record_id: RecordId, entries: Iterable[TimeEntry]
) -> None:
    """Raise RecordInUseError if any time entry references the record."""
    kind = ItemType(getattr(kind, "value", kind))
    count = len(_entries_for(kind, record_id, entries))
    if count:
        raise RecordInUseError(kind.value, record_id, count)
