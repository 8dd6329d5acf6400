"""
Repository protocols.

Contract:
    Stores hand out domain records (``billing_kernel.domain.records``),
    never raw rows.  Writes take plain mappings (``PaymentComputation.
    to_record()`` shape) and return the stored record with its id.
    ``update`` and ``delete`` raise ``RecordNotFoundError`` for unknown ids.

Architecture: billing_services.  Implemented by ``JsonFileStore`` and
``SqlStore``.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from billing_kernel.domain.records import (
    Client,
    Contract,
    Payment,
    Project,
    RecordId,
    TimeEntry,
)


@runtime_checkable
class ClientRepository(Protocol):
    def get_all(self) -> list[Client]:
        ...


@runtime_checkable
class ContractRepository(Protocol):
    def get_all(self) -> list[Contract]:
        ...

    def get(self, record_id: RecordId) -> Contract | None:
        ...

    def delete(self, record_id: RecordId) -> None:
        ...


@runtime_checkable
class ProjectRepository(Protocol):
    def get_all(self) -> list[Project]:
        ...

    def get(self, record_id: RecordId) -> Project | None:
        ...

    def delete(self, record_id: RecordId) -> None:
        ...


@runtime_checkable
class PaymentRepository(Protocol):
    def get_all(self) -> list[Payment]:
        ...

    def get(self, record_id: RecordId) -> Payment | None:
        ...

    def get_by_contract(self, contract_id: RecordId) -> list[Payment]:
        ...

    def get_by_project(self, project_id: RecordId) -> list[Payment]:
        ...

    def add(self, record: Mapping[str, Any]) -> Payment:
        ...

    def update(self, record_id: RecordId, record: Mapping[str, Any]) -> Payment:
        ...

    def delete(self, record_id: RecordId) -> None:
        ...


@runtime_checkable
class TimeEntryRepository(Protocol):
    def get_all(self) -> list[TimeEntry]:
        ...

    def add(self, record: Mapping[str, Any]) -> TimeEntry:
        ...


@runtime_checkable
class BillingStore(Protocol):
    """One repository per collection."""

    clients: ClientRepository
    contracts: ContractRepository
    projects: ProjectRepository
    payments: PaymentRepository
    time_entries: TimeEntryRepository
