"""
SQL store.

Repositories over the SQLAlchemy models in ``billing_kernel.models``.  Each
call runs in its own ``session_scope()`` transaction and returns domain
records, so no ORM instance escapes the session.

Works on SQLite (tests, single-user installs) and PostgreSQL
(``postgresql+psycopg://`` URLs).
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, TypeVar

from sqlalchemy import Date, select
from sqlalchemy.orm import Session, sessionmaker

from billing_kernel.db.base import Base
from billing_kernel.db.engine import get_session_factory, session_scope
from billing_kernel.domain.records import (
    Client,
    Contract,
    Payment,
    Project,
    RecordId,
    TimeEntry,
    parse_date,
)
from billing_kernel.exceptions import RecordNotFoundError
from billing_kernel.logging_config import get_logger
from billing_kernel.models import (
    ClientModel,
    ContractModel,
    PaymentModel,
    ProjectModel,
    TimeEntryModel,
)

logger = get_logger("services.sql_store")

RecordT = TypeVar("RecordT")


class SqlCollection(Generic[RecordT]):
    """Repository over one mapped table."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        model: type[Base],
        kind: str,
        reader: Callable[[Mapping[str, Any]], RecordT],
    ):
        self._session_factory = session_factory
        self.model = model
        self.kind = kind
        self._reader = reader

    def _column_values(self, record: Mapping[str, Any]) -> dict[str, Any]:
        values = {}
        for column in self.model.__table__.columns:
            if column.key in ("id", "created_at", "updated_at") or column.key not in record:
                continue
            value = record[column.key]
            if isinstance(column.type, Date) and value is not None:
                value = parse_date(value)
            values[column.key] = value
        return values

    def _read(self, row: Base) -> RecordT:
        return self._reader(row.to_mapping())

    def _require(self, session: Session, record_id: RecordId) -> Base:
        row = session.get(self.model, record_id) if isinstance(record_id, int) else None
        if row is None:
            raise RecordNotFoundError(self.kind, record_id)
        return row

    def get_all(self) -> list[RecordT]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(select(self.model).order_by(self.model.id)).all()
            return [self._read(row) for row in rows]

    def get(self, record_id: RecordId) -> RecordT | None:
        if not isinstance(record_id, int):
            return None
        with session_scope(self._session_factory) as session:
            row = session.get(self.model, record_id)
            return self._read(row) if row is not None else None

    def add(self, record: Mapping[str, Any]) -> RecordT:
        with session_scope(self._session_factory) as session:
            row = self.model(**self._column_values(record))
            session.add(row)
            session.flush()
            logger.info("record_added", extra={
                "table": self.model.__tablename__,
                "id": row.id,
            })
            return self._read(row)

    def update(self, record_id: RecordId, record: Mapping[str, Any]) -> RecordT:
        with session_scope(self._session_factory) as session:
            row = self._require(session, record_id)
            for key, value in self._column_values(record).items():
                setattr(row, key, value)
            session.flush()
            logger.info("record_updated", extra={
                "table": self.model.__tablename__,
                "id": record_id,
            })
            return self._read(row)

    def delete(self, record_id: RecordId) -> None:
        with session_scope(self._session_factory) as session:
            session.delete(self._require(session, record_id))
            logger.info("record_deleted", extra={
                "table": self.model.__tablename__,
                "id": record_id,
            })


class SqlPaymentCollection(SqlCollection[Payment]):
    def _filtered(self, column, value: RecordId) -> list[Payment]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(PaymentModel).where(column == value).order_by(PaymentModel.id)
            ).all()
            return [self._read(row) for row in rows]

    def get_by_contract(self, contract_id: RecordId) -> list[Payment]:
        return self._filtered(PaymentModel.contract_id, contract_id)

    def get_by_project(self, project_id: RecordId) -> list[Payment]:
        return self._filtered(PaymentModel.project_id, project_id)


class SqlStore:
    """
    All billing collections in a SQL database.

    Args:
        session_factory: Defaults to the factory configured by
            ``init_engine_from_url``.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        factory = session_factory or get_session_factory()
        self.clients = SqlCollection(factory, ClientModel, "Cliente", Client.from_mapping)
        self.contracts = SqlCollection(factory, ContractModel, "Contrato", Contract.from_mapping)
        self.projects = SqlCollection(factory, ProjectModel, "Proyecto", Project.from_mapping)
        self.payments = SqlPaymentCollection(factory, PaymentModel, "Pago", Payment.from_mapping)
        self.time_entries = SqlCollection(
            factory, TimeEntryModel, "Entrada de tiempo", TimeEntry.from_mapping
        )
