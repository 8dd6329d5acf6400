"""
JSON file store.

One JSON array per collection under a data directory (``clients.json``,
``contracts.json``, ``projects.json``, ``payments.json``,
``time_entries.json``).  A missing file is an empty collection.

Invariants:
    - New ids are ``max(existing integer ids) + 1``.
    - Every write replaces the whole file atomically (temp file in the
      same directory, then ``os.replace``).
    - Decimals are written as JSON numbers, dates as ISO strings.

Failure modes:
    - StoreError when a file is not valid JSON or not an array.
    - RecordNotFoundError from ``update`` / ``delete`` on unknown ids.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Generic, Mapping, TypeVar

from billing_kernel.domain.records import (
    Client,
    Contract,
    Payment,
    Project,
    RecordId,
    TimeEntry,
    parse_id,
)
from billing_kernel.exceptions import RecordNotFoundError, StoreError
from billing_kernel.logging_config import get_logger

logger = get_logger("services.json_store")

RecordT = TypeVar("RecordT")


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonCollection(Generic[RecordT]):
    """One collection file, read fully on every call."""

    def __init__(
        self,
        path: Path,
        kind: str,
        reader: Callable[[Mapping[str, Any]], RecordT],
    ):
        self.path = path
        self.kind = kind
        self._reader = reader

    # -- raw rows --------------------------------------------------------

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                rows = json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(self.path.stem, f"JSON inválido: {exc}") from exc
        if not isinstance(rows, list):
            raise StoreError(self.path.stem, "se esperaba un arreglo JSON")
        return [row for row in rows if isinstance(row, dict)]

    def _save(self, rows: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, ensure_ascii=False, indent=2, default=_encode)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("collection_written", extra={
            "collection": self.path.stem,
            "row_count": len(rows),
        })

    def _index_of(self, rows: list[dict[str, Any]], record_id: RecordId) -> int:
        for index, row in enumerate(rows):
            if parse_id(row.get("id")) == record_id:
                return index
        raise RecordNotFoundError(self.kind, record_id)

    # -- repository surface ----------------------------------------------

    def get_all(self) -> list[RecordT]:
        return [self._reader(row) for row in self._load()]

    def get(self, record_id: RecordId) -> RecordT | None:
        for row in self._load():
            if parse_id(row.get("id")) == record_id:
                return self._reader(row)
        return None

    def add(self, record: Mapping[str, Any]) -> RecordT:
        rows = self._load()
        ids = [i for i in (parse_id(row.get("id")) for row in rows) if isinstance(i, int)]
        row = {**record, "id": max(ids, default=0) + 1}
        rows.append(row)
        self._save(rows)
        logger.info("record_added", extra={"collection": self.path.stem, "id": row["id"]})
        return self._reader(row)

    def update(self, record_id: RecordId, record: Mapping[str, Any]) -> RecordT:
        rows = self._load()
        index = self._index_of(rows, record_id)
        rows[index] = {**rows[index], **record, "id": rows[index].get("id")}
        self._save(rows)
        logger.info("record_updated", extra={"collection": self.path.stem, "id": record_id})
        return self._reader(rows[index])

    def delete(self, record_id: RecordId) -> None:
        rows = self._load()
        del rows[self._index_of(rows, record_id)]
        self._save(rows)
        logger.info("record_deleted", extra={"collection": self.path.stem, "id": record_id})


class JsonPaymentCollection(JsonCollection[Payment]):
    def get_by_contract(self, contract_id: RecordId) -> list[Payment]:
        return [p for p in self.get_all() if p.contract_id == contract_id]

    def get_by_project(self, project_id: RecordId) -> list[Payment]:
        return [p for p in self.get_all() if p.project_id == project_id]


class JsonFileStore:
    """All billing collections stored as JSON files in ``data_dir``."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.clients = JsonCollection(self.data_dir / "clients.json", "Cliente", Client.from_mapping)
        self.contracts = JsonCollection(
            self.data_dir / "contracts.json", "Contrato", Contract.from_mapping
        )
        self.projects = JsonCollection(
            self.data_dir / "projects.json", "Proyecto", Project.from_mapping
        )
        self.payments = JsonPaymentCollection(
            self.data_dir / "payments.json", "Pago", Payment.from_mapping
        )
        self.time_entries = JsonCollection(
            self.data_dir / "time_entries.json", "Entrada de tiempo", TimeEntry.from_mapping
        )

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.data_dir)!r})"
