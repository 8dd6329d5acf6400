"""
Module: billing_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the integer primary key convention, the type annotation map for
    consistent column types, and the TimestampMixin for row timestamps.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  ALL model files import from here.

Invariants enforced:
    - Integer primary keys, assigned by the database.  The JSON store uses
      the same ``max + 1`` integer ids so records move between stores.
    - Decimal precision: Decimal maps to Numeric(14, 2), enough for the
      999,999,999,999 amount ceiling at cent precision.  NEVER use float for
      monetary amounts.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar

from sqlalchemy import Date, DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an autoincrementing integer.
        - Decimal maps to Numeric(14, 2).
        - date maps to Date, datetime to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(14, 2),
        date: Date,
        datetime: DateTime(timezone=True),
        int: Integer,
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    def to_mapping(self) -> dict[str, Any]:
        """Column values keyed by column name, as the record readers expect."""
        return {
            column.key: getattr(self, column.key)
            for column in self.__table__.columns
            if column.key not in ("created_at", "updated_at")
        }


class TimestampMixin:
    """created_at / updated_at maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
