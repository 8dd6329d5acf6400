"""
Module: billing_kernel.models.time_entry
Responsibility: ORM persistence for hours logged against a contract or a
    project.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Contracts and projects with time entries cannot be deleted
      (ON DELETE RESTRICT); the service checks first and raises
      RecordInUseError.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base, TimestampMixin


class TimeEntryModel(TimestampMixin, Base):
    __tablename__ = "time_entries"

    contract_id: Mapped[int | None] = mapped_column(
        ForeignKey("contracts.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    hours_used: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    entry_date: Mapped[date | None] = mapped_column(nullable=True)
