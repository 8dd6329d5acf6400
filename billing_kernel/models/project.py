"""
Module: billing_kernel.models.project
Responsibility: ORM persistence for projects, either under a contract or
    independent with their own client contact fields.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - None at the database level.  "Exactly one of is_independent /
      contract_id" is reported by ``Project.is_well_formed``, not enforced,
      because existing rows violate it.
"""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base, TimestampMixin


class ProjectModel(TimestampMixin, Base):
    __tablename__ = "projects"

    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contract_id: Mapped[int | None] = mapped_column(
        ForeignKey("contracts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    is_independent: Mapped[bool] = mapped_column(Boolean, default=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    hourly_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    paid_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    client_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    client_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    client_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"
