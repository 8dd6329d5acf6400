"""
Module: billing_kernel.models.payment
Responsibility: ORM persistence for payments billed against a contract or
    a project.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``payment_type`` is stored as its raw tag so legacy values survive.
    - Payments go with their contract or project (ON DELETE CASCADE).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base, TimestampMixin


class PaymentModel(TimestampMixin, Base):
    __tablename__ = "payments"

    contract_id: Mapped[int | None] = mapped_column(
        ForeignKey("contracts.id", ondelete="CASCADE"), nullable=True, index=True
    )
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_date: Mapped[date | None] = mapped_column(nullable=True)
    payment_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    billing_month: Mapped[str | None] = mapped_column(String(7), nullable=True)
    equivalent_hours: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Payment {self.id}: {self.amount} {self.payment_type}>"
