"""
Module: billing_kernel.models.contract
Responsibility: ORM persistence for hourly-rate contracts with a total hour
    budget.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``billed_amount`` is a legacy column; billed totals are derived from
      payment rows, never read from here.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base, TimestampMixin


class ContractModel(TimestampMixin, Base):
    __tablename__ = "contracts"

    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    contract_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    hourly_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    billed_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    def __repr__(self) -> str:
        return f"<Contract {self.id}: {self.contract_number}>"
