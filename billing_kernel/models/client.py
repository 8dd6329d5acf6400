"""
Module: billing_kernel.models.client
Responsibility: ORM persistence for clients, the people or companies that
    contracts are signed with.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base, TimestampMixin


class ClientModel(TimestampMixin, Base):
    __tablename__ = "clients"

    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    def __repr__(self) -> str:
        return f"<Client {self.id}: {self.name or self.company}>"
