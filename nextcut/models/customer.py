"""
Customer model.

Queue membership is not stored on the customer. ``in_queue`` and
``current_barber_id`` are read off the customer's single QueueEntry row
(unique on customer_id), so the flag can never disagree with the queue table.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nextcut.models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from nextcut.models.queue_entry import QueueEntry


class Customer(CreatedAtMixin, Base):
    """
    A walk-in customer.

    Attributes:
        id: Auto-incrementing primary key
        name: Display name
        phone_number: Digits only, unique
        queue_entry: The live entry, or None when the customer is OUT
    """

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    phone_number: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        index=True,
    )

    queue_entry: Mapped[Optional["QueueEntry"]] = relationship(
        back_populates="customer",
        uselist=False,
    )

    @property
    def in_queue(self) -> bool:
        return self.queue_entry is not None

    @property
    def current_barber_id(self) -> Optional[int]:
        return self.queue_entry.barber_id if self.queue_entry is not None else None

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}', in_queue={self.in_queue})>"
