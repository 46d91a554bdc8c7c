"""
QueueEntry model - one customer's slot in one barber's line.

Entries are created by join and destroyed by leave/remove. They are never
updated in place: changing service kind is a leave followed by a join, which
sends the customer to the back of the line.

Ordering within a barber's line is (entered_at, id). The unique constraint on
customer_id is what guarantees single membership system-wide.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nextcut.core.constants import ServiceKind
from nextcut.models.base import Base, UTCDateTime

if TYPE_CHECKING:
    from nextcut.models.barber import Barber
    from nextcut.models.customer import Customer


class QueueEntry(Base):
    """
    Live queue entry.

    Attributes:
        id: Auto-incrementing primary key, secondary ordering key
        barber_id: Whose line this entry sits in
        customer_id: Owner (unique across all lines)
        service_kind: haircut | beard | haircut+beard
        entered_at: When the customer joined, primary ordering key
    """

    __tablename__ = "queue_entries"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    barber_id: Mapped[int] = mapped_column(
        ForeignKey("barbers.id", ondelete="CASCADE"),
        nullable=False,
    )

    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )

    service_kind: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )

    entered_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    barber: Mapped["Barber"] = relationship(back_populates="queue_entries")
    customer: Mapped["Customer"] = relationship(back_populates="queue_entry")

    __table_args__ = (
        UniqueConstraint('customer_id', name='uq_queue_entries_customer'),
        Index('ix_queue_entries_barber_order', 'barber_id', 'entered_at', 'id'),
        {'comment': 'Live queue entries, at most one per customer'}
    )

    def __init__(self, **kwargs):
        """Initialize with service kind validation."""
        super().__init__(**kwargs)

        if self.service_kind not in ServiceKind.values():
            raise ValueError(
                f"Invalid service kind: {self.service_kind}. "
                f"Must be one of: {ServiceKind.values()}"
            )

    def __repr__(self) -> str:
        return (
            f"<QueueEntry(id={self.id}, barber_id={self.barber_id}, "
            f"customer_id={self.customer_id}, service_kind='{self.service_kind}')>"
        )
