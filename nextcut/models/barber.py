"""
Barber model.

A Barber owns exactly one waiting line. Barbers are created once and are
read-only from the queue engine's point of view: the engine only checks that
one exists and reads its location and wait policy.
"""

from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Float, Integer, String, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nextcut.models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from nextcut.models.queue_entry import QueueEntry


class Barber(CreatedAtMixin, Base):
    """
    A barber and their shop location.

    Attributes:
        id: Auto-incrementing primary key
        name: Display name
        username: Unique handle
        lat: Latitude in degrees
        long: Longitude in degrees
        minutes_per_customer: Per-barber service duration override (nullable)
        queue_entries: Live queue, ordered by entry time then id
    """

    __tablename__ = "barbers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    lat: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    long: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    minutes_per_customer: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Overrides settings.minutes_per_customer when set"
    )

    queue_entries: Mapped[List["QueueEntry"]] = relationship(
        back_populates="barber",
        order_by="[QueueEntry.entered_at, QueueEntry.id]",
    )

    __table_args__ = (
        Index('ix_barbers_lat_long', 'lat', 'long'),
        {'comment': 'Barber directory'}
    )

    def wait_minutes_per_customer(self, default: int) -> int:
        """Effective per-customer service duration for this barber."""
        if self.minutes_per_customer is None:
            return default
        return self.minutes_per_customer

    def __repr__(self) -> str:
        return (
            f"<Barber(id={self.id}, username='{self.username}', "
            f"lat={self.lat}, long={self.long})>"
        )

    def __str__(self) -> str:
        return f"{self.name} (@{self.username})"
