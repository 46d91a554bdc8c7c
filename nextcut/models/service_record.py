"""
ServiceRecord model for the service history log.

A ServiceRecord is an append-only snapshot written when an operator removes an
entry because the customer was served. Records are NEVER updated or deleted;
the mapper events below turn any attempt into an error at flush time.
"""

from datetime import datetime

from sqlalchemy import Index, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column

from nextcut.models.base import Base, UTCDateTime


class ServiceRecord(Base):
    """
    Completed service snapshot.

    Attributes:
        id: Auto-incrementing primary key
        barber_id: Who served
        customer_id: Who was served
        service_kind: What was done
        entered_at: When the customer had joined the line
        served_at: When the operator marked them served

    Barber and customer ids are plain columns, not foreign keys, so history
    outlives the directory rows it refers to.
    """

    __tablename__ = "service_records"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    barber_id: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    service_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    entered_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    served_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index('ix_service_records_barber_served', 'barber_id', 'served_at'),
        {'comment': 'Append-only service history'}
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceRecord(id={self.id}, barber_id={self.barber_id}, "
            f"customer_id={self.customer_id}, service_kind='{self.service_kind}')>"
        )


@event.listens_for(ServiceRecord, "before_update")
def _reject_update(mapper, connection, target):
    raise ValueError(f"Service history is append-only, cannot update {target!r}")


@event.listens_for(ServiceRecord, "before_delete")
def _reject_delete(mapper, connection, target):
    raise ValueError(f"Service history is append-only, cannot delete {target!r}")
