"""Service history sink. Append and read only."""

from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from nextcut.models.queue_entry import QueueEntry
from nextcut.models.service_record import ServiceRecord


def append_service_record(db: Session, entry: QueueEntry, served_at: datetime) -> ServiceRecord:
    """Snapshot ``entry`` as served. Must run in the same unit as the removal."""
    record = ServiceRecord(
        barber_id=entry.barber_id,
        customer_id=entry.customer_id,
        service_kind=entry.service_kind,
        entered_at=entry.entered_at,
        served_at=served_at,
    )
    db.add(record)
    db.flush()
    return record


def recent_for_barber(db: Session, barber_id: int, limit: int) -> List[ServiceRecord]:
    """Newest first."""
    return (
        db.query(ServiceRecord)
        .filter_by(barber_id=barber_id)
        .order_by(ServiceRecord.served_at.desc(), ServiceRecord.id.desc())
        .limit(limit)
        .all()
    )
