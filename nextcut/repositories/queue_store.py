"""
Queue store: the queue_entries table.

Ordering within a barber's line is (entered_at, id) everywhere in this module.
None of these functions commit; callers run them inside ``run_atomic``.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, delete, func, or_
from sqlalchemy.orm import Session, aliased, joinedload

from nextcut.models.queue_entry import QueueEntry


def get_entry_for_customer(db: Session, customer_id: int) -> Optional[QueueEntry]:
    return db.query(QueueEntry).filter_by(customer_id=customer_id).first()


def replace_entry_for_customer(
    db: Session,
    customer_id: int,
    barber_id: int,
    service_kind: str,
    entered_at: datetime,
) -> QueueEntry:
    """
    Upsert by customer key: drop whatever entry the customer holds, in any
    barber's line, then append a fresh one at the back of ``barber_id``'s line.

    A concurrent transaction that inserted for the same customer in between
    makes the insert violate uq_queue_entries_customer, which the caller's
    atomic unit turns into a ConflictError instead of a second row.
    """
    db.execute(
        delete(QueueEntry)
        .where(QueueEntry.customer_id == customer_id)
        .execution_options(synchronize_session="fetch")
    )
    entry = QueueEntry(
        barber_id=barber_id,
        customer_id=customer_id,
        service_kind=service_kind,
        entered_at=entered_at,
    )
    db.add(entry)
    db.flush()
    return entry


def delete_entry(db: Session, entry: QueueEntry) -> None:
    db.delete(entry)
    db.flush()


def count_ahead(db: Session, entry: QueueEntry) -> int:
    """Entries in the same line that sort strictly before ``entry``."""
    other = aliased(QueueEntry)
    return (
        db.query(func.count(other.id))
        .filter(
            other.barber_id == entry.barber_id,
            or_(
                other.entered_at < entry.entered_at,
                and_(other.entered_at == entry.entered_at, other.id < entry.id),
            ),
        )
        .scalar()
    )


def count_for_barber(db: Session, barber_id: int) -> int:
    return db.query(func.count(QueueEntry.id)).filter_by(barber_id=barber_id).scalar()


def list_for_barber(db: Session, barber_id: int) -> List[QueueEntry]:
    """Whole line, front first, with customers loaded."""
    return (
        db.query(QueueEntry)
        .options(joinedload(QueueEntry.customer))
        .filter_by(barber_id=barber_id)
        .order_by(QueueEntry.entered_at, QueueEntry.id)
        .all()
    )


def list_for_barbers(db: Session, barber_ids: List[int]) -> Dict[int, List[QueueEntry]]:
    """Several lines at once, each front first."""
    lines: Dict[int, List[QueueEntry]] = {barber_id: [] for barber_id in barber_ids}
    if not barber_ids:
        return lines
    entries = (
        db.query(QueueEntry)
        .options(joinedload(QueueEntry.customer))
        .filter(QueueEntry.barber_id.in_(barber_ids))
        .order_by(QueueEntry.barber_id, QueueEntry.entered_at, QueueEntry.id)
        .all()
    )
    for entry in entries:
        lines[entry.barber_id].append(entry)
    return lines
