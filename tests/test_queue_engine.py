"""Tests for queue transitions and position queries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, UTC

import pytest
from sqlalchemy import func, select

from nextcut.core.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    NotInQueueError,
)
from nextcut.models import QueueEntry, ServiceRecord
from nextcut.repositories import history as history_module
from nextcut.services.queue_engine import QueueEngine


def _entries_for(session_factory, customer_id: int) -> int:
    with session_factory() as db:
        return db.scalar(
            select(func.count(QueueEntry.id)).where(QueueEntry.customer_id == customer_id)
        )


def test_barbershop_scenario(queue_engine, barber, make_customer):
    u1 = make_customer("U1")
    u2 = make_customer("U2")

    queue_engine.join(u1.id, barber.id, "haircut")
    queue_engine.join(u2.id, barber.id, "beard")

    status = queue_engine.status(u2.id)
    assert status.position == 2
    assert status.estimated_wait_minutes == 15

    queue_engine.remove_by_barber(barber.id, u1.id)

    status = queue_engine.status(u2.id)
    assert status.position == 1
    assert status.estimated_wait_minutes == 0


def test_join_returns_created_entry(queue_engine, barber, make_customer):
    c = make_customer("Asha")
    entry = queue_engine.join(c.id, barber.id, "haircut+beard")

    assert entry.barber_id == barber.id
    assert entry.customer_id == c.id
    assert entry.service_kind == "haircut+beard"
    assert entry.barber.name == "B1"
    assert entry.customer.name == "Asha"


def test_position_follows_join_order(queue_engine, barber, make_customer):
    a, b, c = make_customer(), make_customer(), make_customer()
    for customer in (a, b, c):
        queue_engine.join(customer.id, barber.id, "haircut")

    assert queue_engine.status(a.id).position == 1
    assert queue_engine.status(b.id).position == 2
    assert queue_engine.status(c.id).position == 3
    assert queue_engine.status(c.id).queue_length == 3


def test_list_queue_is_ordered(queue_engine, barber, make_customer):
    customers = [make_customer() for _ in range(4)]
    for customer in customers:
        queue_engine.join(customer.id, barber.id, "beard")

    line = queue_engine.list_queue(barber.id)
    assert [row.customer.id for row in line] == [c.id for c in customers]
    assert [row.position for row in line] == [1, 2, 3, 4]
    times = [row.entered_at for row in line]
    assert times == sorted(times)


def test_equal_timestamps_break_ties_by_entry_id(session_factory, barber, make_customer):
    frozen = datetime(2024, 6, 1, 9, 0, tzinfo=UTC)
    engine = QueueEngine(session_factory=session_factory, minutes_per_customer=15,
                         clock=lambda: frozen)
    a, b, c = make_customer(), make_customer(), make_customer()
    entries = [engine.join(x.id, barber.id, "haircut") for x in (a, b, c)]

    assert [e.id for e in entries] == sorted(e.id for e in entries)
    assert engine.status(a.id).position == 1
    assert engine.status(b.id).position == 2
    assert engine.status(c.id).position == 3
    assert [row.entry_id for row in engine.list_queue(barber.id)] == [e.id for e in entries]


def test_rejoin_other_barber_moves_membership(queue_engine, session_factory, barber,
                                              other_barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")
    queue_engine.join(c.id, other_barber.id, "haircut")

    status = queue_engine.status(c.id)
    assert status.in_queue is True
    assert status.barber_id == other_barber.id
    assert queue_engine.list_queue(barber.id) == []
    assert [row.customer.id for row in queue_engine.list_queue(other_barber.id)] == [c.id]
    assert _entries_for(session_factory, c.id) == 1


def test_rejoin_same_barber_goes_to_back(queue_engine, barber, make_customer):
    a, b = make_customer(), make_customer()
    queue_engine.join(a.id, barber.id, "haircut")
    queue_engine.join(b.id, barber.id, "haircut")

    queue_engine.join(a.id, barber.id, "beard")

    assert queue_engine.status(b.id).position == 1
    status = queue_engine.status(a.id)
    assert status.position == 2
    assert status.service_kind == "beard"


def test_leave_twice(queue_engine, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    result = queue_engine.leave(c.id)
    assert result.removed_from_barber_id == barber.id
    assert result.barber_name == "B1"

    with pytest.raises(NotInQueueError) as exc_info:
        queue_engine.leave(c.id)
    assert exc_info.value.retryable is False
    assert queue_engine.status(c.id).in_queue is False


def test_leave_shifts_positions(queue_engine, barber, make_customer):
    a, b, c = make_customer(), make_customer(), make_customer()
    for customer in (a, b, c):
        queue_engine.join(customer.id, barber.id, "haircut")

    queue_engine.leave(b.id)

    assert queue_engine.status(c.id).position == 2


def test_status_when_out(queue_engine, make_customer):
    c = make_customer()
    status = queue_engine.status(c.id)
    assert status.in_queue is False
    assert status.position is None
    assert status.estimated_wait_minutes is None


def test_membership_is_derived_from_entry(queue_engine, registry, barber, make_customer):
    c = make_customer()
    assert registry.get_customer(c.id).in_queue is False

    queue_engine.join(c.id, barber.id, "haircut")
    customer = registry.get_customer(c.id)
    assert customer.in_queue is True
    assert customer.current_barber_id == barber.id

    queue_engine.leave(c.id)
    customer = registry.get_customer(c.id)
    assert customer.in_queue is False
    assert customer.current_barber_id is None


def test_join_rejects_unknown_service_kind(queue_engine, barber, make_customer):
    c = make_customer()
    with pytest.raises(InvalidArgumentError) as exc_info:
        queue_engine.join(c.id, barber.id, "perm")
    assert exc_info.value.code == "invalid_argument"
    assert queue_engine.status(c.id).in_queue is False


def test_join_unknown_barber_keeps_existing_entry(queue_engine, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    with pytest.raises(NotFoundError):
        queue_engine.join(c.id, 9999, "haircut")

    status = queue_engine.status(c.id)
    assert status.in_queue is True
    assert status.barber_id == barber.id


def test_join_unknown_customer(queue_engine, barber):
    with pytest.raises(NotFoundError):
        queue_engine.join(4242, barber.id, "haircut")
    assert queue_engine.list_queue(barber.id) == []


def test_remove_by_other_barber_is_forbidden(queue_engine, barber, other_barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    with pytest.raises(ForbiddenError):
        queue_engine.remove_by_barber(other_barber.id, c.id)

    assert queue_engine.status(c.id).barber_id == barber.id


def test_remove_customer_not_in_line(queue_engine, barber, make_customer):
    c = make_customer()
    with pytest.raises(NotFoundError):
        queue_engine.remove_by_barber(barber.id, c.id)


def test_remove_served_writes_history(queue_engine, barber, make_customer):
    c = make_customer("Vikram")
    queue_engine.join(c.id, barber.id, "beard")

    result = queue_engine.remove_by_barber(barber.id, c.id, outcome="served")

    assert result.removed_customer.name == "Vikram"
    assert result.outcome == "served"
    assert result.service_record_id is not None
    records = queue_engine.service_history(barber.id)
    assert len(records) == 1
    assert records[0].customer_id == c.id
    assert records[0].service_kind == "beard"


def test_remove_no_show_skips_history(queue_engine, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    result = queue_engine.remove_by_barber(barber.id, c.id, outcome="no_show")

    assert result.service_record_id is None
    assert queue_engine.service_history(barber.id) == []
    assert queue_engine.status(c.id).in_queue is False


def test_remove_rejects_unknown_outcome(queue_engine, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")
    with pytest.raises(InvalidArgumentError):
        queue_engine.remove_by_barber(barber.id, c.id, outcome="vanished")
    assert queue_engine.status(c.id).in_queue is True


def test_failed_history_write_rolls_back_removal(queue_engine, session_factory, barber,
                                                 make_customer, monkeypatch):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    def boom(db, entry, served_at):
        raise RuntimeError("history sink down")

    monkeypatch.setattr(history_module, "append_service_record", boom)

    with pytest.raises(RuntimeError):
        queue_engine.remove_by_barber(barber.id, c.id)

    assert _entries_for(session_factory, c.id) == 1
    assert queue_engine.status(c.id).in_queue is True


def test_service_history_newest_first(queue_engine, barber, make_customer):
    customers = [make_customer() for _ in range(3)]
    for customer in customers:
        queue_engine.join(customer.id, barber.id, "haircut")
    for customer in customers:
        queue_engine.remove_by_barber(barber.id, customer.id)

    records = queue_engine.service_history(barber.id, limit=2)
    assert [r.customer_id for r in records] == [customers[2].id, customers[1].id]

    with pytest.raises(InvalidArgumentError):
        queue_engine.service_history(barber.id, limit=0)


def test_service_records_are_append_only(queue_engine, session_factory, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")
    queue_engine.remove_by_barber(barber.id, c.id)

    with session_factory() as db:
        record = db.scalars(select(ServiceRecord)).one()
        record.service_kind = "beard"
        with pytest.raises(ValueError):
            db.flush()
        db.rollback()

        record = db.scalars(select(ServiceRecord)).one()
        db.delete(record)
        with pytest.raises(ValueError):
            db.flush()
        db.rollback()


def test_per_barber_minutes_override(queue_engine, registry, make_customer):
    slow = registry.register_barber("Slow", "slow", lat=12.9, long=77.6, minutes_per_customer=25)
    a, b, c = make_customer(), make_customer(), make_customer()
    for customer in (a, b, c):
        queue_engine.join(customer.id, slow.id, "haircut")

    assert queue_engine.status(c.id).estimated_wait_minutes == 50


def test_unknown_ids_on_reads(queue_engine):
    with pytest.raises(NotFoundError):
        queue_engine.status(123)
    with pytest.raises(NotFoundError):
        queue_engine.list_queue(123)
    with pytest.raises(NotFoundError):
        queue_engine.service_history(123)


def test_status_is_json_serializable(queue_engine, barber, make_customer):
    c = make_customer()
    queue_engine.join(c.id, barber.id, "haircut")

    data = queue_engine.status(c.id).model_dump(mode="json")
    assert data["in_queue"] is True
    assert data["service_kind"] == "haircut"
    assert data["position"] == 1
    assert isinstance(data["entered_at"], str)


def test_negative_minutes_rejected(session_factory):
    with pytest.raises(ValueError):
        QueueEngine(session_factory=session_factory, minutes_per_customer=-1)


def test_factory_returns_process_wide_engine():
    from nextcut.config import settings
    from nextcut.services import get_queue_engine

    engine = get_queue_engine()
    assert engine is get_queue_engine()
    assert engine.minutes_per_customer == settings.minutes_per_customer


def test_timestamps_read_back_in_utc(queue_engine, barber, make_customer):
    c = make_customer()
    joined = queue_engine.join(c.id, barber.id, "haircut")

    status = queue_engine.status(c.id)
    row = queue_engine.list_queue(barber.id)[0]
    assert joined.entered_at == status.entered_at == row.entered_at
    assert status.entered_at.tzinfo is not None
    assert (joined.model_dump(mode="json")["entered_at"]
            == status.model_dump(mode="json")["entered_at"]
            == row.model_dump(mode="json")["entered_at"])

    removed = queue_engine.remove_by_barber(barber.id, c.id)
    record = queue_engine.service_history(barber.id)[0]
    assert record.served_at == removed.removed_at
    assert record.entered_at == joined.entered_at
    assert record.served_at.utcoffset() == timedelta(0)


def test_clock_in_other_zone_is_stored_as_utc(session_factory, barber, make_customer):
    ist = timezone(timedelta(hours=5, minutes=30))
    local = datetime(2024, 6, 1, 14, 30, tzinfo=ist)
    engine = QueueEngine(session_factory=session_factory, minutes_per_customer=15,
                         clock=lambda: local)
    c = make_customer()

    joined = engine.join(c.id, barber.id, "beard")
    status = engine.status(c.id)

    assert joined.entered_at == datetime(2024, 6, 1, 9, 0, tzinfo=UTC)
    assert joined.model_dump(mode="json")["entered_at"] == status.model_dump(mode="json")["entered_at"]
