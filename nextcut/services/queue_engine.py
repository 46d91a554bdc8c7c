"""
Queue Engine
============

Owns every change to the queue: customers join a barber's line, leave it, or
are taken off it by the barber. Each change runs as one atomic unit through
``run_atomic``, so a customer is never left half-joined or double-queued.

Per-customer state machine:
- OUT: no queue entry
- IN_QUEUE(barber, entered_at, service_kind): exactly one entry

Transitions:
- join: OUT or IN_QUEUE(any) -> IN_QUEUE(barber), always at the back
- leave: IN_QUEUE -> OUT (NotInQueueError from OUT)
- remove_by_barber: IN_QUEUE(barber) -> OUT, optionally writing history

Membership is derived from the entry row itself (unique on customer_id), so
there is no separate in-queue flag to keep in sync.

Reads (status, list_queue) are snapshots. A position can be stale by the time
the caller shows it; that is expected.
"""

from datetime import datetime, UTC
from typing import Callable, List, Optional, Union

import structlog
from sqlalchemy.orm import Session, sessionmaker

from nextcut.config import settings
from nextcut.core.constants import DEFAULT_HISTORY_LIMIT, RemovalOutcome, ServiceKind
from nextcut.core.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    NotInQueueError,
)
from nextcut.database.session import run_atomic
from nextcut.models.barber import Barber
from nextcut.models.customer import Customer
from nextcut.repositories import barber_directory, history, queue_store
from nextcut.schemas.queue import (
    CustomerRef,
    LeaveResult,
    QueuedCustomer,
    QueueEntryOut,
    QueueStatus,
    RemoveResult,
    ServiceRecordOut,
)
from nextcut.services.estimator import estimate_wait_minutes

log = structlog.get_logger()


def utc_now() -> datetime:
    return datetime.now(UTC)


class QueueEngine:
    """
    Queue admission and consistency engine.

    Example:
        engine = QueueEngine()
        engine.join(customer_id=7, barber_id=1, service_kind="haircut")
        engine.status(7).position  # 1
        engine.remove_by_barber(barber_id=1, customer_id=7)
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None,
                 minutes_per_customer: Optional[int] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the queue engine.

        Args:
            session_factory: Session factory for the backing store.
                Default: the global SessionLocal.
            minutes_per_customer: Default service duration for barbers that
                don't set their own. Default from settings.
            clock: Returns the current time for entered_at/served_at stamps.
        """
        self.session_factory = session_factory
        self.minutes_per_customer = (
            minutes_per_customer if minutes_per_customer is not None
            else settings.minutes_per_customer
        )
        self.clock = clock or utc_now

        if self.minutes_per_customer < 0:
            raise ValueError(f"minutes_per_customer must be >= 0, got {self.minutes_per_customer}")

    # ========================================
    # Transitions
    # ========================================

    def join(self, customer_id: int, barber_id: int,
             service_kind: Union[ServiceKind, str]) -> QueueEntryOut:
        """
        Put a customer at the back of a barber's line.

        Any entry the customer already holds, with this barber or another, is
        dropped in the same unit. Re-joining the same barber therefore also
        moves the customer to the back.

        Args:
            customer_id: Who is joining
            barber_id: Whose line to join
            service_kind: haircut | beard | haircut+beard

        Returns:
            The created entry

        Raises:
            InvalidArgumentError: Unknown service kind (checked before any I/O)
            NotFoundError: Barber or customer does not exist
            ConflictError: A concurrent change won; retry from scratch
        """
        kind = self._parse_service_kind(service_kind)

        def work(db: Session) -> QueueEntryOut:
            self._require_barber(db, barber_id)
            self._require_customer(db, customer_id, for_update=True)
            entry = queue_store.replace_entry_for_customer(
                db,
                customer_id=customer_id,
                barber_id=barber_id,
                service_kind=kind.value,
                entered_at=self._now(),
            )
            return QueueEntryOut.model_validate(entry)

        result = run_atomic(work, self.session_factory)
        log.info("queue_joined", customer_id=customer_id, barber_id=barber_id,
                 service_kind=kind.value, entry_id=result.id)
        return result

    def leave(self, customer_id: int) -> LeaveResult:
        """
        Take a customer out of whatever line they are in.

        Returns:
            The barber they were queued with

        Raises:
            NotFoundError: Customer does not exist
            NotInQueueError: Customer holds no entry (e.g. a second leave)
        """
        def work(db: Session) -> LeaveResult:
            self._require_customer(db, customer_id, for_update=True)
            entry = queue_store.get_entry_for_customer(db, customer_id)
            if entry is None:
                raise NotInQueueError("Customer is not in any queue",
                                      {"customer_id": customer_id})
            result = LeaveResult(
                removed_from_barber_id=entry.barber_id,
                barber_name=entry.barber.name,
            )
            queue_store.delete_entry(db, entry)
            return result

        result = run_atomic(work, self.session_factory)
        log.info("queue_left", customer_id=customer_id,
                 barber_id=result.removed_from_barber_id)
        return result

    def remove_by_barber(self, barber_id: int, customer_id: int,
                         outcome: Union[RemovalOutcome, str] = RemovalOutcome.SERVED) -> RemoveResult:
        """
        Operator removes a customer from their own line.

        With outcome ``served`` a service history record is appended in the
        same unit as the removal; ``no_show`` just removes.

        Raises:
            InvalidArgumentError: Unknown outcome
            NotFoundError: Barber or customer missing, or customer not queued
            ForbiddenError: Customer is queued with a different barber
        """
        outcome = self._parse_outcome(outcome)

        def work(db: Session) -> RemoveResult:
            self._require_barber(db, barber_id)
            customer = self._require_customer(db, customer_id, for_update=True)
            entry = queue_store.get_entry_for_customer(db, customer_id)
            if entry is None:
                raise NotFoundError("Customer is not in this barber's queue",
                                    {"barber_id": barber_id, "customer_id": customer_id})
            if entry.barber_id != barber_id:
                raise ForbiddenError("Customer is queued with another barber",
                                     {"barber_id": barber_id, "customer_id": customer_id})

            removed_at = self._now()
            record_id = None
            if outcome is RemovalOutcome.SERVED:
                record_id = history.append_service_record(db, entry, served_at=removed_at).id

            result = RemoveResult(
                barber_id=barber_id,
                removed_customer=CustomerRef.model_validate(customer),
                outcome=outcome,
                removed_at=removed_at,
                service_record_id=record_id,
            )
            queue_store.delete_entry(db, entry)
            return result

        result = run_atomic(work, self.session_factory)
        log.info("queue_entry_removed", barber_id=barber_id, customer_id=customer_id,
                 outcome=outcome.value)
        return result

    # ========================================
    # Reads
    # ========================================

    def status(self, customer_id: int) -> QueueStatus:
        """
        Where a customer stands right now.

        Position is 1 + the number of entries in the same line that sort
        before this one by (entered_at, id). The estimated wait is
        (position - 1) x the barber's per-customer minutes.

        Raises:
            NotFoundError: Customer does not exist
        """
        def work(db: Session) -> QueueStatus:
            self._require_customer(db, customer_id)
            entry = queue_store.get_entry_for_customer(db, customer_id)
            if entry is None:
                return QueueStatus(in_queue=False)

            barber = entry.barber
            position = queue_store.count_ahead(db, entry) + 1
            minutes = barber.wait_minutes_per_customer(self.minutes_per_customer)
            return QueueStatus(
                in_queue=True,
                barber_id=barber.id,
                barber_name=barber.name,
                service_kind=entry.service_kind,
                entered_at=entry.entered_at,
                position=position,
                estimated_wait_minutes=estimate_wait_minutes(position, minutes),
                queue_length=queue_store.count_for_barber(db, barber.id),
            )

        return run_atomic(work, self.session_factory)

    def list_queue(self, barber_id: int) -> List[QueuedCustomer]:
        """
        A barber's whole line, front first.

        Raises:
            NotFoundError: Barber does not exist
        """
        def work(db: Session) -> List[QueuedCustomer]:
            self._require_barber(db, barber_id)
            return [
                QueuedCustomer.from_entry(position, entry)
                for position, entry in enumerate(queue_store.list_for_barber(db, barber_id), 1)
            ]

        return run_atomic(work, self.session_factory)

    def service_history(self, barber_id: int,
                        limit: int = DEFAULT_HISTORY_LIMIT) -> List[ServiceRecordOut]:
        """Most recent services by a barber, newest first."""
        if limit < 1:
            raise InvalidArgumentError(f"limit must be >= 1, got {limit}", {"limit": limit})

        def work(db: Session) -> List[ServiceRecordOut]:
            self._require_barber(db, barber_id)
            return [
                ServiceRecordOut.model_validate(record)
                for record in history.recent_for_barber(db, barber_id, limit)
            ]

        return run_atomic(work, self.session_factory)

    # ========================================
    # Helpers
    # ========================================

    def _now(self) -> datetime:
        """Clock reading in UTC, the zone every stored timestamp reads back in."""
        return self.clock().astimezone(UTC)

    @staticmethod
    def _parse_service_kind(service_kind: Union[ServiceKind, str]) -> ServiceKind:
        try:
            return ServiceKind(service_kind)
        except ValueError:
            raise InvalidArgumentError(
                f"Invalid service kind: {service_kind!r}. Must be one of: {ServiceKind.values()}",
                {"service_kind": service_kind},
            ) from None

    @staticmethod
    def _parse_outcome(outcome: Union[RemovalOutcome, str]) -> RemovalOutcome:
        try:
            return RemovalOutcome(outcome)
        except ValueError:
            raise InvalidArgumentError(
                f"Invalid removal outcome: {outcome!r}",
                {"outcome": outcome},
            ) from None

    @staticmethod
    def _require_barber(db: Session, barber_id: int) -> Barber:
        barber = barber_directory.get_barber(db, barber_id)
        if barber is None:
            raise NotFoundError(f"Barber not found: {barber_id}", {"barber_id": barber_id})
        return barber

    @staticmethod
    def _require_customer(db: Session, customer_id: int, for_update: bool = False) -> Customer:
        customer = barber_directory.get_customer(db, customer_id, for_update=for_update)
        if customer is None:
            raise NotFoundError(f"Customer not found: {customer_id}",
                                {"customer_id": customer_id})
        return customer


# Singleton instance (one engine across the app)
_queue_engine: Optional[QueueEngine] = None


def get_queue_engine() -> QueueEngine:
    """Get or create the process-wide queue engine."""
    global _queue_engine
    if _queue_engine is None:
        _queue_engine = QueueEngine()
    return _queue_engine
