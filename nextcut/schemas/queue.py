"""
Queue record schemas.

Response shapes for the queue operations. Every model is built from ORM
objects or plain values and dumps to JSON with ``model_dump(mode="json")``.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from nextcut.core.constants import RemovalOutcome, ServiceKind


class CustomerRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class BarberRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class QueueEntryOut(BaseModel):
    """A live queue entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    barber_id: int
    customer_id: int
    service_kind: ServiceKind
    entered_at: datetime
    barber: Optional[BarberRef] = None
    customer: Optional[CustomerRef] = None


class QueuedCustomer(BaseModel):
    """One row of a barber's line as the operator sees it."""

    position: int = Field(..., ge=1)
    entry_id: int
    customer: CustomerRef
    service_kind: ServiceKind
    entered_at: datetime

    @classmethod
    def from_entry(cls, position: int, entry) -> "QueuedCustomer":
        """Build from a QueueEntry whose customer is loaded."""
        return cls(
            position=position,
            entry_id=entry.id,
            customer=CustomerRef.model_validate(entry.customer),
            service_kind=entry.service_kind,
            entered_at=entry.entered_at,
        )


class LeaveResult(BaseModel):
    removed_from_barber_id: int
    barber_name: str


class RemoveResult(BaseModel):
    barber_id: int
    removed_customer: CustomerRef
    outcome: RemovalOutcome
    removed_at: datetime
    service_record_id: Optional[int] = None


class QueueStatus(BaseModel):
    """
    Point-in-time projection of one customer's place in line.

    Everything but ``in_queue`` is None when the customer is not queued.
    """

    in_queue: bool
    barber_id: Optional[int] = None
    barber_name: Optional[str] = None
    service_kind: Optional[ServiceKind] = None
    entered_at: Optional[datetime] = None
    position: Optional[int] = None
    estimated_wait_minutes: Optional[int] = None
    queue_length: Optional[int] = None


class ServiceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    barber_id: int
    customer_id: int
    service_kind: ServiceKind
    entered_at: datetime
    served_at: datetime
