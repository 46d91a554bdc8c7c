"""
Record schemas returned by the service layer.

Pydantic models, JSON-serializable and independent of any web framework.
"""

from nextcut.schemas.queue import (
    BarberRef,
    CustomerRef,
    LeaveResult,
    QueuedCustomer,
    QueueEntryOut,
    QueueStatus,
    RemoveResult,
    ServiceRecordOut,
)
from nextcut.schemas.barber import BarberOut, BarberWithLoad, CustomerOut

__all__ = [
    "BarberOut",
    "BarberRef",
    "BarberWithLoad",
    "CustomerOut",
    "CustomerRef",
    "LeaveResult",
    "QueuedCustomer",
    "QueueEntryOut",
    "QueueStatus",
    "RemoveResult",
    "ServiceRecordOut",
]
