"""
Database models package.

Contains all SQLAlchemy ORM models.
"""

from nextcut.models.base import Base, CreatedAtMixin, UTCDateTime
from nextcut.models.barber import Barber
from nextcut.models.customer import Customer
from nextcut.models.queue_entry import QueueEntry
from nextcut.models.service_record import ServiceRecord

__all__ = [
    "Base",
    "CreatedAtMixin",
    "UTCDateTime",
    "Barber",
    "Customer",
    "QueueEntry",
    "ServiceRecord",
]
