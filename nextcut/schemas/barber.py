"""Directory record schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from nextcut.schemas.queue import QueuedCustomer


class BarberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str
    lat: float
    long: float
    minutes_per_customer: Optional[int] = None


class BarberWithLoad(BaseModel):
    """A proximity search hit, annotated with its current (advisory) load."""

    id: int
    name: str
    lat: float
    long: float
    distance_km: float = Field(..., ge=0, description="Rounded to 0.1 km")
    queue_length: int = Field(..., ge=0)
    estimated_wait_minutes: int = Field(..., ge=0, description="Wait for a new arrival")
    queue: List[QueuedCustomer] = Field(default_factory=list)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone_number: str
    in_queue: bool
    current_barber_id: Optional[int] = None
