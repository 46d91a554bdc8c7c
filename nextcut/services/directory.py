"""
Barber directory and proximity search.

Read-only with respect to the queue. Queue lengths attached to search results
are advisory: they are read in their own snapshot and may already be off by a
join or two when the caller renders them.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from nextcut.config import settings
from nextcut.core.exceptions import InvalidArgumentError, NotFoundError
from nextcut.core.geo import haversine_km, validate_coordinates
from nextcut.database.session import run_atomic
from nextcut.repositories import barber_directory, queue_store
from nextcut.schemas.barber import BarberOut, BarberWithLoad
from nextcut.schemas.queue import QueuedCustomer
from nextcut.services.estimator import estimate_for_new_arrival


class DirectoryService:
    """
    Looks up barbers and finds the ones near a point.

    Example:
        directory = DirectoryService()
        for barber in directory.find_near(12.97, 77.59, radius_km=5):
            print(barber.name, barber.distance_km, barber.queue_length)
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None,
                 minutes_per_customer: Optional[int] = None):
        self.session_factory = session_factory
        self.minutes_per_customer = (
            minutes_per_customer if minutes_per_customer is not None
            else settings.minutes_per_customer
        )

    def exists(self, barber_id: int) -> bool:
        return run_atomic(lambda db: barber_directory.barber_exists(db, barber_id),
                          self.session_factory)

    def get_barber(self, barber_id: int) -> BarberOut:
        """
        Raises:
            NotFoundError: No barber with that id
        """
        def work(db: Session) -> BarberOut:
            barber = barber_directory.get_barber(db, barber_id)
            if barber is None:
                raise NotFoundError(f"Barber not found: {barber_id}", {"barber_id": barber_id})
            return BarberOut.model_validate(barber)

        return run_atomic(work, self.session_factory)

    def find_near(self, lat: float, long: float,
                  radius_km: Optional[float] = None) -> List[BarberWithLoad]:
        """
        Barbers within ``radius_km`` of (lat, long), nearest first.

        Distance is haversine on a 6371 km sphere. Filtering and ordering use
        the exact distance; the reported ``distance_km`` is rounded to 0.1.
        Equal distances are ordered by barber id.

        Raises:
            InvalidArgumentError: Coordinates out of range or negative radius
        """
        validate_coordinates(lat, long)
        if radius_km is None:
            radius_km = settings.default_search_radius_km
        if radius_km < 0:
            raise InvalidArgumentError(f"Radius must be >= 0, got {radius_km}",
                                       {"radius_km": radius_km})

        def work(db: Session) -> List[BarberWithLoad]:
            hits = []
            for barber in barber_directory.all_barbers(db):
                distance = haversine_km(lat, long, barber.lat, barber.long)
                if distance <= radius_km:
                    hits.append((distance, barber))
            hits.sort(key=lambda hit: (hit[0], hit[1].id))

            lines = queue_store.list_for_barbers(db, [barber.id for _, barber in hits])
            results = []
            for distance, barber in hits:
                line = lines[barber.id]
                minutes = barber.wait_minutes_per_customer(self.minutes_per_customer)
                results.append(BarberWithLoad(
                    id=barber.id,
                    name=barber.name,
                    lat=barber.lat,
                    long=barber.long,
                    distance_km=round(distance, 1),
                    queue_length=len(line),
                    estimated_wait_minutes=estimate_for_new_arrival(len(line), minutes),
                    queue=[
                        QueuedCustomer.from_entry(position, entry)
                        for position, entry in enumerate(line, 1)
                    ],
                ))
            return results

        return run_atomic(work, self.session_factory)


def get_directory_service() -> DirectoryService:
    """Factory function for creating DirectoryService."""
    return DirectoryService()
