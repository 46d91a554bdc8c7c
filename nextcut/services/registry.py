"""
Registry service: signing barbers and customers up.

Credentials are handled elsewhere; this only creates the directory rows the
queue engine refers to.
"""

import re
from typing import Optional

import structlog
from sqlalchemy.orm import Session, sessionmaker

from nextcut.core.constants import MIN_PHONE_DIGITS
from nextcut.core.exceptions import InvalidArgumentError, NotFoundError
from nextcut.core.geo import validate_coordinates
from nextcut.database.session import run_atomic
from nextcut.repositories import barber_directory
from nextcut.schemas.barber import BarberOut, CustomerOut

log = structlog.get_logger()


def normalize_phone_number(phone_number: str) -> str:
    """Strip everything but digits; at least 10 must remain."""
    digits = re.sub(r"\D", "", phone_number or "")
    if len(digits) < MIN_PHONE_DIGITS:
        raise InvalidArgumentError("Please enter a valid phone number",
                                   {"phone_number": phone_number})
    return digits


class RegistryService:
    """Creates and fetches barbers and customers."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def register_barber(self, name: str, username: str, lat: float, long: float,
                        minutes_per_customer: Optional[int] = None) -> BarberOut:
        """
        Create a barber.

        Raises:
            InvalidArgumentError: Blank name/username, bad coordinates or a
                negative minutes_per_customer
            AlreadyExistsError: Username already taken
        """
        name = _require_text(name, "name")
        username = _require_text(username, "username")
        validate_coordinates(lat, long)
        if minutes_per_customer is not None and minutes_per_customer < 0:
            raise InvalidArgumentError("minutes_per_customer must be >= 0",
                                       {"minutes_per_customer": minutes_per_customer})

        def work(db: Session) -> BarberOut:
            barber = barber_directory.add_barber(
                db, name=name, username=username, lat=lat, long=long,
                minutes_per_customer=minutes_per_customer,
            )
            return BarberOut.model_validate(barber)

        barber = run_atomic(work, self.session_factory)
        log.info("barber_registered", barber_id=barber.id, username=barber.username)
        return barber

    def register_customer(self, name: str, phone_number: str) -> CustomerOut:
        """
        Create a customer.

        Raises:
            InvalidArgumentError: Blank name or fewer than 10 phone digits
            AlreadyExistsError: Phone number already registered
        """
        name = _require_text(name, "name")
        phone = normalize_phone_number(phone_number)

        def work(db: Session) -> CustomerOut:
            customer = barber_directory.add_customer(db, name=name, phone_number=phone)
            return CustomerOut.model_validate(customer)

        customer = run_atomic(work, self.session_factory)
        log.info("customer_registered", customer_id=customer.id)
        return customer

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

    def get_customer(self, customer_id: int) -> CustomerOut:
        """
        Raises:
            NotFoundError: No customer with that id
        """
        def work(db: Session) -> CustomerOut:
            customer = barber_directory.get_customer(db, customer_id)
            if customer is None:
                raise NotFoundError(f"Customer not found: {customer_id}",
                                    {"customer_id": customer_id})
            return CustomerOut.model_validate(customer)

        return run_atomic(work, self.session_factory)


def _require_text(value: str, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{field} is required", {field: value})
    return value.strip()


def get_registry_service() -> RegistryService:
    """Factory function for creating RegistryService."""
    return RegistryService()
