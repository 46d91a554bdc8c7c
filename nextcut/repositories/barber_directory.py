"""
Barber directory queries.

Read-only from the queue engine's perspective. The only writes are
``add_barber`` and ``add_customer``, used by the registry at sign-up.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from nextcut.models.barber import Barber
from nextcut.models.customer import Customer


def get_barber(db: Session, barber_id: int) -> Optional[Barber]:
    """Barber by id, or None."""
    return db.get(Barber, barber_id)


def barber_exists(db: Session, barber_id: int) -> bool:
    return db.query(Barber.id).filter_by(id=barber_id).first() is not None


def all_barbers(db: Session) -> List[Barber]:
    return db.query(Barber).order_by(Barber.id).all()


def add_barber(db: Session, **fields) -> Barber:
    barber = Barber(**fields)
    db.add(barber)
    db.flush()
    return barber


def get_customer(db: Session, customer_id: int, for_update: bool = False) -> Optional[Customer]:
    """
    Customer by id, or None.

    With ``for_update`` the row is locked until the transaction ends on stores
    that support row locks; SQLite ignores it and relies on BEGIN IMMEDIATE.
    """
    if for_update:
        return db.get(Customer, customer_id, with_for_update=True)
    return db.get(Customer, customer_id)


def add_customer(db: Session, **fields) -> Customer:
    customer = Customer(**fields)
    db.add(customer)
    db.flush()
    return customer
