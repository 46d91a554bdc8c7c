"""Shared test fixtures."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, UTC

# Keep the import-time global engine off the working directory
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "warning")

import pytest
from sqlalchemy.orm import sessionmaker

from nextcut.core.logging import setup_logging
from nextcut.database.session import create_all_tables, create_db_engine
from nextcut.services.directory import DirectoryService
from nextcut.services.queue_engine import QueueEngine
from nextcut.services.registry import RegistryService


class StepClock:
    """Returns a strictly increasing time, one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2024, 6, 1, 9, 0, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture(autouse=True, scope="session")
def _logging():
    setup_logging(level="warning")


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'nextcut.db'}", echo=False)
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autoflush=False, bind=db_engine)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def queue_engine(session_factory, clock):
    return QueueEngine(session_factory=session_factory, minutes_per_customer=15, clock=clock)


@pytest.fixture
def registry(session_factory):
    return RegistryService(session_factory=session_factory)


@pytest.fixture
def directory(session_factory):
    return DirectoryService(session_factory=session_factory, minutes_per_customer=15)


@pytest.fixture
def barber(registry):
    return registry.register_barber("B1", "b1", lat=12.9, long=77.6)


@pytest.fixture
def other_barber(registry):
    return registry.register_barber("B2", "b2", lat=12.95, long=77.65)


@pytest.fixture
def make_customer(registry):
    counter = iter(range(1, 10_000))

    def _make(name: str | None = None):
        n = next(counter)
        return registry.register_customer(name or f"U{n}", f"98{n:08d}")

    return _make
