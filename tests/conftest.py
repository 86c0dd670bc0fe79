# tests/conftest.py
import os

# Settings are validated on import; the application engine is never used by
# the tests (each test gets its own SQLite file below).
os.environ.setdefault("DATABASE_URL", "sqlite:///./transit_live_unused.db")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from transit_live.DB.base import Base, Route, RoutePoint, Vehicle, Driver, Trip
from transit_live.Schemas.trip import Trip_start
from transit_live.Services.trip_lifecycle import start_trip
from transit_live.Services.trip_locks import TripLockRegistry


T0 = datetime(2025, 11, 3, 8, 0, tzinfo=timezone.utc)

# Barranquilla stops roughly 1 km apart, so only the stop being approached
# is ever inside the 100 m arrival radius.
ROUTE_POINTS = [
    ("rp-1", "Terminal Norte", 10.9639, -74.7964),
    ("rp-2", "Calle 72", 10.9729, -74.7964),
    ("rp-3", "Plaza de la Paz", 10.9819, -74.7964),
    ("rp-4", "Malecón", 10.9909, -74.7964),
]


class FakeClock:
    """Controllable clock: returns ``now`` until advanced."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tracking.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory, seed):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(session_factory):
    """
    Collaborators:
    - rt-3: 3 stops, rt-4: 4 stops, rt-empty: no stops (tenant acme)
    - veh-1 (capacity 40) and veh-3 (tenant other) / veh-2 (capacity unknown)
    - drv-1, drv-2, drv-3
    """
    with session_factory() as session:
        session.add_all([
            Route(id="rt-3", tenant_id="acme", code="R3", name="Troncal Norte"),
            Route(id="rt-4", tenant_id="acme", code="R4", name="Troncal Malecón"),
            Route(id="rt-empty", tenant_id="acme", code="R0", name="Sin paradas"),
        ])
        for route_id, count in (("rt-3", 3), ("rt-4", 4)):
            for order, (point_id, name, lat, lon) in enumerate(ROUTE_POINTS[:count]):
                session.add(RoutePoint(
                    id=f"{route_id}-{point_id}",
                    route_id=route_id,
                    name=name,
                    latitude=lat,
                    longitude=lon,
                    order=order,
                ))
        session.add_all([
            Vehicle(id="veh-1", tenant_id="acme", plate_number="ABC123", capacity=40),
            Vehicle(id="veh-2", tenant_id="acme", plate_number="DEF456", capacity=None),
            Vehicle(id="veh-3", tenant_id="other", plate_number="GHI789", capacity=20),
            Driver(id="drv-1", tenant_id="acme", name="Ana Torres"),
            Driver(id="drv-2", tenant_id="acme", name="Luis Pérez"),
            Driver(id="drv-3", tenant_id="other", name="Sofía Rojas"),
        ])
        session.commit()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def locks():
    return TripLockRegistry()


@pytest.fixture
def started_trip(db, clock, locks):
    """Factory: start a trip and return its id."""

    def _start(route_id="rt-3", vehicle_id="veh-1", driver_id="drv-1", **extra):
        payload = Trip_start(
            route_id=route_id,
            vehicle_id=vehicle_id,
            driver_id=driver_id,
            scheduled_start=clock(),
            scheduled_end=clock() + timedelta(hours=1),
            **extra,
        )
        return start_trip(db, payload, clock=clock, locks=locks).id

    return _start


def point_id(route_id: str, index: int) -> str:
    return f"{route_id}-{ROUTE_POINTS[index][0]}"


def coords(index: int):
    return ROUTE_POINTS[index][2], ROUTE_POINTS[index][3]


def reload(db, trip_id: str) -> Trip:
    db.expire_all()
    return db.get(Trip, trip_id)
