# transit_live/Repositories/trip.py
"""
Trip Repository - Database operations for trip management.

Responsibilities:
- Create trips inside the caller's transaction
- Lookups by id (optionally row-locked), by driver and by vehicle
- Active trip board per tenant
- Window queries for analytics

Transaction contract:
    Functions here ``flush`` but never ``commit``. The trip unit of work in
    ``transit_live.Services.trip_locks`` owns commit/rollback, so a trip, its
    stop schedule and its shift are persisted all-or-nothing.

Usage:
    from transit_live.Repositories.trip import get_trip_by_id, get_active_trip_by_driver

    trip = get_trip_by_id(db, trip_id, for_update=True)
    busy = get_active_trip_by_driver(db, "drv-1")
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from transit_live.Models.trip import Trip
from transit_live.Models.fleet import Vehicle
from transit_live.Models.trip_enums import TripStatus, NON_TERMINAL_TRIP_STATUSES

# ==========================================================
# CREATE OPERATIONS
# ==========================================================

def create_trip(
    DB: Session,
    trip_id: str,
    route_id: str,
    vehicle_id: str,
    driver_id: str,
    scheduled_start: datetime,
    scheduled_end: datetime,
    max_capacity: int,
    now: datetime
) -> Trip:
    """
    Insert a new trip in STARTED state with counters at zero.

    Args:
        DB: SQLAlchemy session
        trip_id: New trip identifier
        route_id / vehicle_id / driver_id: Collaborator references
        scheduled_start / scheduled_end: Planned window
        max_capacity: Capacity snapshot
        now: Actual start instant (also used as created_at)

    Returns:
        Trip: Pending ORM object, flushed so constraint violations surface here
    """
    new_trip = Trip(
        id=trip_id,
        route_id=route_id,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        scheduled_start=scheduled_start,
        scheduled_end=scheduled_end,
        actual_start=now,
        status=TripStatus.STARTED,
        max_capacity=max_capacity,
        passenger_count=0,
        current_stop_index=0,
        created_at=now,
    )
    DB.add(new_trip)
    DB.flush()

    print(f"[REPO] Trip created: {new_trip.id} (vehicle: {vehicle_id}, driver: {driver_id})")

    return new_trip


# ==========================================================
# READ OPERATIONS - SINGLE TRIP
# ==========================================================

def get_trip_by_id(DB: Session, trip_id: str, for_update: bool = False) -> Optional[Trip]:
    """
    Retrieve a trip by its identifier.

    Args:
        DB: SQLAlchemy session
        trip_id: Trip identifier
        for_update: Take a row lock (SELECT ... FOR UPDATE) and refresh any
            state already present in the session's identity map

    Returns:
        Trip or None
    """
    query = DB.query(Trip).filter(Trip.id == trip_id)

    if for_update:
        query = query.with_for_update().populate_existing()

    return query.first()


def get_active_trip_by_driver(DB: Session, driver_id: str) -> Optional[Trip]:
    """
    Get the driver's non-terminal trip (STARTED, IN_PROGRESS or PAUSED), if any.
    """
    return (
        DB.query(Trip)
        .filter(
            Trip.driver_id == driver_id,
            Trip.status.in_(sorted(NON_TERMINAL_TRIP_STATUSES))
        )
        .first()
    )


def get_active_trip_by_vehicle(DB: Session, vehicle_id: str) -> Optional[Trip]:
    """
    Get the vehicle's non-terminal trip (STARTED, IN_PROGRESS or PAUSED), if any.
    """
    return (
        DB.query(Trip)
        .filter(
            Trip.vehicle_id == vehicle_id,
            Trip.status.in_(sorted(NON_TERMINAL_TRIP_STATUSES))
        )
        .first()
    )


# ==========================================================
# READ OPERATIONS - MULTIPLE TRIPS
# ==========================================================

def get_active_trips(DB: Session, tenant_id: Optional[str] = None) -> list[Trip]:
    """
    Get all non-terminal trips, optionally scoped to a tenant's vehicles.

    Returns:
        list[Trip]: Ordered by scheduled start (earliest first)
    """
    query = DB.query(Trip).filter(Trip.status.in_(sorted(NON_TERMINAL_TRIP_STATUSES)))

    if tenant_id:
        query = query.join(Vehicle, Vehicle.id == Trip.vehicle_id).filter(Vehicle.tenant_id == tenant_id)

    return query.order_by(Trip.scheduled_start.asc()).all()


def get_trips_in_window(
    DB: Session,
    tenant_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
) -> list[Trip]:
    """
    Get trips whose scheduled start falls in ``[start_date, end_date]``.

    Args:
        DB: SQLAlchemy session
        tenant_id: Restrict to vehicles of this tenant (None for all)
        start_date: Inclusive lower bound (None for open)
        end_date: Inclusive upper bound (None for open)
    """
    query = DB.query(Trip)

    if tenant_id:
        query = query.join(Vehicle, Vehicle.id == Trip.vehicle_id).filter(Vehicle.tenant_id == tenant_id)

    if start_date:
        query = query.filter(Trip.scheduled_start >= start_date)

    if end_date:
        query = query.filter(Trip.scheduled_start <= end_date)

    return query.order_by(Trip.scheduled_start.asc()).all()
