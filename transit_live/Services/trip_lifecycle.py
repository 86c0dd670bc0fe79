# transit_live/Services/trip_lifecycle.py
"""
Trip Lifecycle Manager
======================
Creation, pause/resume, completion and cancellation of trips, plus the
trip read models.

Responsibilities:
- StartTrip: busy checks + trip + full stop schedule + shift, one commit
- EmergencyStop / ResumeTrip: PAUSED ⇄ IN_PROGRESS with the shift mirrored
- CompleteTrip / CancelTrip: terminal transitions, pending stops SKIPPED,
  shift closed
- Read models: trip status board and active trips per tenant

Exclusivity:
    A driver and a vehicle may each have at most one trip in STARTED,
    IN_PROGRESS or PAUSED. start_trip holds the driver and vehicle keys of
    the lock registry while it checks and creates, and the partial unique
    indexes on ``trips`` / ``driver_shifts`` reject whatever slips past the
    in-process locks (other processes). Both paths surface as
    DriverBusy / VehicleBusy.
"""

from typing import Callable, Optional
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from transit_live.Core.config import settings
from transit_live.Core.exceptions import (
    DriverBusy,
    VehicleBusy,
    RouteNotFound,
    VehicleNotFound,
    DriverNotFound,
    TripNotFound,
    NotPaused,
)
from transit_live.DB.types import ensure_utc
from transit_live.Models.trip import Trip
from transit_live.Models.trip_enums import TripStatus
from transit_live.Repositories.fleet import get_route, get_vehicle, get_driver
from transit_live.Repositories.shift import get_open_shift_by_driver
from transit_live.Repositories.trip import (
    create_trip,
    get_trip_by_id,
    get_active_trip_by_driver,
    get_active_trip_by_vehicle,
    get_active_trips as _active_trips
)
from transit_live.Repositories.trip_stop import create_trip_stops
from transit_live.Repositories.vehicle_location import get_latest_location_by_trip
from transit_live.Schemas.trip import Trip_start, Trip_status, Trip_summary
from transit_live.Schemas.trip_stop import TripStop_get
from transit_live.Schemas.vehicle_location import Location_get
from transit_live.Services import shift_coordinator
from transit_live.Services.stop_progression import current_stop, skip_remaining_stops
from transit_live.Services.stop_schedule import build_stop_schedule
from transit_live.Services.trip_locks import (
    Clock,
    TripLockRegistry,
    trip_locks,
    trip_unit_of_work,
    transaction,
    utc_now
)
from transit_live.Services.trip_state import apply_transition


def _new_trip_id() -> str:
    return str(uuid.uuid4())


# ==========================================================
# START
# ==========================================================

def start_trip(
    db: Session,
    data: Trip_start,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks,
    id_factory: Callable[[], str] = _new_trip_id
) -> Trip:
    """
    Start a trip: create it with its full stop schedule and open the shift.

    Capacity resolution: override → vehicle capacity → DEFAULT_VEHICLE_CAPACITY.

    Raises:
        DriverBusy / VehicleBusy: A non-terminal trip already exists
        RouteNotFound / VehicleNotFound / DriverNotFound: Unknown collaborator
        EmptyRoute: The route has no stops

    Nothing is persisted when any of these is raised.
    """
    with locks.hold(f"driver:{data.driver_id}", f"vehicle:{data.vehicle_id}"):
        db.expire_all()
        try:
            with transaction(db):
                if get_active_trip_by_driver(db, data.driver_id):
                    raise DriverBusy(data.driver_id)

                if get_active_trip_by_vehicle(db, data.vehicle_id):
                    raise VehicleBusy(data.vehicle_id)

                route = get_route(db, data.route_id)
                if route is None:
                    raise RouteNotFound(data.route_id)

                vehicle = get_vehicle(db, data.vehicle_id)
                if vehicle is None:
                    raise VehicleNotFound(data.vehicle_id)

                if get_driver(db, data.driver_id) is None:
                    raise DriverNotFound(data.driver_id)

                scheduled_start = ensure_utc(data.scheduled_start)
                schedule = build_stop_schedule(route.points, scheduled_start, route_id=route.id)

                max_capacity = data.max_capacity or vehicle.capacity or settings.DEFAULT_VEHICLE_CAPACITY

                now = clock()
                trip = create_trip(
                    db,
                    trip_id=id_factory(),
                    route_id=route.id,
                    vehicle_id=data.vehicle_id,
                    driver_id=data.driver_id,
                    scheduled_start=scheduled_start,
                    scheduled_end=ensure_utc(data.scheduled_end),
                    max_capacity=max_capacity,
                    now=now,
                )
                create_trip_stops(db, trip.id, schedule)
                shift_coordinator.open_shift(db, trip, now, location=route.points[0].name)

        except IntegrityError as exc:
            busy = _busy_error(db, data)
            if busy is None:
                raise
            raise busy from exc

    print(
        f"[TRIP] ✅ Trip {trip.id} started: route {data.route_id}, vehicle {data.vehicle_id}, "
        f"driver {data.driver_id}, capacity {max_capacity}, {len(schedule)} stops"
    )
    return trip


def _busy_error(db: Session, data: Trip_start) -> Optional[Exception]:
    """
    Translate a uniqueness violation from a concurrent start into the busy error.

    Returns None when neither the driver nor the vehicle is busy, so the
    caller re-raises the original IntegrityError.
    """
    if get_active_trip_by_driver(db, data.driver_id) or get_open_shift_by_driver(db, data.driver_id):
        print(f"[TRIP] ❌ Start rejected, driver {data.driver_id} busy (concurrent start)")
        return DriverBusy(data.driver_id)

    if get_active_trip_by_vehicle(db, data.vehicle_id):
        print(f"[TRIP] ❌ Start rejected, vehicle {data.vehicle_id} busy (concurrent start)")
        return VehicleBusy(data.vehicle_id)

    return None


# ==========================================================
# PAUSE / RESUME
# ==========================================================

def emergency_stop(
    db: Session,
    trip_id: str,
    reason: str,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> Trip:
    """
    Pause the trip and put the driver's shift in EMERGENCY.

    Allowed from STARTED, IN_PROGRESS and PAUSED (a repeated stop just
    updates the reason).

    Raises:
        TripNotFound, TripNotActive (trip already finished)
    """
    with trip_unit_of_work(db, trip_id, locks) as trip:
        apply_transition(trip, TripStatus.PAUSED, clock())
        trip.notes = reason
        shift_coordinator.mark_emergency(db, trip, reason)

    print(f"[TRIP] ⚠️ Trip {trip_id} paused: {reason}")
    return trip


def resume_trip(
    db: Session,
    trip_id: str,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> Trip:
    """
    Resume a paused trip; the shift returns to ACTIVE.

    Raises:
        TripNotFound, NotPaused
    """
    with trip_unit_of_work(db, trip_id, locks) as trip:
        if trip.status != TripStatus.PAUSED:
            raise NotPaused(trip.id, TripStatus(trip.status).value)

        apply_transition(trip, TripStatus.IN_PROGRESS, clock())
        shift_coordinator.clear_emergency(db, trip)

    print(f"[TRIP] Trip {trip_id} resumed")
    return trip


# ==========================================================
# TERMINAL TRANSITIONS
# ==========================================================

def complete_trip(
    db: Session,
    trip_id: str,
    notes: Optional[str] = None,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> Trip:
    """
    Finish the trip: COMPLETED, pending stops SKIPPED, shift checked out.

    Raises:
        TripNotFound, TripNotActive (already completed or cancelled)
    """
    return _finish(db, trip_id, TripStatus.COMPLETED, notes, clock, locks)


def cancel_trip(
    db: Session,
    trip_id: str,
    reason: str,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> Trip:
    """
    Dispatcher hard cancel. Frees the driver and vehicle immediately.

    Raises:
        TripNotFound, TripNotActive (already completed or cancelled)
    """
    return _finish(db, trip_id, TripStatus.CANCELLED, reason, clock, locks)


def _finish(
    db: Session,
    trip_id: str,
    target: TripStatus,
    notes: Optional[str],
    clock: Clock,
    locks: TripLockRegistry
) -> Trip:
    with trip_unit_of_work(db, trip_id, locks) as trip:
        now = clock()
        apply_transition(trip, target, now)
        trip.actual_end = now
        if notes is not None:
            trip.notes = notes

        skipped = skip_remaining_stops(trip)
        shift_coordinator.close_shift(db, trip, now)

    print(f"[TRIP] Trip {trip_id} {target.value.lower()} ({skipped} stops skipped)")
    return trip


# ==========================================================
# READ MODELS
# ==========================================================

def get_trip(db: Session, trip_id: str) -> Trip:
    trip = get_trip_by_id(db, trip_id)
    if trip is None:
        raise TripNotFound(trip_id)
    return trip


def get_trip_status(db: Session, trip_id: str) -> Trip_status:
    """
    Live status of one trip: counters, stops with delays, latest location.

    Raises:
        TripNotFound
    """
    trip = get_trip(db, trip_id)
    latest = get_latest_location_by_trip(db, trip.id)
    stop = current_stop(trip)

    return Trip_status(
        id=trip.id,
        route_id=trip.route_id,
        vehicle_id=trip.vehicle_id,
        driver_id=trip.driver_id,
        scheduled_start=trip.scheduled_start,
        scheduled_end=trip.scheduled_end,
        actual_start=trip.actual_start,
        actual_end=trip.actual_end,
        status=trip.status,
        notes=trip.notes,
        max_capacity=trip.max_capacity,
        passenger_count=trip.passenger_count,
        current_stop_index=trip.current_stop_index,
        over_capacity=trip.over_capacity,
        route_name=trip.route.name if trip.route else None,
        driver_name=trip.driver.name if trip.driver else None,
        current_stop=TripStop_get.from_stop(stop) if stop else None,
        stops=[TripStop_get.from_stop(s) for s in trip.stops],
        latest_location=Location_get.model_validate(latest) if latest else None,
    )


def get_active_trips(db: Session, tenant_id: Optional[str] = None) -> list[Trip_summary]:
    """
    Non-terminal trips of a tenant, earliest scheduled first, each with its
    latest location.
    """
    summaries = []
    for trip in _active_trips(db, tenant_id):
        latest = get_latest_location_by_trip(db, trip.id)
        summaries.append(Trip_summary(
            id=trip.id,
            route_id=trip.route_id,
            route_name=trip.route.name if trip.route else None,
            vehicle_id=trip.vehicle_id,
            driver_id=trip.driver_id,
            driver_name=trip.driver.name if trip.driver else None,
            status=trip.status,
            scheduled_start=trip.scheduled_start,
            passenger_count=trip.passenger_count,
            max_capacity=trip.max_capacity,
            current_stop_index=trip.current_stop_index,
            latest_location=Location_get.model_validate(latest) if latest else None,
        ))
    return summaries
