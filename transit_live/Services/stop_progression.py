# transit_live/Services/stop_progression.py
"""
Stop Progression Engine
=======================
Arrival and departure handling for the stops of a moving trip.

Arquitectura:
- Public operations (arrive_at_stop, depart_from_stop) open their own trip
  unit of work.
- The building blocks (record_arrival, detect_arrival, skip_remaining_stops)
  operate on a trip already loaded inside a unit of work, so location
  ingestion and lifecycle operations reuse them without re-locking.

Rules:
- Arrival is idempotent: only a PENDING stop transitions to ARRIVED. A stop
  that is already ARRIVED, DEPARTED or SKIPPED is left untouched, so a
  manual arrival racing a proximity arrival yields exactly one transition
  and one delay value.
- delay = round((arrived_at - scheduled_at) / 1 minute), half rounded up.
- The first real arrival after start moves the trip STARTED → IN_PROGRESS.
  Stop 0 is pre-marked ARRIVED by the schedule builder and does not count.
- Departure requires ARRIVED. Passenger count is floored at zero but not
  capped at capacity; overflow is logged and exposed as ``over_capacity``.
- current_stop_index moves to departed position + 1, clamped to the last
  stop, and never decreases.
"""

from datetime import datetime
from math import floor
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from transit_live.Core.config import settings
from transit_live.Core.exceptions import StopNotFound, TripNotActive, NotArrived
from transit_live.Models.trip_enums import TripStatus, StopStatus
from transit_live.Models.trip_stop import TripStop
from transit_live.Services.geo import DistanceFn, calculate_haversine_distance
from transit_live.Services.trip_locks import Clock, TripLockRegistry, trip_locks, trip_unit_of_work, utc_now
from transit_live.Services.trip_state import apply_transition


# ==========================================================
# HELPERS
# ==========================================================

def compute_delay_minutes(scheduled_at: datetime, arrived_at: datetime) -> int:
    """
    Signed whole minutes late (positive) or early (negative).

    Examples:
        >>> compute_delay_minutes(t, t + timedelta(minutes=12))
        12
        >>> compute_delay_minutes(t, t)
        0
    """
    minutes = (arrived_at - scheduled_at).total_seconds() / 60
    return int(floor(minutes + 0.5))


def require_moving(trip) -> None:
    """Stops can only progress while the trip is STARTED or IN_PROGRESS."""
    if not TripStatus(trip.status).accepts_progress:
        raise TripNotActive(trip.id, TripStatus(trip.status).value)


def find_stop(trip, route_point_id: str) -> Tuple[int, TripStop]:
    """
    Position and row of a route point within the trip's ordered schedule.
    """
    for position, stop in enumerate(trip.stops):
        if stop.route_point_id == route_point_id:
            return position, stop
    raise StopNotFound(trip.id, route_point_id)


def current_stop(trip) -> Optional[TripStop]:
    stops = trip.stops
    if not stops:
        return None
    return stops[min(trip.current_stop_index, len(stops) - 1)]


# ==========================================================
# BUILDING BLOCKS (caller holds the trip unit of work)
# ==========================================================

def record_arrival(trip, stop: TripStop, now: datetime) -> bool:
    """
    Mark ``stop`` ARRIVED at ``now`` unless it already progressed.

    Returns:
        bool: True if this call performed the transition
    """
    if stop.status != StopStatus.PENDING:
        return False

    stop.arrived_at = now
    stop.status = StopStatus.ARRIVED
    stop.delay = compute_delay_minutes(stop.scheduled_at, now)

    if trip.status == TripStatus.STARTED:
        apply_transition(trip, TripStatus.IN_PROGRESS, now)
    else:
        trip.updated_at = now

    print(f"[TRIP] {trip.id}: arrived at stop {stop.order} ({stop.route_point_id}), delay {stop.delay:+d} min")
    return True


def detect_arrival(
    trip,
    latitude: float,
    longitude: float,
    now: datetime,
    radius_m: Optional[float] = None,
    distance_fn: DistanceFn = calculate_haversine_distance
) -> Tuple[Optional[TripStop], Optional[float]]:
    """
    Proximity check against the trip's CURRENT stop only.

    Later stops are never checked ahead of their turn, so GPS noise near a
    downstream stop cannot skip the schedule forward.

    Returns:
        (stop, distance_m): ``stop`` is set only when this sample caused the
        arrival; ``distance_m`` is None when the trip has no stops.
    """
    stop = current_stop(trip)
    if stop is None:
        return None, None

    if radius_m is None:
        radius_m = settings.ARRIVAL_RADIUS_M

    point = stop.route_point
    distance = distance_fn(latitude, longitude, point.latitude, point.longitude)

    if distance <= radius_m and record_arrival(trip, stop, now):
        print(f"[LOCATION] {trip.id}: proximity arrival at stop {stop.order} ({distance:.0f} m)")
        return stop, distance

    return None, distance


def skip_remaining_stops(trip) -> int:
    """
    Mark every PENDING stop SKIPPED (trip completion / cancellation).

    Returns:
        int: Number of stops skipped
    """
    skipped = 0
    for stop in trip.stops:
        if stop.status == StopStatus.PENDING:
            stop.status = StopStatus.SKIPPED
            skipped += 1
    return skipped


# ==========================================================
# PUBLIC OPERATIONS
# ==========================================================

def arrive_at_stop(
    db: Session,
    trip_id: str,
    route_point_id: str,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> TripStop:
    """
    Driver-initiated arrival at a stop.

    Raises:
        TripNotFound / StopNotFound: Unknown trip or route point
        TripNotActive: Trip is paused or finished
    """
    with trip_unit_of_work(db, trip_id, locks) as trip:
        require_moving(trip)
        _, stop = find_stop(trip, route_point_id)
        record_arrival(trip, stop, clock())

    return stop


def depart_from_stop(
    db: Session,
    trip_id: str,
    route_point_id: str,
    passengers_boarded: int = 0,
    passengers_alighted: int = 0,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks
) -> TripStop:
    """
    Driver-initiated departure with passenger accounting.

    Raises:
        TripNotFound / StopNotFound: Unknown trip or route point
        TripNotActive: Trip is paused or finished
        NotArrived: The stop is not in ARRIVED state
        ValueError: Negative passenger counts
    """
    if passengers_boarded < 0 or passengers_alighted < 0:
        raise ValueError("Passenger counts cannot be negative")

    with trip_unit_of_work(db, trip_id, locks) as trip:
        require_moving(trip)
        position, stop = find_stop(trip, route_point_id)

        if stop.status != StopStatus.ARRIVED:
            raise NotArrived(trip.id, route_point_id, StopStatus(stop.status).value)

        now = clock()
        stop.departed_at = now
        stop.status = StopStatus.DEPARTED
        stop.passengers_boarded = passengers_boarded
        stop.passengers_alighted = passengers_alighted

        trip.passenger_count = max(0, trip.passenger_count + passengers_boarded - passengers_alighted)

        last_index = len(trip.stops) - 1
        trip.current_stop_index = max(trip.current_stop_index, min(position + 1, last_index))
        trip.updated_at = now

        print(
            f"[TRIP] {trip.id}: departed stop {stop.order} "
            f"(+{passengers_boarded}/-{passengers_alighted}, aboard {trip.passenger_count})"
        )
        if trip.over_capacity:
            print(
                f"[TRIP] ⚠️ {trip.id}: {trip.passenger_count} passengers aboard, "
                f"capacity {trip.max_capacity}"
            )

    return stop
