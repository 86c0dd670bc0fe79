# transit_live/Services/location_ingestion.py
"""
Location Ingestion Pipeline
===========================
Accepts GPS samples streamed by the driver app, stores them and runs the
proximity check against the trip's current stop.

Flujo por muestra:
    1. Lock the trip (trip unit of work)
    2. Reject unless STARTED / IN_PROGRESS (TripNotActive, nothing stored)
       or when the sample comes from another vehicle (VehicleMismatch)
    3. Append the VehicleLocation row
    4. If the sample is the trip's newest, run proximity detection
    5. Commit sample + any arrival together

Samples captured before the trip's newest stored sample (late delivery
from a device buffer) are kept for history but do not drive arrivals.
Capture times too far ahead of the server clock are replaced by the
receipt time, so a drifting device cannot mark every later sample stale.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from transit_live.Core.config import settings
from transit_live.Core.exceptions import VehicleMismatch
from transit_live.DB.types import ensure_utc
from transit_live.Models.vehicle_location import VehicleLocation
from transit_live.Repositories.vehicle_location import (
    create_location,
    get_latest_location_by_trip,
    get_vehicle_location_history as _history
)
from transit_live.Schemas.vehicle_location import Location_create, Location_get, Location_ingest_result
from transit_live.Services.geo import DistanceFn, calculate_haversine_distance
from transit_live.Services.stop_progression import detect_arrival, require_moving
from transit_live.Services.trip_locks import Clock, TripLockRegistry, trip_locks, trip_unit_of_work, utc_now


def ingest_location(
    db: Session,
    data: Location_create,
    clock: Clock = utc_now,
    locks: TripLockRegistry = trip_locks,
    distance_fn: DistanceFn = calculate_haversine_distance,
    radius_m: Optional[float] = None
) -> Location_ingest_result:
    """
    Store one location sample and detect arrival at the current stop.

    Args:
        db: SQLAlchemy session
        data: Validated sample
        clock: Source of "now" (arrival time and default capture time)
        locks: Lock registry shared with the other trip mutations
        distance_fn: Distance in meters between two coordinates
        radius_m: Arrival radius; defaults to settings.ARRIVAL_RADIUS_M

    Returns:
        Location_ingest_result: Stored sample and the arrival it caused, if any

    Raises:
        TripNotFound: Unknown trip
        TripNotActive: Trip is paused, completed or cancelled
        VehicleMismatch: Sample sent by a vehicle other than the trip's
    """
    with trip_unit_of_work(db, data.trip_id, locks) as trip:
        require_moving(trip)
        if data.vehicle_id != trip.vehicle_id:
            print(f"[LOCATION] ❌ {trip.id}: sample from vehicle {data.vehicle_id}, trip runs on {trip.vehicle_id}")
            raise VehicleMismatch(trip.id, trip.vehicle_id, data.vehicle_id)

        now = clock()
        captured_at = _capture_time(data.timestamp, now)
        previous = get_latest_location_by_trip(db, trip.id)

        location = create_location(
            db,
            trip_id=trip.id,
            vehicle_id=trip.vehicle_id,
            latitude=data.latitude,
            longitude=data.longitude,
            timestamp=captured_at,
            speed=data.speed,
            heading=data.heading,
            accuracy=data.accuracy,
        )

        arrived_stop, distance = None, None
        if previous is None or captured_at >= previous.timestamp:
            arrived_stop, distance = detect_arrival(
                trip,
                data.latitude,
                data.longitude,
                now,
                radius_m=radius_m,
                distance_fn=distance_fn,
            )
        else:
            print(
                f"[LOCATION] {trip.id}: sample at {captured_at.isoformat()} is older than "
                f"{previous.timestamp.isoformat()}, stored without proximity check"
            )

        result = Location_ingest_result(
            location=Location_get.model_validate(location),
            arrived_route_point_id=arrived_stop.route_point_id if arrived_stop else None,
            distance_to_current_stop_m=distance,
        )

    return result


def get_latest_location(db: Session, trip_id: str) -> Optional[VehicleLocation]:
    return get_latest_location_by_trip(db, trip_id)


def get_vehicle_location_history(
    db: Session,
    vehicle_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: Optional[int] = None
) -> list[VehicleLocation]:
    """
    Samples of a vehicle, newest first, optionally bounded in time.
    """
    return _history(
        db,
        vehicle_id,
        start_date=ensure_utc(start_date),
        end_date=ensure_utc(end_date),
        limit=limit or settings.LOCATION_HISTORY_LIMIT,
    )


def _capture_time(timestamp: Optional[datetime], now: datetime) -> datetime:
    """
    Device capture time, or the receipt time when absent or too far ahead.
    """
    if timestamp is None:
        return now

    captured_at = ensure_utc(timestamp)
    if captured_at - now > timedelta(seconds=settings.FUTURE_SAMPLE_TOLERANCE_S):
        print(
            f"[LOCATION] ⚠️ Capture time {captured_at.isoformat()} is ahead of "
            f"{now.isoformat()}, using receipt time"
        )
        return now
    return captured_at
