# transit_live/Repositories/trip_stop.py
"""
Trip Stop Repository - stop schedule persistence.

All writes flush inside the caller's transaction; see Repositories/trip.py.
"""

from sqlalchemy.orm import Session
from typing import Sequence

from transit_live.Models.trip_stop import TripStop
from transit_live.Schemas.trip_stop import TripStop_create


def create_trip_stops(DB: Session, trip_id: str, entries: Sequence[TripStop_create]) -> list[TripStop]:
    """
    Persist a full stop schedule for a trip.

    Args:
        DB: SQLAlchemy session
        trip_id: Owning trip
        entries: Output of the stop schedule builder

    Returns:
        list[TripStop]: Created rows in route order
    """
    stops = [
        TripStop(
            trip_id=trip_id,
            route_point_id=entry.route_point_id,
            order=entry.order,
            scheduled_at=entry.scheduled_at,
            status=entry.status,
            delay=0,
            passengers_boarded=0,
            passengers_alighted=0,
        )
        for entry in entries
    ]
    DB.add_all(stops)
    DB.flush()

    print(f"[REPO] {len(stops)} trip stops created for trip {trip_id}")

    return stops


def get_arrived_stops_for_trips(DB: Session, trip_ids: Sequence[str]) -> list[TripStop]:
    """
    Stops with a recorded arrival for the given trips (analytics input).
    """
    if not trip_ids:
        return []

    return (
        DB.query(TripStop)
        .filter(
            TripStop.trip_id.in_(list(trip_ids)),
            TripStop.arrived_at.isnot(None)
        )
        .all()
    )
