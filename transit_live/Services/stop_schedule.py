# transit_live/Services/stop_schedule.py
"""
Stop Schedule Builder
=====================
Turns a route's ordered stop list and a planned start instant into the
trip's stop schedule.

Policy:
- Stop 0 is scheduled at the planned start and marked ARRIVED right away
  (the vehicle begins at its origin); every other stop starts PENDING.
- Without a travel-time model, stop N is scheduled STOP_INTERVAL_MIN * N
  minutes after the start.
- A routing collaborator may supply per-leg travel minutes instead
  (one value per consecutive pair of stops); arrivals are their running sum.

The builder is pure: same input, same schedule. It performs no I/O.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from transit_live.Core.config import settings
from transit_live.Core.exceptions import EmptyRoute
from transit_live.DB.types import ensure_utc
from transit_live.Models.trip_enums import StopStatus
from transit_live.Schemas.trip_stop import TripStop_create


def build_stop_schedule(
    route_points: Sequence,
    planned_start: datetime,
    interval_minutes: Optional[float] = None,
    travel_minutes: Optional[Sequence[float]] = None,
    route_id: str = ""
) -> list[TripStop_create]:
    """
    Build one schedule entry per route point.

    Args:
        route_points: Objects exposing ``id`` and ``order`` (RoutePoint rows)
        planned_start: Scheduled start of the trip
        interval_minutes: Fixed spacing; defaults to settings.STOP_INTERVAL_MIN
        travel_minutes: Optional per-leg travel times, len(route_points) - 1 values
        route_id: Used in the error message only

    Returns:
        list[TripStop_create]: Entries in route order

    Raises:
        EmptyRoute: The route has no stops
        ValueError: travel_minutes has the wrong length or a negative leg
    """
    if not route_points:
        raise EmptyRoute(route_id)

    ordered = sorted(route_points, key=lambda point: point.order)
    start = ensure_utc(planned_start)

    if interval_minutes is None:
        interval_minutes = settings.STOP_INTERVAL_MIN

    offsets = _arrival_offsets(len(ordered), interval_minutes, travel_minutes)

    return [
        TripStop_create(
            route_point_id=point.id,
            order=point.order,
            scheduled_at=start + timedelta(minutes=offset),
            status=StopStatus.ARRIVED if index == 0 else StopStatus.PENDING,
        )
        for index, (point, offset) in enumerate(zip(ordered, offsets))
    ]


def _arrival_offsets(
    stop_count: int,
    interval_minutes: float,
    travel_minutes: Optional[Sequence[float]]
) -> list[float]:
    """Minutes after the planned start at which each stop is due."""
    if travel_minutes is None:
        return [index * interval_minutes for index in range(stop_count)]

    if len(travel_minutes) != stop_count - 1:
        raise ValueError(
            f"Expected {stop_count - 1} travel times for {stop_count} stops, got {len(travel_minutes)}"
        )

    offsets = [0.0]
    for leg in travel_minutes:
        if leg < 0:
            raise ValueError(f"Travel time cannot be negative: {leg}")
        offsets.append(offsets[-1] + leg)
    return offsets
