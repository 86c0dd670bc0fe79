# transit_live/Services/analytics.py
"""
Analytics Aggregator
====================
Fleet-wide trip counts, delay and on-time statistics over a time window.

Read-only: trips are selected by scheduled start inside the window (and by
the tenant of their vehicle when given); stop statistics use every stop of
those trips that has a recorded arrival.

An empty window yields zeroed metrics, never an error.
"""

from datetime import datetime, timedelta
from math import floor
from typing import Optional

from sqlalchemy.orm import Session

from transit_live.Core.config import settings
from transit_live.DB.types import ensure_utc
from transit_live.Models.trip_enums import TripStatus, MOVING_TRIP_STATUSES
from transit_live.Repositories.trip import get_trips_in_window
from transit_live.Repositories.trip_stop import get_arrived_stops_for_trips
from transit_live.Schemas.analytics import Trip_analytics
from transit_live.Services.trip_locks import Clock, utc_now


TIMEFRAMES = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def resolve_window(
    timeframe: str = "month",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    clock: Clock = utc_now
) -> tuple[datetime, datetime]:
    """
    Turn a timeframe shortcut or explicit bounds into a UTC window.

    Explicit bounds win over the shortcut; a missing end means "now".

    Raises:
        ValueError: Unknown timeframe, or start after end
    """
    end = ensure_utc(end) or clock()

    if start is None:
        if timeframe not in TIMEFRAMES:
            raise ValueError(f"Unknown timeframe '{timeframe}' (expected one of {', '.join(TIMEFRAMES)})")
        start = end - TIMEFRAMES[timeframe]
    else:
        start = ensure_utc(start)

    if start > end:
        raise ValueError("Window start must not be after window end")

    return start, end


def get_trip_analytics(
    db: Session,
    tenant_id: Optional[str] = None,
    timeframe: str = "month",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    clock: Clock = utc_now
) -> Trip_analytics:
    """
    Aggregate trip and stop statistics for a window.

    Args:
        db: SQLAlchemy session
        tenant_id: Restrict to this tenant's vehicles (None for the whole fleet)
        timeframe: "day", "week" or "month" ending now (ignored when start is given)
        start / end: Explicit window bounds
        clock: Source of "now"

    Returns:
        Trip_analytics: Counters, average delay (minutes) and on-time rate
    """
    window_start, window_end = resolve_window(timeframe, start, end, clock)
    trips = get_trips_in_window(db, tenant_id, window_start, window_end)

    analytics = Trip_analytics(
        tenant_id=tenant_id,
        window_start=window_start,
        window_end=window_end,
    )
    if not trips:
        return analytics

    analytics.total_trips = len(trips)
    analytics.completed_trips = sum(1 for t in trips if t.status == TripStatus.COMPLETED)
    analytics.cancelled_trips = sum(1 for t in trips if t.status == TripStatus.CANCELLED)
    analytics.active_trips = sum(1 for t in trips if t.status in MOVING_TRIP_STATUSES)
    analytics.paused_trips = sum(1 for t in trips if t.status == TripStatus.PAUSED)
    analytics.total_passengers = sum(t.passenger_count or 0 for t in trips)
    analytics.over_capacity_trips = sum(1 for t in trips if t.over_capacity)

    arrived = get_arrived_stops_for_trips(db, [t.id for t in trips])
    if arrived:
        on_time = sum(1 for s in arrived if s.delay <= settings.ON_TIME_THRESHOLD_MIN)

        analytics.arrived_stops = len(arrived)
        analytics.average_delay = round(sum(s.delay for s in arrived) / len(arrived), 2)
        analytics.on_time_rate = on_time / len(arrived)
        analytics.on_time_performance = int(floor(analytics.on_time_rate * 100 + 0.5))

    print(
        f"[ANALYTICS] {tenant_id or 'all tenants'}: {analytics.total_trips} trips, "
        f"{analytics.arrived_stops} arrivals, avg delay {analytics.average_delay} min"
    )
    return analytics
