# tests/test_analytics.py
from datetime import timedelta

import pytest

from conftest import T0, point_id
from transit_live.Services import trip_lifecycle
from transit_live.Services.analytics import get_trip_analytics, resolve_window
from transit_live.Services.stop_progression import arrive_at_stop, depart_from_stop


def test_empty_window_returns_zeroes(db, clock):
    analytics = get_trip_analytics(db, tenant_id="acme", clock=clock)

    assert analytics.total_trips == 0
    assert analytics.average_delay == 0.0
    assert analytics.on_time_rate == 0.0
    assert analytics.on_time_performance == 0
    assert analytics.window_end == clock()
    assert analytics.window_start == clock() - timedelta(days=30)


def test_delay_and_on_time_statistics(db, clock, locks, started_trip):
    trip_id = started_trip(route_id="rt-4")

    # delays: +2, +9, -1 (stop 0 has no recorded arrival)
    for index, minutes in ((1, 12), (2, 29), (3, 29)):
        clock.now = T0 + timedelta(minutes=minutes)
        arrive_at_stop(db, trip_id, point_id("rt-4", index), clock=clock, locks=locks)
        depart_from_stop(db, trip_id, point_id("rt-4", index), passengers_boarded=2, clock=clock, locks=locks)

    trip_lifecycle.complete_trip(db, trip_id, clock=clock, locks=locks)

    analytics = get_trip_analytics(db, tenant_id="acme", timeframe="day", clock=clock)

    assert analytics.total_trips == 1
    assert analytics.completed_trips == 1
    assert analytics.arrived_stops == 3
    assert analytics.average_delay == pytest.approx(10 / 3, abs=0.01)
    assert analytics.on_time_rate == pytest.approx(2 / 3)
    assert analytics.on_time_performance == 67
    assert analytics.total_passengers == 6


def test_counts_by_status_and_tenant(db, clock, locks, started_trip):
    active = started_trip(vehicle_id="veh-1", driver_id="drv-1")
    paused = started_trip(vehicle_id="veh-2", driver_id="drv-2")
    started_trip(vehicle_id="veh-3", driver_id="drv-3")  # tenant "other"

    trip_lifecycle.emergency_stop(db, paused, "Flat tyre", clock=clock, locks=locks)
    depart_from_stop(db, active, point_id("rt-3", 0), passengers_boarded=45, clock=clock, locks=locks)

    acme = get_trip_analytics(db, tenant_id="acme", clock=clock)
    assert (acme.total_trips, acme.active_trips, acme.paused_trips) == (2, 1, 1)
    assert acme.over_capacity_trips == 1

    fleet = get_trip_analytics(db, clock=clock)
    assert fleet.total_trips == 3


def test_cancelled_trips_are_counted(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.cancel_trip(db, trip_id, "Driver unavailable", clock=clock, locks=locks)

    analytics = get_trip_analytics(db, clock=clock)
    assert analytics.cancelled_trips == 1
    assert analytics.active_trips == 0


def test_trips_outside_window_are_ignored(db, clock, started_trip):
    started_trip()
    clock.advance(days=2)

    assert get_trip_analytics(db, timeframe="day", clock=clock).total_trips == 0
    assert get_trip_analytics(db, timeframe="week", clock=clock).total_trips == 1


def test_explicit_window(clock):
    start, end = resolve_window(start=T0 - timedelta(hours=1), end=T0, clock=clock)
    assert (start, end) == (T0 - timedelta(hours=1), T0)


def test_invalid_window(clock):
    with pytest.raises(ValueError):
        resolve_window(timeframe="year", clock=clock)
    with pytest.raises(ValueError):
        resolve_window(start=T0, end=T0 - timedelta(minutes=1), clock=clock)
