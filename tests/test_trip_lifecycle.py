# tests/test_trip_lifecycle.py
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
import threading

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import point_id, reload
from transit_live.Core.exceptions import (
    DriverBusy,
    VehicleBusy,
    EmptyRoute,
    RouteNotFound,
    VehicleNotFound,
    DriverNotFound,
    TripNotFound,
    TripNotActive,
    NotPaused,
)
from transit_live.Models.driver_shift import DriverShift
from transit_live.Models.trip import Trip
from transit_live.Models.trip_enums import TripStatus, StopStatus, ShiftStatus
from transit_live.Models.trip_stop import TripStop
from transit_live.Repositories.shift import get_shift_by_trip
from transit_live.Schemas.trip import Trip_start
from transit_live.Services import trip_lifecycle
from transit_live.Services.shift_coordinator import get_driver_current_shift, is_consistent
from transit_live.Services.stop_progression import arrive_at_stop, depart_from_stop


def _payload(clock, route_id="rt-3", vehicle_id="veh-1", driver_id="drv-1", **extra):
    return Trip_start(
        route_id=route_id,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        scheduled_start=clock(),
        scheduled_end=clock() + timedelta(hours=1),
        **extra,
    )


# ==========================================================
# StartTrip
# ==========================================================

def test_start_creates_trip_schedule_and_shift(db, clock, started_trip):
    trip_id = started_trip()
    trip = reload(db, trip_id)

    assert trip.status == TripStatus.STARTED
    assert trip.current_stop_index == 0
    assert trip.passenger_count == 0
    assert trip.actual_start == clock()
    assert [s.status for s in trip.stops] == [StopStatus.ARRIVED, StopStatus.PENDING, StopStatus.PENDING]

    shift = get_shift_by_trip(db, trip_id)
    assert shift.status == ShiftStatus.ACTIVE
    assert shift.check_in_at == clock()
    assert shift.location == "Terminal Norte"


def test_capacity_comes_from_vehicle(db, started_trip):
    trip = reload(db, started_trip(vehicle_id="veh-1"))
    assert trip.max_capacity == 40


def test_capacity_override_wins(db, started_trip):
    trip = reload(db, started_trip(vehicle_id="veh-1", max_capacity=12))
    assert trip.max_capacity == 12


def test_capacity_defaults_to_fifty_when_vehicle_has_none(db, started_trip):
    trip = reload(db, started_trip(vehicle_id="veh-2"))
    assert trip.max_capacity == 50


def test_driver_busy(db, clock, locks, started_trip):
    started_trip(vehicle_id="veh-1", driver_id="drv-1")

    with pytest.raises(DriverBusy):
        trip_lifecycle.start_trip(db, _payload(clock, vehicle_id="veh-2", driver_id="drv-1"), clock=clock, locks=locks)


def test_vehicle_busy(db, clock, locks, started_trip):
    started_trip(vehicle_id="veh-1", driver_id="drv-1")

    with pytest.raises(VehicleBusy):
        trip_lifecycle.start_trip(db, _payload(clock, vehicle_id="veh-1", driver_id="drv-2"), clock=clock, locks=locks)


def test_paused_trip_still_blocks_driver(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.emergency_stop(db, trip_id, "Flat tyre", clock=clock, locks=locks)

    with pytest.raises(DriverBusy):
        trip_lifecycle.start_trip(db, _payload(clock, vehicle_id="veh-2"), clock=clock, locks=locks)


def test_completed_trip_frees_driver_and_vehicle(db, clock, locks, started_trip):
    first = started_trip()
    trip_lifecycle.complete_trip(db, first, clock=clock, locks=locks)

    second = started_trip()
    assert second != first
    assert reload(db, second).status == TripStatus.STARTED


def test_empty_route_persists_nothing(db, clock, locks):
    with pytest.raises(EmptyRoute):
        trip_lifecycle.start_trip(db, _payload(clock, route_id="rt-empty"), clock=clock, locks=locks)

    assert db.query(Trip).count() == 0
    assert db.query(TripStop).count() == 0
    assert db.query(DriverShift).count() == 0


@pytest.mark.parametrize("overrides, error", [
    ({"route_id": "rt-missing"}, RouteNotFound),
    ({"vehicle_id": "veh-missing"}, VehicleNotFound),
    ({"driver_id": "drv-missing"}, DriverNotFound),
])
def test_unknown_collaborator(db, clock, locks, overrides, error):
    with pytest.raises(error):
        trip_lifecycle.start_trip(db, _payload(clock, **overrides), clock=clock, locks=locks)

    assert db.query(Trip).count() == 0


def test_concurrent_starts_for_same_driver(session_factory, seed, clock, locks):
    barrier = threading.Barrier(2)

    def _start(vehicle_id):
        session = session_factory()
        try:
            barrier.wait()
            trip_lifecycle.start_trip(session, _payload(clock, vehicle_id=vehicle_id), clock=clock, locks=locks)
            return "started"
        except DriverBusy:
            return "busy"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = sorted(pool.map(_start, ["veh-1", "veh-2"]))

    assert results == ["busy", "started"]

    with session_factory() as session:
        assert session.query(Trip).filter(Trip.driver_id == "drv-1").count() == 1
        assert session.query(DriverShift).filter(DriverShift.driver_id == "drv-1").count() == 1


def test_concurrent_starts_for_same_vehicle(session_factory, seed, clock, locks):
    barrier = threading.Barrier(2)

    def _start(driver_id):
        session = session_factory()
        try:
            barrier.wait()
            trip_lifecycle.start_trip(session, _payload(clock, driver_id=driver_id), clock=clock, locks=locks)
            return "started"
        except VehicleBusy:
            return "busy"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = sorted(pool.map(_start, ["drv-1", "drv-2"]))

    assert results == ["busy", "started"]

    with session_factory() as session:
        assert session.query(Trip).filter(Trip.vehicle_id == "veh-1").count() == 1
        assert session.query(DriverShift).count() == 1


def test_unrelated_integrity_error_propagates(db, clock, locks, monkeypatch):
    def _broken_insert(*args, **kwargs):
        raise IntegrityError("INSERT INTO trip", {}, Exception("NOT NULL constraint failed"))

    monkeypatch.setattr(trip_lifecycle, "create_trip", _broken_insert)

    with pytest.raises(IntegrityError):
        trip_lifecycle.start_trip(db, _payload(clock), clock=clock, locks=locks)

    assert db.query(Trip).count() == 0


# ==========================================================
# EmergencyStop / ResumeTrip
# ==========================================================

def test_emergency_stop_pauses_trip_and_shift(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.emergency_stop(db, trip_id, "Engine overheating", clock=clock, locks=locks)

    trip = reload(db, trip_id)
    shift = get_shift_by_trip(db, trip_id)
    assert trip.status == TripStatus.PAUSED
    assert trip.notes == "Engine overheating"
    assert shift.status == ShiftStatus.EMERGENCY
    assert shift.notes == "Engine overheating"


def test_repeated_emergency_stop_updates_reason(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.emergency_stop(db, trip_id, "Flat tyre", clock=clock, locks=locks)
    trip_lifecycle.emergency_stop(db, trip_id, "Waiting for tow truck", clock=clock, locks=locks)

    trip = reload(db, trip_id)
    assert trip.status == TripStatus.PAUSED
    assert trip.notes == "Waiting for tow truck"


def test_resume_returns_to_in_progress_and_clears_reason(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.emergency_stop(db, trip_id, "Flat tyre", clock=clock, locks=locks)
    trip_lifecycle.resume_trip(db, trip_id, clock=clock, locks=locks)

    trip = reload(db, trip_id)
    shift = get_shift_by_trip(db, trip_id)
    assert trip.status == TripStatus.IN_PROGRESS
    assert shift.status == ShiftStatus.ACTIVE
    assert shift.notes is None


def test_resume_requires_paused(db, clock, locks, started_trip):
    trip_id = started_trip()

    with pytest.raises(NotPaused):
        trip_lifecycle.resume_trip(db, trip_id, clock=clock, locks=locks)

    assert reload(db, trip_id).status == TripStatus.STARTED


def test_unknown_trip(db, clock, locks):
    with pytest.raises(TripNotFound):
        trip_lifecycle.emergency_stop(db, "no-such-trip", "x", clock=clock, locks=locks)


# ==========================================================
# CompleteTrip / CancelTrip
# ==========================================================

def test_complete_skips_pending_stops_and_closes_shift(db, clock, locks, started_trip):
    trip_id = started_trip(route_id="rt-4")

    clock.advance(minutes=1)
    depart_from_stop(db, trip_id, point_id("rt-4", 0), passengers_boarded=3, clock=clock, locks=locks)
    clock.advance(minutes=10)
    arrive_at_stop(db, trip_id, point_id("rt-4", 1), clock=clock, locks=locks)
    depart_from_stop(db, trip_id, point_id("rt-4", 1), clock=clock, locks=locks)

    clock.advance(minutes=5)
    trip_lifecycle.complete_trip(db, trip_id, notes="Short turn", clock=clock, locks=locks)

    trip = reload(db, trip_id)
    assert trip.status == TripStatus.COMPLETED
    assert trip.actual_end == clock()
    assert trip.notes == "Short turn"
    assert [s.status for s in trip.stops] == [
        StopStatus.DEPARTED, StopStatus.DEPARTED, StopStatus.SKIPPED, StopStatus.SKIPPED,
    ]

    shift = get_shift_by_trip(db, trip_id)
    assert shift.status == ShiftStatus.COMPLETED
    assert shift.check_out_at == clock()
    assert is_consistent(shift, trip)


def test_complete_from_paused_closes_emergency_shift(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.emergency_stop(db, trip_id, "Accident", clock=clock, locks=locks)
    trip_lifecycle.complete_trip(db, trip_id, clock=clock, locks=locks)

    trip = reload(db, trip_id)
    shift = get_shift_by_trip(db, trip_id)
    assert trip.status == TripStatus.COMPLETED
    assert trip.notes == "Accident"
    assert shift.status == ShiftStatus.COMPLETED
    assert get_driver_current_shift(db, "drv-1") is None


def test_completed_trip_is_terminal(db, clock, locks, started_trip):
    trip_id = started_trip()
    trip_lifecycle.complete_trip(db, trip_id, clock=clock, locks=locks)

    with pytest.raises(TripNotActive):
        trip_lifecycle.complete_trip(db, trip_id, clock=clock, locks=locks)
    with pytest.raises(TripNotActive):
        trip_lifecycle.emergency_stop(db, trip_id, "late", clock=clock, locks=locks)
    with pytest.raises(TripNotActive):
        trip_lifecycle.cancel_trip(db, trip_id, "late", clock=clock, locks=locks)
    with pytest.raises(TripNotActive):
        arrive_at_stop(db, trip_id, point_id("rt-3", 1), clock=clock, locks=locks)


def test_cancel_records_reason_and_frees_vehicle(db, clock, locks, started_trip):
    trip_id = started_trip()
    clock.advance(minutes=3)
    trip_lifecycle.cancel_trip(db, trip_id, "Vehicle recalled by dispatch", clock=clock, locks=locks)

    trip = reload(db, trip_id)
    assert trip.status == TripStatus.CANCELLED
    assert trip.notes == "Vehicle recalled by dispatch"
    assert trip.actual_end == clock()
    assert StopStatus.PENDING not in [s.status for s in trip.stops]

    shift = get_shift_by_trip(db, trip_id)
    assert shift.status == ShiftStatus.COMPLETED
    assert is_consistent(shift, trip)

    other = trip_lifecycle.start_trip(db, _payload(clock, driver_id="drv-2"), clock=clock, locks=locks)
    assert other.vehicle_id == "veh-1"


def test_shift_tracks_trip_through_lifecycle(db, clock, locks, started_trip):
    trip_id = started_trip()

    def _consistent():
        trip = reload(db, trip_id)
        return is_consistent(get_shift_by_trip(db, trip_id), trip)

    assert _consistent()
    trip_lifecycle.emergency_stop(db, trip_id, "Medical emergency", clock=clock, locks=locks)
    assert _consistent()
    trip_lifecycle.resume_trip(db, trip_id, clock=clock, locks=locks)
    assert _consistent()
    trip_lifecycle.complete_trip(db, trip_id, clock=clock, locks=locks)
    assert _consistent()


# ==========================================================
# Read models
# ==========================================================

def test_trip_status_read_model(db, clock, locks, started_trip):
    trip_id = started_trip()
    clock.advance(minutes=12)
    arrive_at_stop(db, trip_id, point_id("rt-3", 1), clock=clock, locks=locks)

    status = trip_lifecycle.get_trip_status(db, trip_id)

    assert status.id == trip_id
    assert status.route_name == "Troncal Norte"
    assert status.driver_name == "Ana Torres"
    assert status.status == TripStatus.IN_PROGRESS
    assert status.current_stop.route_point_id == point_id("rt-3", 0)
    assert [s.name for s in status.stops] == ["Terminal Norte", "Calle 72", "Plaza de la Paz"]
    assert status.stops[1].delay == 2
    assert status.latest_location is None
    assert status.over_capacity is False


def test_trip_status_unknown_trip(db):
    with pytest.raises(TripNotFound):
        trip_lifecycle.get_trip_status(db, "missing")


def test_active_trips_by_tenant(db, clock, locks, started_trip):
    acme = started_trip(vehicle_id="veh-1", driver_id="drv-1")
    other = started_trip(vehicle_id="veh-3", driver_id="drv-3")
    done = started_trip(vehicle_id="veh-2", driver_id="drv-2")
    trip_lifecycle.complete_trip(db, done, clock=clock, locks=locks)

    assert [t.id for t in trip_lifecycle.get_active_trips(db, "acme")] == [acme]
    assert {t.id for t in trip_lifecycle.get_active_trips(db)} == {acme, other}
