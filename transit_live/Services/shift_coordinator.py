# transit_live/Services/shift_coordinator.py
"""
Shift Coordinator
=================
Keeps a driver's shift in step with the trip it is bound to.

The shift status is always derived from the trip status
(``trip_state.shift_status_for``):

    STARTED / IN_PROGRESS  ->  ACTIVE
    PAUSED                 ->  EMERGENCY
    COMPLETED / CANCELLED  ->  COMPLETED

Every function here runs inside the caller's trip unit of work and is
called right after the trip transition, so the pair is committed together
and a shift is never observed ACTIVE next to a finished trip.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from transit_live.Models.driver_shift import DriverShift
from transit_live.Models.trip_enums import ShiftStatus
from transit_live.Repositories.shift import create_shift, get_shift_by_trip, get_open_shift_by_driver
from transit_live.Services.trip_state import shift_status_for


def open_shift(db: Session, trip, now: datetime, location: Optional[str] = None) -> DriverShift:
    """
    Check the driver in for a newly started trip.
    """
    shift = create_shift(
        db,
        driver_id=trip.driver_id,
        vehicle_id=trip.vehicle_id,
        trip_id=trip.id,
        check_in_at=now,
        location=location or "Starting point",
    )
    print(f"[SHIFT] Driver {trip.driver_id} checked in on vehicle {trip.vehicle_id} (trip {trip.id})")
    return shift


def mark_emergency(db: Session, trip, reason: str) -> Optional[DriverShift]:
    """Shift follows a paused trip into EMERGENCY and records the reason."""
    shift = _sync(db, trip)
    if shift is not None:
        shift.notes = reason
    return shift


def clear_emergency(db: Session, trip) -> Optional[DriverShift]:
    """Shift returns to ACTIVE with the reason cleared."""
    shift = _sync(db, trip)
    if shift is not None:
        shift.notes = None
    return shift


def close_shift(db: Session, trip, now: datetime) -> Optional[DriverShift]:
    """Check the driver out when the trip completes or is cancelled."""
    shift = _sync(db, trip)
    if shift is not None and shift.check_out_at is None:
        shift.check_out_at = now
        print(f"[SHIFT] Driver {trip.driver_id} checked out (trip {trip.id})")
    return shift


def _sync(db: Session, trip) -> Optional[DriverShift]:
    shift = get_shift_by_trip(db, trip.id)
    if shift is None:
        print(f"[SHIFT] ⚠️ No shift found for trip {trip.id}")
        return None

    target = shift_status_for(trip.status)
    if shift.status != target:
        print(f"[SHIFT] Trip {trip.id}: shift {shift.status.value} → {target.value}")
    shift.status = target
    return shift


def get_driver_current_shift(db: Session, driver_id: str) -> Optional[DriverShift]:
    """
    The driver's open (ACTIVE or EMERGENCY) shift, if any.
    """
    return get_open_shift_by_driver(db, driver_id)


def is_consistent(shift: DriverShift, trip) -> bool:
    """True when the shift status matches what the trip status implies."""
    if shift.status != shift_status_for(trip.status):
        return False
    closed = shift.status == ShiftStatus.COMPLETED
    return closed == (shift.check_out_at is not None)
