# transit_live/Repositories/shift.py
"""
Driver Shift Repository.
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from transit_live.Models.driver_shift import DriverShift
from transit_live.Models.trip_enums import ShiftStatus, OPEN_SHIFT_STATUSES


def create_shift(
    DB: Session,
    driver_id: str,
    vehicle_id: str,
    trip_id: str,
    check_in_at: datetime,
    location: Optional[str] = None
) -> DriverShift:
    shift = DriverShift(
        driver_id=driver_id,
        vehicle_id=vehicle_id,
        trip_id=trip_id,
        check_in_at=check_in_at,
        status=ShiftStatus.ACTIVE,
        location=location,
    )
    DB.add(shift)
    DB.flush()
    return shift


def get_shift_by_trip(DB: Session, trip_id: str) -> Optional[DriverShift]:
    return DB.query(DriverShift).filter(DriverShift.trip_id == trip_id).first()


def get_open_shift_by_driver(DB: Session, driver_id: str) -> Optional[DriverShift]:
    """
    The driver's ACTIVE or EMERGENCY shift, if any.
    """
    return (
        DB.query(DriverShift)
        .filter(
            DriverShift.driver_id == driver_id,
            DriverShift.status.in_(sorted(OPEN_SHIFT_STATUSES))
        )
        .order_by(DriverShift.check_in_at.desc())
        .first()
    )
