# transit_live/Repositories/vehicle_location.py
"""
Vehicle Location Repository - append-only GPS sample storage.

Samples are inserted and read, never updated or deleted.
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from transit_live.Models.vehicle_location import VehicleLocation


def create_location(
    DB: Session,
    trip_id: str,
    vehicle_id: str,
    latitude: float,
    longitude: float,
    timestamp: datetime,
    speed: Optional[float] = None,
    heading: Optional[float] = None,
    accuracy: Optional[float] = None
) -> VehicleLocation:
    """
    Append one sample inside the caller's transaction.
    """
    location = VehicleLocation(
        trip_id=trip_id,
        vehicle_id=vehicle_id,
        latitude=latitude,
        longitude=longitude,
        speed=speed,
        heading=heading,
        accuracy=accuracy,
        timestamp=timestamp,
    )
    DB.add(location)
    DB.flush()
    return location


def get_latest_location_by_trip(DB: Session, trip_id: str) -> Optional[VehicleLocation]:
    """
    Most recent sample of a trip by capture time (ties broken by insertion order).
    """
    return (
        DB.query(VehicleLocation)
        .filter(VehicleLocation.trip_id == trip_id)
        .order_by(VehicleLocation.timestamp.desc(), VehicleLocation.id.desc())
        .first()
    )


def get_vehicle_location_history(
    DB: Session,
    vehicle_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = 100
) -> list[VehicleLocation]:
    """
    Samples reported by a vehicle, newest first.

    Args:
        DB: SQLAlchemy session
        vehicle_id: Vehicle identifier
        start_date: Inclusive lower bound on capture time
        end_date: Inclusive upper bound on capture time
        limit: Maximum number of samples
    """
    query = DB.query(VehicleLocation).filter(VehicleLocation.vehicle_id == vehicle_id)

    if start_date:
        query = query.filter(VehicleLocation.timestamp >= start_date)

    if end_date:
        query = query.filter(VehicleLocation.timestamp <= end_date)

    return (
        query
        .order_by(VehicleLocation.timestamp.desc(), VehicleLocation.id.desc())
        .limit(limit)
        .all()
    )
