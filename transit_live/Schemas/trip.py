# transit_live/Schemas/trip.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Optional, List

from transit_live.Models.trip_enums import TripStatus
from transit_live.Schemas.trip_stop import TripStop_get
from transit_live.Schemas.vehicle_location import Location_get


# ============================================
# START SCHEMA
# ============================================
class Trip_start(BaseModel):
    """
    Schema for starting a trip.

    Used by:
    - POST /trips/start
    - Service start_trip()
    """
    route_id: str = Field(..., min_length=1, max_length=36)
    vehicle_id: str = Field(..., min_length=1, max_length=36)
    driver_id: str = Field(..., min_length=1, max_length=36)

    scheduled_start: datetime = Field(..., description="Planned departure from the first stop")
    scheduled_end: datetime = Field(..., description="Planned arrival at the last stop")

    max_capacity: Optional[int] = Field(
        None,
        ge=1,
        description="Capacity override; defaults to the vehicle's registered capacity"
    )

    @model_validator(mode="after")
    def _check_schedule_order(self) -> "Trip_start":
        if self.scheduled_end < self.scheduled_start:
            raise ValueError("scheduled_end must not be before scheduled_start")
        return self


# ============================================
# ACTION PAYLOADS
# ============================================
class Trip_emergency(BaseModel):
    trip_id: str = Field(..., min_length=1, max_length=36)
    reason: str = Field("Emergency stop", min_length=1, max_length=500)


class Trip_complete(BaseModel):
    trip_id: str = Field(..., min_length=1, max_length=36)
    notes: Optional[str] = Field(None, max_length=2000)


class Trip_cancel(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


# ============================================
# GET SCHEMA
# ============================================
class Trip_get(BaseModel):
    """
    Schema for returning a trip after a write.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    route_id: str
    vehicle_id: str
    driver_id: str

    scheduled_start: datetime
    scheduled_end: datetime
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None

    status: TripStatus
    notes: Optional[str] = None

    max_capacity: int
    passenger_count: int = Field(..., ge=0)
    current_stop_index: int = Field(..., ge=0)
    over_capacity: bool = Field(
        False,
        description="Passenger count above capacity (driver-entered counts are never rejected)"
    )


# ============================================
# READ MODEL: Trip status
# ============================================
class Trip_status(Trip_get):
    """
    Live view of one trip for dashboards and the driver app: counters,
    ordered stop list with per-stop delay, and the latest GPS sample.
    """
    route_name: Optional[str] = None
    driver_name: Optional[str] = None
    current_stop: Optional[TripStop_get] = None
    stops: List[TripStop_get] = Field(default_factory=list)
    latest_location: Optional[Location_get] = None


# ============================================
# READ MODEL: Active trip summary
# ============================================
class Trip_summary(BaseModel):
    """
    Lightweight schema for the active trips board.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    route_id: str
    route_name: Optional[str] = None
    vehicle_id: str
    driver_id: str
    driver_name: Optional[str] = None
    status: TripStatus
    scheduled_start: datetime
    passenger_count: int
    max_capacity: int
    current_stop_index: int
    latest_location: Optional[Location_get] = None
