# transit_live/Schemas/trip_stop.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

from transit_live.Models.trip_enums import StopStatus


# ============================================
# SCHEDULE ENTRY (builder output)
# ============================================
class TripStop_create(BaseModel):
    """
    One entry of a freshly built stop schedule.

    Produced by the stop schedule builder and persisted as a TripStop row
    together with its trip.
    """
    model_config = ConfigDict(from_attributes=True)

    route_point_id: str = Field(..., min_length=1, max_length=36)
    order: int = Field(..., description="Route order of the stop")
    scheduled_at: datetime = Field(..., description="Estimated arrival (UTC)")
    status: StopStatus = Field(default=StopStatus.PENDING)


# ============================================
# GET SCHEMA
# ============================================
class TripStop_get(BaseModel):
    """
    Stop as exposed in the trip status read model, with the route point's
    name and coordinates flattened in.
    """
    model_config = ConfigDict(from_attributes=True)

    route_point_id: str
    order: int
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    status: StopStatus
    scheduled_at: datetime
    arrived_at: Optional[datetime] = None
    departed_at: Optional[datetime] = None
    delay: int = Field(0, description="Signed minutes late (negative = early)")

    passengers_boarded: int = 0
    passengers_alighted: int = 0

    @classmethod
    def from_stop(cls, stop) -> "TripStop_get":
        point = stop.route_point
        return cls(
            route_point_id=stop.route_point_id,
            order=stop.order,
            name=point.name if point else None,
            latitude=point.latitude if point else None,
            longitude=point.longitude if point else None,
            status=stop.status,
            scheduled_at=stop.scheduled_at,
            arrived_at=stop.arrived_at,
            departed_at=stop.departed_at,
            delay=stop.delay,
            passengers_boarded=stop.passengers_boarded,
            passengers_alighted=stop.passengers_alighted,
        )


# ============================================
# ACTION PAYLOADS
# ============================================
class Stop_arrive(BaseModel):
    trip_id: str = Field(..., min_length=1, max_length=36)
    route_point_id: str = Field(..., min_length=1, max_length=36)


class Stop_depart(BaseModel):
    trip_id: str = Field(..., min_length=1, max_length=36)
    route_point_id: str = Field(..., min_length=1, max_length=36)
    passengers_boarded: int = Field(0, ge=0, description="Driver-entered boarding count")
    passengers_alighted: int = Field(0, ge=0, description="Driver-entered alighting count")
