# transit_live/Schemas/vehicle_location.py

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


"""
Location sample as sent by the driver app on a fixed interval.
Only trip, vehicle and coordinates are required; the capture timestamp
defaults to the server clock when the device does not send one and
must carry a UTC offset when it is sent.
"""
class Location_create(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    trip_id: str = Field(..., min_length=1, max_length=36)
    vehicle_id: str = Field(..., min_length=1, max_length=36)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    speed: Optional[float] = Field(None, ge=0, description="Speed in km/h")
    heading: Optional[float] = Field(None, ge=0, lt=360, description="Heading in degrees")
    accuracy: Optional[float] = Field(None, ge=0, description="Horizontal accuracy in meters")
    timestamp: Optional[AwareDatetime] = Field(None, description="Capture time (timezone-aware)")


"""
Schema for returning stored samples.
"""
class Location_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: str
    vehicle_id: str
    latitude: float
    longitude: float
    speed: Optional[float] = None
    heading: Optional[float] = None
    accuracy: Optional[float] = None
    timestamp: datetime


"""
Result of one ingestion: the stored sample plus what the proximity
check decided.
"""
class Location_ingest_result(BaseModel):
    location: Location_get
    arrived_route_point_id: Optional[str] = Field(
        None,
        description="Stop that this sample marked as ARRIVED, if any"
    )
    distance_to_current_stop_m: Optional[float] = None
