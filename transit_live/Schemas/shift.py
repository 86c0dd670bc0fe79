# transit_live/Schemas/shift.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from transit_live.Models.trip_enums import ShiftStatus


class Shift_get(BaseModel):
    """Driver shift as returned to the driver app."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    driver_id: str
    vehicle_id: str
    trip_id: str
    check_in_at: datetime
    check_out_at: Optional[datetime] = None
    status: ShiftStatus
    location: Optional[str] = None
    notes: Optional[str] = None
