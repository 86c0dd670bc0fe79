# transit_live/Schemas/analytics.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class Trip_analytics(BaseModel):
    """
    Fleet-wide delay and on-time statistics over a time window.

    All counters are zero for an empty window.
    """
    tenant_id: Optional[str] = None
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None

    total_trips: int = 0
    completed_trips: int = 0
    cancelled_trips: int = 0
    active_trips: int = Field(0, description="Trips in STARTED or IN_PROGRESS")
    paused_trips: int = 0

    arrived_stops: int = Field(0, description="Stops with a recorded arrival")
    average_delay: float = Field(0.0, description="Mean delay in minutes over arrived stops")
    on_time_rate: float = Field(0.0, ge=0, le=1, description="Fraction of arrived stops on time")
    on_time_performance: int = Field(0, ge=0, le=100, description="on_time_rate as a whole percent")

    total_passengers: int = 0
    over_capacity_trips: int = Field(0, description="Trips whose passenger count exceeds capacity")
