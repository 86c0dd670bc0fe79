# transit_live/Controller/Routes/vehicles.py

"""
Vehicle Location History REST API

Endpoints:
- GET /vehicles/{vehicle_id}/locations   Samples of a vehicle, newest first

Usage:
    app.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from transit_live.Controller.deps import get_DB
from transit_live.Schemas.vehicle_location import Location_get
from transit_live.Schemas.response import Api_response
from transit_live.Services import location_ingestion

router = APIRouter()


@router.get("/{vehicle_id}/locations", response_model=Api_response)
def location_history(
    vehicle_id: str,
    start_date: Optional[datetime] = Query(None, description="Inclusive lower bound (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Inclusive upper bound (ISO 8601)"),
    limit: Optional[int] = Query(None, ge=1, le=10000, description="Maximum samples (default from settings)"),
    db: Session = Depends(get_DB)
):
    """
    Location history of a vehicle across all its trips.

    Example Requests:
        GET /vehicles/veh-7/locations
        GET /vehicles/veh-7/locations?start_date=2025-11-03T08:00:00Z&limit=20
    """
    samples = location_ingestion.get_vehicle_location_history(
        db,
        vehicle_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return Api_response(data=[Location_get.model_validate(s) for s in samples])
