# transit_live/Controller/Routes/analytics.py

"""
Trip Analytics REST API

Endpoints:
- GET /analytics/trips   Trip counts, average delay and on-time rate

Window:
    Either a timeframe shortcut ending now (day | week | month) or explicit
    start_date / end_date bounds over the trips' scheduled start.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from transit_live.Controller.deps import get_DB, get_clock
from transit_live.Schemas.response import Api_response
from transit_live.Services import analytics as analytics_service

router = APIRouter()


@router.get("/trips", response_model=Api_response)
def trip_analytics(
    tenant_id: Optional[str] = Query(None),
    timeframe: str = Query("month", pattern="^(day|week|month)$"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    """
    Example Requests:
        GET /analytics/trips?tenant_id=acme&timeframe=week
        GET /analytics/trips?start_date=2025-11-01T00:00:00Z&end_date=2025-11-02T00:00:00Z

    Raises:
        422: start_date after end_date
    """
    try:
        result = analytics_service.get_trip_analytics(
            db,
            tenant_id=tenant_id,
            timeframe=timeframe,
            start=start_date,
            end=end_date,
            clock=clock,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return Api_response(data=result)
