# transit_live/Controller/Routes/trips.py

"""
Trip Tracking REST API

Write surface used by the driver app (start, location stream, arrive,
depart, emergency, resume, complete) and by dispatch (cancel), plus the
trip read models.

Endpoints:
- POST /trips/start               Start a trip on a route
- POST /trips/location            Ingest one GPS sample
- POST /trips/arrive              Manual arrival at a stop
- POST /trips/depart              Departure with passenger counts
- POST /trips/emergency           Pause the trip (shift → EMERGENCY)
- POST /trips/complete            Finish the trip
- POST /trips/{trip_id}/resume    Resume a paused trip
- POST /trips/{trip_id}/cancel    Dispatcher hard cancel
- GET  /trips/active              Non-terminal trips (optionally per tenant)
- GET  /trips/{trip_id}           Live trip status

Errors:
    Domain errors (TrackingError) are turned into
    {"success": false, "error": <code>, "detail": <message>} by the handler
    registered in main.py, with the status code carried by the error.

Usage:
    # In main.py
    from transit_live.Controller.Routes import trips
    app.include_router(trips.router, prefix="/trips", tags=["trips"])
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from transit_live.Controller.deps import get_DB, get_clock
from transit_live.Schemas import trip as trip_schema
from transit_live.Schemas import trip_stop as stop_schema
from transit_live.Schemas import vehicle_location as location_schema
from transit_live.Schemas.response import Api_response
from transit_live.Services import trip_lifecycle, stop_progression, location_ingestion

router = APIRouter()


def _trip(trip) -> trip_schema.Trip_get:
    return trip_schema.Trip_get.model_validate(trip)


# ==========================================================
# 📌 Lifecycle
# ==========================================================

@router.post("/start", response_model=Api_response, status_code=201)
def start_trip(
    payload: trip_schema.Trip_start,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    """
    Start a trip: creates the trip, its full stop schedule and the driver's
    shift in one transaction.

    Example Request:
        POST /trips/start
        {
            "route_id": "rt-12",
            "vehicle_id": "veh-7",
            "driver_id": "drv-3",
            "scheduled_start": "2025-11-03T08:00:00Z",
            "scheduled_end": "2025-11-03T09:00:00Z"
        }

    Raises:
        409: driver_busy / vehicle_busy
        404: route_not_found / vehicle_not_found / driver_not_found
        422: empty_route
    """
    trip = trip_lifecycle.start_trip(db, payload, clock=clock)
    return Api_response(data=_trip(trip), message="Trip started")


@router.post("/emergency", response_model=Api_response)
def emergency_stop(
    payload: trip_schema.Trip_emergency,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    trip = trip_lifecycle.emergency_stop(db, payload.trip_id, payload.reason, clock=clock)
    return Api_response(data=_trip(trip), message="Trip paused")


@router.post("/complete", response_model=Api_response)
def complete_trip(
    payload: trip_schema.Trip_complete,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    trip = trip_lifecycle.complete_trip(db, payload.trip_id, payload.notes, clock=clock)
    return Api_response(data=_trip(trip), message="Trip completed")


@router.post("/{trip_id}/resume", response_model=Api_response)
def resume_trip(trip_id: str, db: Session = Depends(get_DB), clock=Depends(get_clock)):
    trip = trip_lifecycle.resume_trip(db, trip_id, clock=clock)
    return Api_response(data=_trip(trip), message="Trip resumed")


@router.post("/{trip_id}/cancel", response_model=Api_response)
def cancel_trip(
    trip_id: str,
    payload: trip_schema.Trip_cancel,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    """
    Dispatcher hard cancel; frees the driver and the vehicle immediately.
    """
    trip = trip_lifecycle.cancel_trip(db, trip_id, payload.reason, clock=clock)
    return Api_response(data=_trip(trip), message="Trip cancelled")


# ==========================================================
# 📌 Location stream
# ==========================================================

@router.post("/location", response_model=Api_response, status_code=201)
def ingest_location(
    payload: location_schema.Location_create,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    """
    Store a GPS sample and run the proximity check against the current stop.

    The response tells whether this sample marked a stop as ARRIVED:
        {
            "success": true,
            "data": {
                "location": {...},
                "arrived_route_point_id": "rp-2",
                "distance_to_current_stop_m": 38.4
            }
        }
    """
    result = location_ingestion.ingest_location(db, payload, clock=clock)
    return Api_response(data=result, message="Location recorded")


# ==========================================================
# 📌 Stops
# ==========================================================

@router.post("/arrive", response_model=Api_response)
def arrive_at_stop(
    payload: stop_schema.Stop_arrive,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    stop = stop_progression.arrive_at_stop(db, payload.trip_id, payload.route_point_id, clock=clock)
    return Api_response(data=stop_schema.TripStop_get.from_stop(stop), message="Arrived at stop")


@router.post("/depart", response_model=Api_response)
def depart_from_stop(
    payload: stop_schema.Stop_depart,
    db: Session = Depends(get_DB),
    clock=Depends(get_clock)
):
    stop = stop_progression.depart_from_stop(
        db,
        payload.trip_id,
        payload.route_point_id,
        passengers_boarded=payload.passengers_boarded,
        passengers_alighted=payload.passengers_alighted,
        clock=clock,
    )
    return Api_response(data=stop_schema.TripStop_get.from_stop(stop), message="Departed from stop")


# ==========================================================
# 📌 Read models
# ==========================================================

@router.get("/active", response_model=Api_response)
def active_trips(
    tenant_id: Optional[str] = Query(None, description="Restrict to one tenant's vehicles"),
    db: Session = Depends(get_DB)
):
    """
    Active trips board: STARTED, IN_PROGRESS and PAUSED trips, earliest
    scheduled first, each with its latest location.
    """
    return Api_response(data=trip_lifecycle.get_active_trips(db, tenant_id))


@router.get("/{trip_id}", response_model=Api_response)
def trip_status(trip_id: str, db: Session = Depends(get_DB)):
    """
    Live status of one trip.

    Raises:
        404: trip_not_found
    """
    return Api_response(data=trip_lifecycle.get_trip_status(db, trip_id))
