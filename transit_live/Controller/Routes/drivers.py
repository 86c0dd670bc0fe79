# transit_live/Controller/Routes/drivers.py

"""
Driver Shift REST API

Endpoints:
- GET /drivers/{driver_id}/shift   The driver's open shift, or null
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from transit_live.Controller.deps import get_DB
from transit_live.Schemas.shift import Shift_get
from transit_live.Schemas.response import Api_response
from transit_live.Services import shift_coordinator

router = APIRouter()


@router.get("/{driver_id}/shift", response_model=Api_response)
def current_shift(driver_id: str, db: Session = Depends(get_DB)):
    """
    Current ACTIVE or EMERGENCY shift of a driver.

    Returns ``data: null`` (not 404) when the driver is off shift, so the
    driver app can poll it without treating "no shift" as an error.
    """
    shift = shift_coordinator.get_driver_current_shift(db, driver_id)
    if shift is None:
        return Api_response(data=None, message="No active shift")
    return Api_response(data=Shift_get.model_validate(shift))
