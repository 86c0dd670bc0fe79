# transit_live/Repositories/fleet.py
"""
Read-only access to the collaborators owned by other modules: routes,
vehicles and drivers.
"""

from sqlalchemy.orm import Session
from typing import Optional

from transit_live.Models.route import Route
from transit_live.Models.fleet import Vehicle, Driver


def get_route(DB: Session, route_id: str) -> Optional[Route]:
    """Route with its points (ordered by route order)."""
    return DB.query(Route).filter(Route.id == route_id).first()


def get_vehicle(DB: Session, vehicle_id: str) -> Optional[Vehicle]:
    return DB.query(Vehicle).filter(Vehicle.id == vehicle_id).first()


def get_driver(DB: Session, driver_id: str) -> Optional[Driver]:
    return DB.query(Driver).filter(Driver.id == driver_id).first()
