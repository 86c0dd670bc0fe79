"""
transit_live/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so that ``Base.metadata`` is complete before Alembic
autogeneration, ``create_all()`` or relationship resolution runs.

Models Registered:
-----------------
- Route / RoutePoint: Route definitions (owned by the route editor)
- Vehicle / Driver: Fleet collaborators (capacity, tenant scope)
- Trip: One vehicle's execution of one route
- TripStop: Planned visit to one route point during a trip
- VehicleLocation: Append-only GPS samples
- DriverShift: Driver on-duty period bound to a trip

Important:
----------
Any new model class MUST be imported here.
"""

from transit_live.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================

from transit_live.Models.route import Route, RoutePoint
from transit_live.Models.fleet import Vehicle, Driver
from transit_live.Models.trip import Trip
from transit_live.Models.trip_stop import TripStop
from transit_live.Models.vehicle_location import VehicleLocation
from transit_live.Models.driver_shift import DriverShift
