"""
transit_live/Core/exceptions.py
===============================
Domain errors raised by the trip tracking services.

Every error is a local validation failure that the caller (driver app,
dispatch UI) must be able to show verbatim, so each kind carries a stable
machine-readable ``code`` and the HTTP status the API maps it to.

Hierarchy:
    TrackingError
    ├── TripNotFound / StopNotFound / RouteNotFound   (404)
    ├── VehicleNotFound / DriverNotFound              (404)
    ├── DriverBusy / VehicleBusy                      (409)
    ├── TripNotActive / NotArrived / NotPaused        (409)
    ├── VehicleMismatch                               (409)
    └── EmptyRoute                                    (422)
"""


class TrackingError(Exception):
    """Base class for all trip tracking failures."""

    code: str = "tracking_error"
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "detail": self.message}


# ==========================================================
# REFERENTIAL LOOKUPS
# ==========================================================

class TripNotFound(TrackingError):
    code = "trip_not_found"
    status_code = 404

    def __init__(self, trip_id: str):
        super().__init__(f"Trip '{trip_id}' not found")
        self.trip_id = trip_id


class StopNotFound(TrackingError):
    code = "stop_not_found"
    status_code = 404

    def __init__(self, trip_id: str, route_point_id: str):
        super().__init__(f"Route point '{route_point_id}' is not a stop of trip '{trip_id}'")
        self.trip_id = trip_id
        self.route_point_id = route_point_id


class RouteNotFound(TrackingError):
    code = "route_not_found"
    status_code = 404

    def __init__(self, route_id: str):
        super().__init__(f"Route '{route_id}' not found")
        self.route_id = route_id


class VehicleNotFound(TrackingError):
    code = "vehicle_not_found"
    status_code = 404

    def __init__(self, vehicle_id: str):
        super().__init__(f"Vehicle '{vehicle_id}' not found")
        self.vehicle_id = vehicle_id


class DriverNotFound(TrackingError):
    code = "driver_not_found"
    status_code = 404

    def __init__(self, driver_id: str):
        super().__init__(f"Driver '{driver_id}' not found")
        self.driver_id = driver_id


# ==========================================================
# EXCLUSIVITY VIOLATIONS
# ==========================================================

class DriverBusy(TrackingError):
    code = "driver_busy"
    status_code = 409

    def __init__(self, driver_id: str):
        super().__init__(f"Driver '{driver_id}' is already on an active trip")
        self.driver_id = driver_id


class VehicleBusy(TrackingError):
    code = "vehicle_busy"
    status_code = 409

    def __init__(self, vehicle_id: str):
        super().__init__(f"Vehicle '{vehicle_id}' is already in use by another trip")
        self.vehicle_id = vehicle_id


# ==========================================================
# STATE CONFLICTS
# ==========================================================

class TripNotActive(TrackingError):
    code = "trip_not_active"
    status_code = 409

    def __init__(self, trip_id: str, status: str):
        super().__init__(f"Trip '{trip_id}' is not active (status: {status})")
        self.trip_id = trip_id
        self.status = status


class NotArrived(TrackingError):
    code = "not_arrived"
    status_code = 409

    def __init__(self, trip_id: str, route_point_id: str, status: str):
        super().__init__(
            f"Cannot depart stop '{route_point_id}' of trip '{trip_id}': "
            f"stop is {status}, expected ARRIVED"
        )
        self.trip_id = trip_id
        self.route_point_id = route_point_id
        self.status = status


class NotPaused(TrackingError):
    code = "not_paused"
    status_code = 409

    def __init__(self, trip_id: str, status: str):
        super().__init__(f"Trip '{trip_id}' is not paused (status: {status})")
        self.trip_id = trip_id
        self.status = status


class VehicleMismatch(TrackingError):
    code = "vehicle_mismatch"
    status_code = 409

    def __init__(self, trip_id: str, expected: str, received: str):
        super().__init__(
            f"Location sample for trip '{trip_id}' came from vehicle '{received}', "
            f"but the trip runs on '{expected}'"
        )
        self.trip_id = trip_id
        self.expected = expected
        self.received = received


# ==========================================================
# MALFORMED INPUT
# ==========================================================

class EmptyRoute(TrackingError):
    code = "empty_route"
    status_code = 422

    def __init__(self, route_id: str = ""):
        label = f"Route '{route_id}'" if route_id else "Route"
        super().__init__(f"{label} has no stops")
        self.route_id = route_id
