"""
transit_live/main.py
============================================
FastAPI Application for Live Trip Tracking
============================================

Entry point of the trip tracking service: trip lifecycle, GPS location
ingestion with automatic stop arrival, stop progression with passenger
accounting, driver shifts and delay analytics.

Architecture Overview:
---------------------
- REST API: driver app writes (start, location, arrive, depart, emergency,
  resume, complete), dispatch writes (cancel) and read models
- Services: plain functions over a SQLAlchemy session; every trip mutation
  runs inside a per-trip lock and a single database transaction
- Errors: domain errors carry their own code and HTTP status and are
  rendered by one exception handler

Run:
    uvicorn transit_live.main:app --reload
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from transit_live.Core.config import settings
from transit_live.Core.exceptions import TrackingError
from transit_live.Controller.Routes import trips, vehicles, drivers, analytics
from transit_live.DB.database import test_db_connection, create_all_tables


# ============================================================
# DYNAMIC CORS CONFIGURATION
# ============================================================
def _parse_origins(csv_value: str):
    """
    Parse comma-separated origin values into a list for CORS configuration.

    Examples:
        "*" → (True, ["*"])
        "https://app.com,https://admin.app.com" → (False, ["https://app.com", "https://admin.app.com"])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(
    os.getenv("HTTP_ALLOWED_ORIGINS", "*")
)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup Sequence:
        1. Verify database connectivity (logged, not fatal)
        2. Create tables when AUTO_CREATE_TABLES is set (development only)
    """
    if test_db_connection():
        print("[STARTUP] ✅ Database connection OK")
    else:
        print("[STARTUP] ⚠️  Database not reachable, requests will fail until it is")

    if settings.AUTO_CREATE_TABLES:
        create_all_tables()

    print(
        f"[STARTUP] ✅ {settings.PROJECT_NAME} {settings.PROJECT_VERSION} ready "
        f"(arrival radius {settings.ARRIVAL_RADIUS_M} m, stop interval {settings.STOP_INTERVAL_MIN} min)"
    )

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=not _http_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# DOMAIN ERROR HANDLER
# ============================================================
@app.exception_handler(TrackingError)
async def tracking_error_handler(request: Request, exc: TrackingError):
    """
    Render any TrackingError as
    {"success": false, "error": <code>, "detail": <message>}.
    """
    print(f"[API] ❌ {request.method} {request.url.path} → {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ============================================================
# HEALTH CHECK ENDPOINT
# ============================================================
@app.get("/health")
def health():
    """
    Health check endpoint for load balancers and container orchestration.
    """
    return {"status": "ok"}


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================
app.include_router(trips.router, prefix="/trips", tags=["trips"])
app.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
app.include_router(drivers.router, prefix="/drivers", tags=["drivers"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])


# ============================================================
# API INFORMATION ENDPOINT
# ============================================================
@app.get("/api")
def api_info():
    """
    API discovery: version, tracking parameters and available endpoints.
    """
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "tracking": {
            "arrival_radius_m": settings.ARRIVAL_RADIUS_M,
            "stop_interval_min": settings.STOP_INTERVAL_MIN,
            "on_time_threshold_min": settings.ON_TIME_THRESHOLD_MIN,
        },
        "endpoints": {
            "trips": "/trips/*",
            "vehicles": "/vehicles/{vehicle_id}/locations",
            "drivers": "/drivers/{driver_id}/shift",
            "analytics": "/analytics/trips",
            "health": "/health"
        }
    }
