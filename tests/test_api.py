# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from conftest import coords, point_id
from transit_live.Controller.deps import get_DB, get_clock
from transit_live.main import app


@pytest.fixture
def client(session_factory, seed, clock):
    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_DB] = _override_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start(client, vehicle_id="veh-1", driver_id="drv-1", route_id="rt-3"):
    return client.post("/trips/start", json={
        "route_id": route_id,
        "vehicle_id": vehicle_id,
        "driver_id": driver_id,
        "scheduled_start": "2025-11-03T08:00:00Z",
        "scheduled_end": "2025-11-03T09:00:00Z",
    })


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_start_trip(client):
    response = _start(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "STARTED"
    assert body["data"]["max_capacity"] == 40
    assert body["data"]["current_stop_index"] == 0


def test_busy_driver_returns_409(client):
    _start(client)
    response = _start(client, vehicle_id="veh-2")

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "driver_busy",
        "detail": "Driver 'drv-1' is already on an active trip",
    }


def test_empty_route_returns_422(client):
    response = _start(client, route_id="rt-empty")

    assert response.status_code == 422
    assert response.json()["error"] == "empty_route"


def test_schedule_end_before_start_is_rejected(client):
    response = client.post("/trips/start", json={
        "route_id": "rt-3",
        "vehicle_id": "veh-1",
        "driver_id": "drv-1",
        "scheduled_start": "2025-11-03T09:00:00Z",
        "scheduled_end": "2025-11-03T08:00:00Z",
    })
    assert response.status_code == 422


def test_driver_workflow(client, clock):
    trip_id = _start(client).json()["data"]["id"]

    depart = client.post("/trips/depart", json={
        "trip_id": trip_id,
        "route_point_id": point_id("rt-3", 0),
        "passengers_boarded": 6,
    })
    assert depart.status_code == 200
    assert depart.json()["data"]["status"] == "DEPARTED"

    clock.advance(minutes=11)
    lat, lon = coords(1)
    location = client.post("/trips/location", json={
        "trip_id": trip_id,
        "vehicle_id": "veh-1",
        "latitude": lat,
        "longitude": lon,
        "speed": 12.0,
    })
    assert location.status_code == 201
    assert location.json()["data"]["arrived_route_point_id"] == point_id("rt-3", 1)

    status = client.get(f"/trips/{trip_id}").json()["data"]
    assert status["status"] == "IN_PROGRESS"
    assert status["passenger_count"] == 6
    assert status["current_stop"]["name"] == "Calle 72"
    assert status["stops"][1]["delay"] == 1
    assert status["latest_location"]["speed"] == 12.0

    paused = client.post("/trips/emergency", json={"trip_id": trip_id, "reason": "Flat tyre"})
    assert paused.json()["data"]["status"] == "PAUSED"

    rejected = client.post("/trips/location", json={
        "trip_id": trip_id, "vehicle_id": "veh-1", "latitude": lat, "longitude": lon,
    })
    assert rejected.status_code == 409
    assert rejected.json()["error"] == "trip_not_active"

    shift = client.get("/drivers/drv-1/shift").json()["data"]
    assert shift["status"] == "EMERGENCY"
    assert shift["notes"] == "Flat tyre"

    assert client.post(f"/trips/{trip_id}/resume").json()["data"]["status"] == "IN_PROGRESS"

    completed = client.post("/trips/complete", json={"trip_id": trip_id, "notes": "End of line"})
    assert completed.json()["data"]["status"] == "COMPLETED"

    assert client.get("/drivers/drv-1/shift").json()["data"] is None
    assert client.get("/trips/active").json()["data"] == []


def test_depart_before_arrival_returns_409(client):
    trip_id = _start(client).json()["data"]["id"]

    response = client.post("/trips/depart", json={"trip_id": trip_id, "route_point_id": point_id("rt-3", 2)})
    assert response.status_code == 409
    assert response.json()["error"] == "not_arrived"


def test_negative_passengers_rejected(client):
    trip_id = _start(client).json()["data"]["id"]

    response = client.post("/trips/depart", json={
        "trip_id": trip_id,
        "route_point_id": point_id("rt-3", 0),
        "passengers_alighted": -2,
    })
    assert response.status_code == 422


def test_resume_running_trip_returns_409(client):
    trip_id = _start(client).json()["data"]["id"]

    response = client.post(f"/trips/{trip_id}/resume")
    assert response.status_code == 409
    assert response.json()["error"] == "not_paused"


def test_cancel_trip(client):
    trip_id = _start(client).json()["data"]["id"]

    response = client.post(f"/trips/{trip_id}/cancel", json={"reason": "Vehicle recalled"})
    assert response.json()["data"]["status"] == "CANCELLED"
    assert _start(client, driver_id="drv-2").status_code == 201


def test_unknown_trip_returns_404(client):
    response = client.get("/trips/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "trip_not_found"


def test_active_trips_and_location_history(client):
    trip_id = _start(client).json()["data"]["id"]
    client.post("/trips/location", json={
        "trip_id": trip_id, "vehicle_id": "veh-1", "latitude": 10.9650, "longitude": -74.7964,
    })

    active = client.get("/trips/active", params={"tenant_id": "acme"}).json()["data"]
    assert [t["id"] for t in active] == [trip_id]
    assert active[0]["latest_location"]["latitude"] == 10.9650

    history = client.get("/vehicles/veh-1/locations").json()["data"]
    assert len(history) == 1


def test_analytics_endpoint(client):
    _start(client)

    response = client.get("/analytics/trips", params={"tenant_id": "acme", "timeframe": "week"})
    assert response.status_code == 200
    assert response.json()["data"]["total_trips"] == 1

    assert client.get("/analytics/trips", params={"timeframe": "decade"}).status_code == 422


def test_location_sample_validation(client):
    trip_id = _start(client).json()["data"]["id"]

    foreign = client.post("/trips/location", json={
        "trip_id": trip_id, "vehicle_id": "veh-3", "latitude": 10.9650, "longitude": -74.7964,
    })
    assert foreign.status_code == 409
    assert foreign.json()["error"] == "vehicle_mismatch"

    naive = client.post("/trips/location", json={
        "trip_id": trip_id, "vehicle_id": "veh-1", "latitude": 10.9650, "longitude": -74.7964,
        "timestamp": "2025-11-03T08:01:00",
    })
    assert naive.status_code == 422

    assert client.get("/vehicles/veh-3/locations").json()["data"] == []
