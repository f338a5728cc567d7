from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.main import app
from api.routes import locations as locations_router
from domain.errors import PersistenceError

CAFE_X = {
    "name": "Cafe X",
    "address": "1 Main St",
    "code": "4321",
    "lat": 42.1,
    "lng": -71.1,
    "providerPlaceId": "PID1",
}


@pytest.fixture
def client(session_factory):
    with patch.object(locations_router, "SessionLocal", session_factory):
        yield TestClient(app)


def test_submitting_same_place_twice_yields_one_location_with_two_codes(client):
    first = client.post("/locations", json=CAFE_X)
    second = client.post("/locations", json={**CAFE_X, "code": "9999", "notes": "  new code  "})

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["locationId"] == second.json()["locationId"]
    assert first.json()["id"] != second.json()["id"]
    assert second.json()["notes"] == "new code"
    assert second.json()["createdAt"]

    resp = client.get("/locations")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    location = data[0]
    assert location["providerPlaceId"] == "PID1"
    assert [c["code"] for c in location["codes"]] == ["9999", "4321"]
    assert location["latestCode"]["code"] == "9999"
    assert location["directionsUrl"] == (
        "https://www.google.com/maps/search/?api=1&query=Cafe%20X%2C%201%20Main%20St"
    )


def test_manual_submissions_create_distinct_locations(client):
    manual = {k: v for k, v in CAFE_X.items() if k != "providerPlaceId"}
    assert client.post("/locations", json=manual).status_code == 201
    assert client.post("/locations", json=manual).status_code == 201
    assert len(client.get("/locations").json()) == 2


@pytest.mark.parametrize(
    "body",
    [
        {**CAFE_X, "code": "  "},
        {k: v for k, v in CAFE_X.items() if k != "lat"},
        {k: v for k, v in CAFE_X.items() if k != "name"},
        {**CAFE_X, "lat": 123.0},
        {**CAFE_X, "lat": True},
        {**CAFE_X, "lng": False},
    ],
)
def test_invalid_submission_returns_400_and_stores_nothing(client, body):
    resp = client.post("/locations", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]
    assert client.get("/locations").json() == []


def test_wrongly_typed_body_returns_400(client):
    resp = client.post("/locations", json={**CAFE_X, "lat": "north"})
    assert resp.status_code == 400


def test_non_finite_coordinate_returns_400(client):
    body = '{"name": "Cafe X", "address": "1 Main St", "code": "4321", "lat": NaN, "lng": -71.1}'
    resp = client.post("/locations", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert client.get("/locations").json() == []


def test_persistence_failure_returns_generic_500(client):
    with patch.object(locations_router.resolver, "submit", side_effect=PersistenceError("db down")):
        resp = client.post("/locations", json=CAFE_X)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Could not save. Please try again."}


def test_list_failure_is_distinct_from_empty_list():
    def broken_session():
        raise OperationalError("SELECT", {}, Exception("unable to open database file"))

    with patch.object(locations_router, "SessionLocal", broken_session):
        resp = TestClient(app).get("/locations")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Could not load locations"}


def test_list_ranks_by_distance_when_origin_given(client):
    client.post("/locations", json={**CAFE_X, "name": "Far", "lat": 42.9634, "lng": -71.4618, "providerPlaceId": "FAR"})
    client.post("/locations", json={**CAFE_X, "name": "Near", "lat": 42.3468, "lng": -71.0545, "providerPlaceId": "NEAR"})

    ranked = client.get("/locations", params={"lat": 42.34, "lng": -71.06}).json()
    assert [loc["name"] for loc in ranked] == ["Near", "Far"]
    assert ranked[0]["distanceMiles"] < ranked[1]["distanceMiles"]
    assert ranked[0]["distanceLabel"].endswith(" mi")

    unranked = client.get("/locations", params={"lat": 42.34}).json()
    assert [loc["name"] for loc in unranked] == ["Far", "Near"]
    assert all(loc["distanceMiles"] is None for loc in unranked)


def test_list_can_omit_codes(client):
    client.post("/locations", json=CAFE_X)
    data = client.get("/locations", params={"includeCodes": "false"}).json()
    assert data[0]["codes"] == []
    assert data[0]["latestCode"] is None


def test_viewport_endpoint(client):
    empty = client.get("/locations/viewport").json()
    assert empty["south"] == empty["north"] == 42.65
    assert empty["west"] == empty["east"] == -71.25

    client.post("/locations", json={**CAFE_X, "lat": 42.9634, "lng": -71.4618, "providerPlaceId": "A"})
    client.post("/locations", json={**CAFE_X, "lat": 42.3468, "lng": -71.0545, "providerPlaceId": "B"})

    everything = client.get("/locations/viewport").json()
    assert everything["south"] == 42.3468
    assert everything["north"] == 42.9634

    nearest = client.get("/locations/viewport", params={"lat": 42.34, "lng": -71.06}).json()
    assert nearest == {
        "south": 42.34,
        "west": -71.06,
        "north": 42.3468,
        "east": -71.0545,
        "center": {"lat": pytest.approx(42.3434), "lng": pytest.approx(-71.05725)},
    }


def test_health_endpoints():
    client = TestClient(app)
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy"}


def test_integer_coordinates_are_accepted(client):
    resp = client.post("/locations", json={**CAFE_X, "lat": 42, "lng": -71})
    assert resp.status_code == 201
    location = client.get("/locations").json()[0]
    assert location["lat"] == 42.0
    assert location["lng"] == -71.0
