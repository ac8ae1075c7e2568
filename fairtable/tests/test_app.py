from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from fairtable.analytics.store import clear_events
from fairtable.app import app
from fairtable.resolution.errors import DirectoryError
from fairtable.rooms.store import clear_rooms

client = TestClient(app)

ANCHOR = {"lat": 40.7128, "lng": -74.006}

MEMBERS = [
    {
        "id": "a",
        "name": "Ana",
        "preferences": {
            "budgetMax": 2,
            "dietaryRestrictions": ["Vegetarian"],
            "cuisinePreferences": ["thai"],
            "vibePreference": "quiet",
            "maxDistanceMeters": 3000,
        },
    },
    {"id": "b", "name": "Ben", "preferences": {"budgetMax": 3, "vibePreference": "casual"}},
]

LISTINGS = [
    {"placeId": "thai", "name": "Vegan Thai Cafe", "priceLevel": 1, "rating": 4.6,
     "types": ["cafe", "restaurant"], "lat": 40.714, "lng": -74.005},
    {"placeId": "steak", "name": "Prime Steakhouse", "priceLevel": 4, "rating": 4.8,
     "lat": 40.712, "lng": -74.006},
]


@pytest.fixture(autouse=True)
def _quiet_llm():
    clear_events()
    clear_rooms()
    with patch("fairtable.llm.enrich.explain_choice", new_callable=AsyncMock, return_value=""):
        yield


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── /resolve ─────────────────────────────────────────────────────────────


def test_resolve_returns_camel_case_result():
    resp = client.post("/resolve", json={"anchor": ANCHOR, "members": MEMBERS, "candidates": LISTINGS})

    assert resp.status_code == 200
    body = resp.json()
    assert body["roomId"] == "adhoc"
    assert body["eliminatedCount"] == 1
    assert body["eliminations"][0]["placeId"] == "steak"
    assert "computedAt" in body

    top = body["rankedRestaurants"][0]
    assert top["placeId"] == "thai"
    for key in ("finalScore", "meanScore", "fairnessScore", "variance", "minUserScore", "keyTradeoffs"):
        assert key in top
    assert set(top["userScores"]) == {"a", "b"}
    assert "budgetComfort" in top["userScores"]["a"]
    assert "fairness score" in top["explanation"]


def test_resolve_omits_absent_optional_fields():
    resp = client.post("/resolve", json={"members": MEMBERS, "candidates": LISTINGS})

    top = resp.json()["rankedRestaurants"][0]
    assert "address" not in top
    assert "photoReference" not in top


def test_resolve_without_explanations():
    resp = client.post(
        "/resolve",
        json={"members": MEMBERS, "candidates": LISTINGS, "includeExplanations": False},
    )

    assert all("explanation" not in r for r in resp.json()["rankedRestaurants"])


def test_resolve_rejects_empty_members():
    resp = client.post("/resolve", json={"anchor": ANCHOR, "members": [], "candidates": LISTINGS})

    assert resp.status_code == 422
    assert "no members" in resp.json()["detail"]


def test_resolve_rejects_unknown_dietary_restriction():
    members = [{"id": "x", "name": "X", "preferences": {"dietaryRestrictions": ["paleo"]}}]

    resp = client.post("/resolve", json={"members": members, "candidates": LISTINGS})

    assert resp.status_code == 422


def test_resolve_tolerates_malformed_listings():
    listings = LISTINGS + [{"name": "No id"}, "garbage", {"placeId": "x", "name": "No coords"}]

    resp = client.post("/resolve", json={"anchor": ANCHOR, "members": MEMBERS, "candidates": listings})

    assert resp.status_code == 200
    body = resp.json()
    assert body["eliminatedCount"] + len(body["rankedRestaurants"]) == 2


# ── Rooms ────────────────────────────────────────────────────────────────


def _create_room(**location) -> dict:
    resp = client.post(
        "/rooms",
        json={"location": {"label": "SoHo", **location}, "members": MEMBERS},
    )
    assert resp.status_code == 201
    return resp.json()


def test_create_and_fetch_room():
    room = _create_room(**ANCHOR)

    assert room["status"] == "lobby"
    assert len(room["code"]) == 6
    assert set(room["members"]) == {"a", "b"}

    resp = client.get(f"/rooms/{room['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == room["id"]


def test_unknown_room_is_404():
    assert client.get("/rooms/nope").status_code == 404
    assert client.post("/rooms/nope/resolve").status_code == 404


@patch("fairtable.resolution.pipeline.fetch_listings", new_callable=AsyncMock)
def test_resolve_room_and_fetch_result(mock_fetch):
    mock_fetch.return_value = LISTINGS
    room = _create_room(**ANCHOR)

    resp = client.post(f"/rooms/{room['id']}/resolve")

    assert resp.status_code == 200
    body = resp.json()
    assert body["room"]["status"] == "complete"
    result_id = body["result"]["id"]
    assert body["room"]["latestResultId"] == result_id

    fetched = client.get(f"/rooms/{room['id']}/results/{result_id}")
    assert fetched.status_code == 200
    assert fetched.json()["rankedRestaurants"][0]["placeId"] == "thai"

    assert client.get(f"/rooms/{room['id']}/results/other").status_code == 404


@patch("fairtable.resolution.pipeline.fetch_listings", new_callable=AsyncMock)
def test_resolve_room_with_explanations_disabled(mock_fetch):
    mock_fetch.return_value = LISTINGS
    room = _create_room(**ANCHOR)

    resp = client.post(f"/rooms/{room['id']}/resolve", json={"includeExplanations": False})

    assert resp.status_code == 200
    assert all("explanation" not in r for r in resp.json()["result"]["rankedRestaurants"])


@patch("fairtable.resolution.pipeline.fetch_listings", new_callable=AsyncMock)
def test_directory_failure_is_502_and_room_errors(mock_fetch):
    mock_fetch.side_effect = DirectoryError("Places API searchText failed with status 503")
    room = _create_room(**ANCHOR)

    resp = client.post(f"/rooms/{room['id']}/resolve")

    assert resp.status_code == 502
    assert client.get(f"/rooms/{room['id']}").json()["status"] == "error"
