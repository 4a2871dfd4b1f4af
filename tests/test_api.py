"""API-level tests for the Flask app."""

from datetime import datetime, timedelta

import pytest

from app import create_app
from drink_app.catalog import CatalogService
from drink_app.ledger import Ledger
from drink_app.storage import MemoryKeyValueStore, StorageError

NOW = datetime(2026, 3, 14, 19, 0)


class FailingStore(MemoryKeyValueStore):
    def set(self, key, value):
        raise StorageError("read-only")


@pytest.fixture
def ledger():
    return Ledger(MemoryKeyValueStore(), clock=lambda: NOW)


@pytest.fixture
def client(ledger):
    app = create_app(ledger=ledger, catalog=CatalogService(MemoryKeyValueStore(), clock=lambda: NOW))
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def add_beer(client, **overrides):
    payload = {"category": "alcohol", "name": "Beer", "amount": 500, "unit": "ml", "alcohol_percentage": 5}
    payload.update(overrides)
    return client.post("/api/entries", json=payload)


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_default_profile(client):
    data = client.get("/api/profile").get_json()
    assert data["age"] == 25
    assert data["sex"] == "male"
    assert data["weight_kg"] == 70.0
    assert data["bmi_category"] == "normal"


def test_profile_save_and_reload(client):
    res = client.post("/api/profile", json={"age": 33, "sex": "female", "weight_kg": 58, "height_cm": 164})
    assert res.status_code == 200
    data = client.get("/api/profile").get_json()
    assert (data["age"], data["sex"], data["weight_kg"], data["height_cm"]) == (33, "female", 58.0, 164.0)


def test_profile_rejects_bad_values(client):
    res = client.post("/api/profile", json={"age": 10})
    assert res.status_code == 400
    assert "Age" in res.get_json()["error"]
    res = client.post("/api/profile", json={"sex": "other"})
    assert res.status_code == 400


def test_add_entry_and_list(client):
    res = add_beer(client)
    assert res.status_code == 200
    entry = res.get_json()["entry"]
    assert entry["timestamp"] == NOW.isoformat()
    assert entry["standard_drinks"] == pytest.approx(1.41, abs=0.01)

    items = client.get("/api/entries?category=alcohol").get_json()["items"]
    assert [i["id"] for i in items] == [entry["id"]]
    assert client.get("/api/entries?category=caffeine").get_json()["items"] == []


def test_add_entry_hours_ago(client):
    entry = add_beer(client, hours_ago=2).get_json()["entry"]
    assert entry["timestamp"] == (NOW - timedelta(hours=2)).isoformat()


def test_add_entry_validation_errors(client):
    res = add_beer(client, amount=3000)
    assert res.status_code == 400
    assert res.get_json()["error"] == "Drink size cannot exceed 2500 ml"

    assert add_beer(client, alcohol_percentage=120).status_code == 400
    assert add_beer(client, amount="lots").status_code == 400
    assert add_beer(client, unit="pint").status_code == 400
    assert add_beer(client, category="water").status_code == 400
    assert client.get("/api/entries?category=alcohol").get_json()["items"] == []


def test_add_entry_from_catalog(client):
    catalog = client.get("/api/catalog?category=caffeine").get_json()["items"]
    espresso = next(d for d in catalog if d["name"] == "Espresso")
    res = client.post("/api/entries", json={"catalog_id": espresso["id"]})
    assert res.status_code == 200
    assert res.get_json()["entry"]["caffeine_mg"] == 70

    assert client.post("/api/entries", json={"catalog_id": "nope"}).status_code == 400


def test_delete_entry(client):
    entry_id = add_beer(client).get_json()["entry"]["id"]
    assert client.delete(f"/api/entries/{entry_id}").status_code == 200
    assert client.delete(f"/api/entries/{entry_id}").status_code == 404


def test_update_timestamp(client):
    entry_id = add_beer(client).get_json()["entry"]["id"]
    new_time = (NOW - timedelta(hours=3)).isoformat()
    res = client.post(f"/api/entries/{entry_id}/timestamp", json={"timestamp": new_time})
    assert res.status_code == 200
    assert res.get_json()["entry"]["timestamp"] == new_time

    assert client.post(f"/api/entries/{entry_id}/timestamp", json={"timestamp": "yesterday"}).status_code == 400
    assert client.post("/api/entries/missing/timestamp", json={"timestamp": new_time}).status_code == 404


def test_clear_category(client):
    add_beer(client)
    client.post("/api/entries", json={"category": "caffeine", "name": "Espresso", "amount": 30, "caffeine_mg": 70})
    res = client.post("/api/entries/clear", json={"category": "alcohol"})
    assert res.get_json() == {"ok": True, "removed": 1}
    assert len(client.get("/api/entries?category=caffeine").get_json()["items"]) == 1
    assert client.post("/api/entries/clear", json={}).status_code == 400


def test_state_reports_estimates(client):
    add_beer(client)
    client.post("/api/entries", json={"category": "caffeine", "name": "Red Bull", "amount": 250, "caffeine_mg": 80})

    data = client.get("/api/state?hours_ahead=4").get_json()
    assert data["alcohol"]["bac_permille"] > 0
    assert data["alcohol"]["sober_at"] is not None
    assert data["caffeine"]["level_mg"] == 80.0
    assert data["caffeine"]["consumed_today_mg"] == 80.0
    assert data["alcohol_count"] == 1
    assert data["caffeine_count"] == 1
    assert data["bac_curve"][0]["t"] == -2.0
    assert data["bac_curve"][-1]["t"] == 4.0


def test_state_empty(client):
    data = client.get("/api/state").get_json()
    assert data["alcohol"]["bac_permille"] == 0
    assert data["alcohol"]["sober_at"] is None
    assert data["caffeine"]["clean_at"] is None


def test_catalog_listing_and_refresh_without_remote(client):
    data = client.get("/api/catalog").get_json()
    assert len(data["items"]) > 30
    assert data["last_updated"] == NOW.isoformat()
    assert client.get("/api/catalog?category=tea").status_code == 400

    res = client.post("/api/catalog/refresh", json={"force": True})
    assert res.get_json()["source"] is None


def test_storage_failure_returns_500():
    app = create_app(
        ledger=Ledger(FailingStore(), clock=lambda: NOW),
        catalog=CatalogService(MemoryKeyValueStore(), clock=lambda: NOW),
    )
    with app.test_client() as c:
        res = add_beer(c)
        assert res.status_code == 500
        assert "error" in res.get_json()


def test_non_finite_numbers_rejected(client):
    res = add_beer(client, alcohol_percentage="nan")
    assert res.status_code == 400
    assert res.get_json()["error"] == "Alcohol percentage must be a number"
    assert add_beer(client, amount="inf").status_code == 400

    res = client.post("/api/profile", json={"age": 30, "sex": "male", "weight_kg": "nan", "height_cm": 180})
    assert res.status_code == 400
    assert client.get("/api/state").status_code == 200
