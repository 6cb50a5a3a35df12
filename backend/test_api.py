"""HTTP layer: status codes and payloads the web client relies on."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.api.deps import get_db, get_unit_cache
from app.main import app
from app.models.transaction import Transaction
from app.services import check_in_service

HEADERS = {"X-User-Id": "user-1"}


@pytest.fixture
def client(db, cache):
    def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_unit_cache] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_manual_lookup(client, make_unit):
    make_unit(daana_id="UNIT-42")
    res = client.get("/units/lookup", params={"token": '{"u":"UNIT-42"}'})
    assert res.status_code == 200
    body = res.json()
    assert body["found"] is True
    assert body["unit"]["daana_id"] == "UNIT-42"


def test_manual_lookup_not_found(client, make_unit):
    make_unit()
    res = client.get("/units/lookup", params={"token": "UNIT-404"})
    assert res.status_code == 404
    assert res.json()["detail"] == "Daana ID not found."


def test_scan_not_found_is_silent(client, make_unit):
    make_unit()
    res = client.get("/units/lookup", params={"token": "UNIT-404", "scan": True})
    assert res.status_code == 200
    assert res.json() == {"found": False, "ignored": False, "unit": None}


@pytest.mark.parametrize("params", [{"token": "   "}, {"token": "ab", "scan": True}])
def test_blank_and_noise_tokens_ignored(client, params):
    res = client.get("/units/lookup", params=params)
    assert res.status_code == 200
    assert res.json()["ignored"] is True


def test_dispense_partial(client, make_unit):
    make_unit()
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 4}, headers=HEADERS)
    assert res.status_code == 200
    body = res.json()
    assert body["remaining"] == 6
    assert body["unit_removed"] is False
    assert body["message"] == "Dispensed 4 from UNIT-1. New quantity: 6."

    unit = client.get("/units/UNIT-1").json()
    assert unit["qty_total"] == 6
    assert unit["status"] == "partial"


def test_dispense_all(client, make_unit):
    make_unit()
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 10}, headers=HEADERS)
    assert res.status_code == 200
    assert res.json()["unit_removed"] is True
    assert client.get("/units/UNIT-1").status_code == 404

    txns = client.get("/transactions", params={"daana_id": "UNIT-1"}).json()
    assert [(t["type"], t["qty"], t["by_user_id"]) for t in txns] == [("check_out", 10, "user-1")]


def test_dispense_over_request(client, make_unit):
    make_unit()
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 11}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot dispense. Requested 11, but only 10 available."
    assert client.get("/units/UNIT-1").json()["qty_total"] == 10


def test_dispense_terminal_status(client, make_unit):
    make_unit(status="quarantined")
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 1}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot dispense. Unit status is: quarantined."


def test_dispense_requires_acting_user(client, make_unit):
    make_unit()
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 1})
    assert res.status_code == 401


def test_fefo_confirmation_round_trip(client, make_unit):
    make_unit(daana_id="UNIT-A", exp_date="2025-01-01")
    make_unit(daana_id="UNIT-B", exp_date="2025-06-01")

    preview = client.post("/dispense/preview", json={"token": "UNIT-B", "quantity": 3})
    assert preview.status_code == 200
    assert preview.json()["advisory"]["older_daana_id"] == "UNIT-A"

    held = client.post("/dispense", json={"token": "UNIT-B", "quantity": 3}, headers=HEADERS)
    assert held.status_code == 409
    detail = held.json()["detail"]
    assert detail["code"] == "fefo_confirmation_required"
    assert detail["advisory"]["older_exp_date"] == "2025-01-01"
    assert client.get("/units/UNIT-B").json()["qty_total"] == 10

    confirmed = client.post(
        "/dispense",
        json={"token": "UNIT-B", "quantity": 3, "confirm_out_of_order": True},
        headers=HEADERS,
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["remaining"] == 7


def test_check_in_endpoint(client, lot, shelf):
    res = client.post(
        "/units/check-in",
        json={
            "lot_id": lot.id,
            "med_generic": "Lisinopril",
            "strength": "10mg",
            "form": "tablet",
            "qty_total": 90,
            "exp_date": "2027-03-01",
            "location_id": shelf.id,
        },
        headers=HEADERS,
    )
    assert res.status_code == 201
    unit = res.json()
    assert unit["status"] == "in_stock"

    listed = client.get("/units", params={"search": "lisino"}).json()
    assert [u["daana_id"] for u in listed] == [unit["daana_id"]]


def test_check_in_unknown_lot(client, shelf):
    res = client.post(
        "/units/check-in",
        json={
            "lot_id": 999,
            "med_generic": "Lisinopril",
            "strength": "10mg",
            "qty_total": 90,
            "exp_date": "2027-03-01",
            "location_id": shelf.id,
        },
        headers=HEADERS,
    )
    assert res.status_code == 400


def test_stats_and_lookup_tables(client, make_unit):
    make_unit()
    stats = client.get("/stats").json()
    assert stats["in_stock"] == 1
    assert stats["checked_out_today"] == 0

    assert [loc["name"] for loc in client.get("/locations").json()] == ["Main Shelf"]
    assert [lot["source_donor"] for lot in client.get("/lots").json()] == ["County Clinic"]


@pytest.mark.parametrize("quantity", [True, "4", 2.5, None])
@pytest.mark.parametrize("path", ["/dispense", "/dispense/preview"])
def test_non_integer_quantity_is_a_domain_error(client, make_unit, path, quantity):
    make_unit()
    res = client.post(path, json={"token": "UNIT-1", "quantity": quantity}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["detail"] == "Quantity must be greater than 0."
    assert client.get("/units/UNIT-1").json()["qty_total"] == 10


def test_dispense_store_failure_reports_cause(client, db, make_unit, monkeypatch):
    make_unit()

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    res = client.post("/dispense", json={"token": "UNIT-1", "quantity": 4}, headers=HEADERS)
    monkeypatch.undo()

    assert res.status_code == 500
    detail = res.json()["detail"]
    assert detail.startswith("Could not dispense item: ")
    assert "disk I/O error" in detail
    assert client.get("/units/UNIT-1").json()["qty_total"] == 10
    assert db.query(Transaction).count() == 0


def test_check_in_duplicate_id_is_a_conflict(client, db, lot, shelf, monkeypatch):
    monkeypatch.setattr(check_in_service, "generate_daana_id", lambda: "UNIT-1700000000000")
    body = {
        "lot_id": lot.id,
        "med_generic": "Lisinopril",
        "strength": "10mg",
        "qty_total": 90,
        "exp_date": "2027-03-01",
        "location_id": shelf.id,
    }

    first = client.post("/units/check-in", json=body, headers=HEADERS)
    assert first.status_code == 201

    second = client.post("/units/check-in", json={**body, "qty_total": 5}, headers=HEADERS)
    assert second.status_code == 409
    assert second.json()["detail"] == "Daana ID already exists"

    assert client.get("/units/UNIT-1700000000000").json()["qty_total"] == 90
    txns = client.get("/transactions", params={"daana_id": "UNIT-1700000000000"}).json()
    assert [(t["type"], t["qty"]) for t in txns] == [("check_in", 90)]
