"""Check-in creates a unit plus its audit row; status counters."""
import json
from datetime import date

import pytest

from app.models.transaction import Transaction
from app.models.unit import Unit
from app.schemas.unit import UnitCheckIn
from app.services.check_in_service import check_in_unit
from app.services.dispense_service import dispense
from app.services.stats_service import get_status_stats


def _check_in_data(lot, shelf, **overrides):
    values = dict(
        lot_id=lot.id,
        med_generic="Amoxicillin",
        med_brand="Amoxil",
        strength="500mg",
        form="capsule",
        ndc="0093-3109",
        qty_total=30,
        exp_date=date(2026, 12, 31),
        location_id=shelf.id,
    )
    values.update(overrides)
    return UnitCheckIn(**values)


def test_check_in_creates_unit_and_transaction(db, cache, lot, shelf):
    cache.refresh(db)
    unit = check_in_unit(db, _check_in_data(lot, shelf), by_user_id="user-1", cache=cache)

    assert unit.daana_id.startswith("UNIT-")
    assert unit.status == "in_stock"
    assert unit.qty_total == 30
    assert unit.exp_date == "2026-12-31"
    assert unit.location_name == "Main Shelf"
    assert cache.is_stale()

    payload = json.loads(unit.qr_code_value)
    assert payload == {
        "u": unit.daana_id,
        "l": str(lot.id),
        "g": "Amoxicillin",
        "s": "500mg",
        "f": "capsule",
        "x": "2026-12-31",
        "loc": "Main Shelf",
    }

    txn = db.query(Transaction).filter(Transaction.daana_id == unit.daana_id).one()
    assert txn.type == "check_in"
    assert txn.qty == 30
    assert txn.reason_note == "Initial stock check-in"


def test_check_in_unknown_location(db, lot, shelf):
    with pytest.raises(ValueError):
        check_in_unit(db, _check_in_data(lot, shelf, location_id=999), by_user_id="user-1")
    assert db.query(Unit).count() == 0
    assert db.query(Transaction).count() == 0


def test_checked_in_unit_is_dispensable_by_label(db, cache, lot, shelf):
    unit = check_in_unit(db, _check_in_data(lot, shelf), by_user_id="user-1", daana_id="UNIT-LABEL")
    outcome = dispense(db, cache, unit.qr_code_value, 5, by_user_id="user-2")
    assert outcome.result.remaining == 25


def test_transaction_outlives_unit(db, cache, lot, shelf):
    check_in_unit(db, _check_in_data(lot, shelf, qty_total=3), by_user_id="user-1", daana_id="UNIT-GONE")
    dispense(db, cache, "UNIT-GONE", 3, by_user_id="user-1")

    assert db.query(Unit).filter(Unit.daana_id == "UNIT-GONE").first() is None
    types = sorted(t.type for t in db.query(Transaction).filter(Transaction.daana_id == "UNIT-GONE"))
    assert types == ["check_in", "check_out"]


def test_status_stats(db, cache, make_unit):
    make_unit(daana_id="UNIT-SOON", exp_date="2025-02-01")
    make_unit(daana_id="UNIT-LATER", exp_date="2026-01-01", status="partial")
    make_unit(daana_id="UNIT-BAD", exp_date="2025-01-15", status="expired")
    dispense(db, cache, "UNIT-SOON", 1, by_user_id="user-1")

    stats = get_status_stats(db, expiring_days=90, today=date(2025, 1, 1))
    assert stats.in_stock == 2
    assert stats.expiring_soon == 1
    assert stats.checked_out_today == 1
