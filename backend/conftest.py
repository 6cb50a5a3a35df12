"""Shared fixtures: in-memory database with one lot and two locations."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models.location import Location
from app.models.lot import Lot
from app.models.unit import Unit
from app.services.unit_cache import UnitCache
from app.services.unit_directory import build_qr_payload


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def shelf(db):
    location = Location(name="Main Shelf", temp_type="room", is_active=True)
    db.add(location)
    db.commit()
    return location


@pytest.fixture
def lot(db):
    lot = Lot(date_received="2024-11-01", source_donor="County Clinic", notes="Test donation")
    db.add(lot)
    db.commit()
    return lot


@pytest.fixture
def cache():
    return UnitCache(ttl_seconds=30)


@pytest.fixture
def make_unit(db, shelf, lot):
    """Insert a unit row directly, bypassing check-in."""
    def _make(
        daana_id="UNIT-1",
        qty_total=10,
        status="in_stock",
        exp_date="2025-03-01",
        med_generic="X",
        strength="5mg",
    ):
        unit = Unit(
            daana_id=daana_id,
            lot_id=lot.id,
            med_generic=med_generic,
            med_brand=None,
            strength=strength,
            form="tablet",
            qty_total=qty_total,
            exp_date=exp_date,
            location_id=shelf.id,
            location_name=shelf.name,
            status=status,
        )
        unit.qr_code_value = build_qr_payload(unit, shelf.name)
        db.add(unit)
        db.commit()
        db.refresh(unit)
        return unit

    return _make
