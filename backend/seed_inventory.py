"""Seed demo lots and units so the check-out flow can be tried locally."""
from datetime import date

from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.models.location import Location
from app.models.lot import Lot
from app.models.unit import Unit
from app.schemas.unit import UnitCheckIn
from app.services.check_in_service import check_in_unit

SEED_USER = "seed-script"

# (daana_id, generic, brand, strength, form, qty, expiry, fridge?)
UNITS = [
    ("UNIT-DEMO-001", "Amoxicillin", "Amoxil", "500mg", "capsule", 30, date(2026, 12, 31), False),
    ("UNIT-DEMO-002", "Amoxicillin", "Amoxil", "500mg", "capsule", 60, date(2027, 6, 30), False),
    ("UNIT-DEMO-003", "Lisinopril", "Zestril", "10mg", "tablet", 90, date(2027, 3, 1), False),
    ("UNIT-DEMO-004", "Insulin glargine", "Lantus", "100U/mL", "injection", 5, date(2027, 1, 15), True),
]


def seed_inventory():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Unit).filter(Unit.daana_id.like("UNIT-DEMO-%")).count():
            print("Demo units already present, nothing to do")
            return

        lot = Lot(date_received=date.today().isoformat(), source_donor="Demo Donor", notes="Seed data")
        db.add(lot)
        db.commit()
        db.refresh(lot)

        room = db.query(Location).filter(Location.temp_type == "room").first()
        fridge = db.query(Location).filter(Location.temp_type == "fridge").first() or room

        for daana_id, generic, brand, strength, form, qty, expiry, cold in UNITS:
            data = UnitCheckIn(
                lot_id=lot.id,
                med_generic=generic,
                med_brand=brand,
                strength=strength,
                form=form,
                qty_total=qty,
                exp_date=expiry,
                location_id=(fridge if cold else room).id,
            )
            unit = check_in_unit(db, data, by_user_id=SEED_USER, daana_id=daana_id)
            print(f"  {unit.daana_id}: {unit.med_generic} {unit.strength} x{unit.qty_total} (exp {unit.exp_date})")

        print(f"Seeded {len(UNITS)} units in lot {lot.id}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_inventory()
