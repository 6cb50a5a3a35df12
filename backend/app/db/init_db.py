"""Create all tables. Run on app startup."""
import logging

from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.models import location, lot, unit, transaction  # noqa: F401 - register models
from app.models.location import Location

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = [
    ("Main Shelf", "room"),
    ("Pharmacy Fridge", "fridge"),
]


def init_db():
    Base.metadata.create_all(bind=engine)

    # Units cannot be checked in without a location, so make sure one exists
    db = SessionLocal()
    try:
        if db.query(Location).count() == 0:
            for name, temp_type in DEFAULT_LOCATIONS:
                db.add(Location(name=name, temp_type=temp_type))
            db.commit()
            logger.info("Created %d default locations", len(DEFAULT_LOCATIONS))
    finally:
        db.close()
