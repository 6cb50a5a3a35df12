"""Check-in: create a unit and its check_in transaction in one commit."""
import logging
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.audit import AuditLog
from app.models.location import Location
from app.models.lot import Lot
from app.models.transaction import Transaction
from app.models.unit import Unit
from app.schemas.unit import UnitCheckIn
from app.services.unit_cache import UnitCache
from app.services.unit_directory import build_qr_payload

logger = logging.getLogger(__name__)


def generate_daana_id() -> str:
    return f"UNIT-{int(time.time() * 1000)}"


def check_in_unit(
    db: Session,
    data: UnitCheckIn,
    by_user_id: str,
    cache: Optional[UnitCache] = None,
    daana_id: Optional[str] = None,
) -> Unit:
    """
    Add a new unit to stock.

    Raises:
        ValueError: lot or location does not exist
        IntegrityError: daana_id already taken (nothing is written)
    """
    lot = db.query(Lot).filter(Lot.id == data.lot_id).first()
    if not lot:
        raise ValueError(f"Lot {data.lot_id} not found")
    location = db.query(Location).filter(Location.id == data.location_id).first()
    if not location:
        raise ValueError(f"Location {data.location_id} not found")

    new_id = daana_id or generate_daana_id()
    unit = Unit(
        daana_id=new_id,
        lot_id=lot.id,
        med_generic=data.med_generic.strip(),
        med_brand=data.med_brand,
        strength=data.strength.strip(),
        form=data.form,
        ndc=data.ndc,
        qty_total=data.qty_total,
        exp_date=data.exp_date.isoformat(),
        location_id=location.id,
        location_name=location.name,
        status="in_stock",
    )
    unit.qr_code_value = build_qr_payload(unit, location.name)
    db.add(unit)

    db.add(Transaction(
        daana_id=unit.daana_id,
        type="check_in",
        qty=unit.qty_total,
        by_user_id=by_user_id,
        reason_note="Initial stock check-in",
    ))

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Check-in of {new_id} failed: {type(e).__name__}")
        raise
    db.refresh(unit)

    if cache is not None:
        cache.invalidate()

    logger.info(f"Checked in {unit.daana_id}: {unit.qty_total} x {unit.med_generic} {unit.strength}")
    AuditLog.log_check_in(unit.daana_id, unit.qty_total, by_user_id, lot.id)
    return unit
