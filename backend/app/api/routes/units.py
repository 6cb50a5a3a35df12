"""Units: inventory list, scan/manual lookup and check-in."""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_unit_cache, get_acting_user_id
from app.core.config import settings
from app.core.exceptions import BusinessError
from app.models.unit import Unit, UNIT_STATUSES
from app.schemas.unit import UnitRead, UnitCheckIn, LookupResponse
from app.services.check_in_service import check_in_unit
from app.services.unit_cache import UnitCache
from app.services.unit_directory import lookup_unit, get_unit_row

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[UnitRead])
def list_units(
    search: str | None = Query(None),
    status: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """Inventory list, earliest expiry first."""
    q = db.query(Unit)
    if status:
        if status not in UNIT_STATUSES:
            raise BusinessError.bad_request(f"Unknown status: {status}")
        q = q.filter(Unit.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(
            Unit.daana_id.ilike(pattern),
            Unit.med_generic.ilike(pattern),
            Unit.med_brand.ilike(pattern),
            Unit.ndc.ilike(pattern),
            Unit.form.ilike(pattern),
        ))
    return q.order_by(Unit.exp_date.asc(), Unit.daana_id.asc()).all()


@router.get("/lookup", response_model=LookupResponse)
def lookup(
    token: str = Query("", description="Daana ID or scanned QR payload"),
    scan: bool = Query(False, description="Token came from the scanner"),
    db: Session = Depends(get_db),
    cache: UnitCache = Depends(get_unit_cache),
):
    """
    Resolve a typed or scanned token.

    Blank tokens and short scanner noise are ignored. A scan with no match
    is silent (found=false); a manual lookup with no match is a 404.
    """
    trimmed = token.strip()
    if not trimmed or (scan and len(trimmed) < settings.SCAN_MIN_LENGTH):
        return LookupResponse(found=False, ignored=True)

    try:
        cache.sync(db)
        unit = lookup_unit(db, cache, trimmed, scan=scan)
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)

    if unit is None:
        if scan:
            logger.info(f"Scan matched no unit: {trimmed[:64]}")
            return LookupResponse(found=False)
        raise BusinessError.not_found("unit", detail="Daana ID not found.")
    return LookupResponse(found=True, unit=unit)


@router.get("/{daana_id}", response_model=UnitRead)
def get_unit(daana_id: str, db: Session = Depends(get_db)):
    unit = get_unit_row(db, daana_id)
    if not unit:
        raise BusinessError.not_found("unit", detail="Daana ID not found.")
    return unit


@router.post("/check-in", response_model=UnitRead, status_code=201)
def check_in(
    data: UnitCheckIn,
    db: Session = Depends(get_db),
    cache: UnitCache = Depends(get_unit_cache),
    user_id: str = Depends(get_acting_user_id),
):
    """Add a unit to stock and record the check_in transaction."""
    try:
        return check_in_unit(db, data, by_user_id=user_id, cache=cache)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    except IntegrityError:
        raise BusinessError.conflict("Daana ID already exists")
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)
