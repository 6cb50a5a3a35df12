"""Records: transaction history, lookup tables and status counters. Read-only."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.core.exceptions import BusinessError
from app.models.location import Location
from app.models.lot import Lot
from app.models.transaction import Transaction, TRANSACTION_TYPES
from app.schemas.stats import StatusStats, LocationRecord, LotRecord
from app.schemas.transaction import TransactionRecord
from app.services.stats_service import get_status_stats

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionRecord])
def list_transactions(
    daana_id: str | None = Query(None),
    type: str | None = Query(None),
    limit: int = Query(settings.TRANSACTION_LIST_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Audit trail, newest first. Survives unit deletion (keyed by daana_id)."""
    q = db.query(Transaction)
    if daana_id:
        q = q.filter(Transaction.daana_id == daana_id.strip())
    if type:
        if type not in TRANSACTION_TYPES:
            raise BusinessError.bad_request(f"Unknown transaction type: {type}")
        q = q.filter(Transaction.type == type)
    return q.order_by(Transaction.timestamp.desc(), Transaction.id.desc()).limit(limit).all()


@router.get("/stats", response_model=StatusStats)
def status_stats(db: Session = Depends(get_db)):
    """In stock / expiring soon / checked out in the last 24h."""
    return get_status_stats(db, expiring_days=settings.EXPIRING_SOON_DAYS)


@router.get("/locations", response_model=list[LocationRecord])
def list_locations(db: Session = Depends(get_db)):
    return db.query(Location).filter(Location.is_active.is_(True)).order_by(Location.name).all()


@router.get("/lots", response_model=list[LotRecord])
def list_lots(db: Session = Depends(get_db)):
    return db.query(Lot).order_by(Lot.date_received.desc(), Lot.id.desc()).all()
