"""Status bar counters for the dashboard."""
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.transaction import Transaction
from app.models.unit import DISPENSABLE_STATUSES, Unit
from app.schemas.stats import StatusStats


def get_status_stats(db: Session, expiring_days: int = 90, today: date = None) -> StatusStats:
    today = today or date.today()
    alert_date = (today + timedelta(days=expiring_days)).isoformat()
    since = datetime.now(timezone.utc) - timedelta(hours=24)

    active = db.query(Unit).filter(Unit.status.in_(DISPENSABLE_STATUSES))
    in_stock = active.count()
    expiring_soon = active.filter(Unit.exp_date <= alert_date).count()

    checked_out_today = (
        db.query(Transaction)
        .filter(Transaction.type == "check_out", Transaction.timestamp >= since)
        .count()
    )

    return StatusStats(
        in_stock=in_stock,
        expiring_soon=expiring_soon,
        checked_out_today=checked_out_today,
    )
