"""
DISPENSE (CHECK-OUT) WORKFLOW

Flow:
1. Unit Directory resolves the token
2. The unit row is re-read from the store (fresh snapshot)
3. validate_dispense() applies the business rules (pure, no I/O)
4. find_older_unit() looks for an earlier-expiring unit of the same
   medication + strength (FEFO advisory)
5. If advised and not confirmed -> stop, nothing written
6. commit_dispense() updates or deletes the unit AND appends the check_out
   transaction in ONE commit

ATOMICITY:
- Unit mutation and transaction insert share a single session commit
- Any store error rolls the session back and raises CommitFailed
- Unit.version makes the UPDATE/DELETE a compare-and-swap, so a concurrent
  change surfaces as CommitFailed instead of a lost decrement
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.audit import AuditLog
from app.core.exceptions import (
    CommitFailed,
    InsufficientQuantity,
    InvalidQuantity,
    LookupNotFound,
    UnitNotDispensable,
)
from app.models.transaction import Transaction
from app.models.unit import DISPENSABLE_STATUSES, TERMINAL_STATUSES, Unit
from app.schemas.unit import UnitRead
from app.services.unit_cache import UnitCache
from app.services.unit_directory import get_unit_row, resolve_unit

logger = logging.getLogger(__name__)


@dataclass
class FefoAdvisory:
    daana_id: str
    exp_date: str
    older_daana_id: str
    older_exp_date: str

    @property
    def message(self) -> str:
        return (
            f"This unit expires on {self.exp_date}. "
            f"An older unit (exp: {self.older_exp_date}) is available. Proceed anyway?"
        )


@dataclass
class DispenseResult:
    daana_id: str
    dispensed: int
    remaining: int
    transaction_id: int

    @property
    def unit_removed(self) -> bool:
        return self.remaining == 0

    @property
    def message(self) -> str:
        if self.unit_removed:
            return (
                f"Dispensed all {self.dispensed} units from {self.daana_id}. "
                "Unit removed from inventory."
            )
        return f"Dispensed {self.dispensed} from {self.daana_id}. New quantity: {self.remaining}."


@dataclass
class DispenseOutcome:
    """Result of the full workflow: either committed, or held for confirmation."""
    unit: UnitRead
    remaining: int
    advisory: Optional[FefoAdvisory] = None
    result: Optional[DispenseResult] = None

    @property
    def requires_confirmation(self) -> bool:
        return self.result is None and self.advisory is not None


def validate_dispense(unit, quantity) -> int:
    """
    Check a proposed dispense against the business rules.

    Works on ORM rows and UnitRead snapshots alike.

    Returns:
        Remaining quantity after the dispense (0 means the unit is exhausted)

    Raises:
        InvalidQuantity, UnitNotDispensable, InsufficientQuantity
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)

    if unit.status in TERMINAL_STATUSES:
        raise UnitNotDispensable(unit.status)

    remaining = unit.qty_total - quantity
    if remaining < 0:
        raise InsufficientQuantity(available=unit.qty_total, requested=quantity)

    return remaining


def find_older_unit(unit, units: Iterable[UnitRead]) -> Optional[FefoAdvisory]:
    """
    FEFO check: is an earlier-expiring unit of the same medication and
    strength still in stock?

    When several qualify, the earliest expiry wins (then lowest daana_id).
    Dates are YYYY-MM-DD strings, so string order is date order.
    """
    candidates = [
        v for v in units
        if v.daana_id != unit.daana_id
        and v.med_generic == unit.med_generic
        and v.strength == unit.strength
        and v.status in DISPENSABLE_STATUSES
        and v.exp_date < unit.exp_date
    ]
    if not candidates:
        return None

    older = min(candidates, key=lambda v: (v.exp_date, v.daana_id))
    return FefoAdvisory(
        daana_id=unit.daana_id,
        exp_date=unit.exp_date,
        older_daana_id=older.daana_id,
        older_exp_date=older.exp_date,
    )


def commit_dispense(
    db: Session,
    unit: Unit,
    quantity: int,
    remaining: int,
    by_user_id: str,
    patient_ref: Optional[str] = None,
    reason_note: Optional[str] = None,
) -> DispenseResult:
    """
    Apply a validated dispense and record it, atomically.

    Raises:
        CommitFailed: store error; the session has been rolled back
    """
    daana_id = unit.daana_id

    if remaining == 0:
        db.delete(unit)
        logger.info(f"Deleting unit {daana_id} - quantity reached 0")
    else:
        unit.qty_total = remaining
        unit.status = "partial"

    txn = Transaction(
        daana_id=daana_id,
        type="check_out",
        qty=quantity,
        by_user_id=by_user_id,
        patient_ref=patient_ref,
        reason_note=reason_note,
    )
    db.add(txn)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        AuditLog.log_commit_failed(daana_id, quantity, by_user_id, str(e))
        raise CommitFailed(e) from e

    db.refresh(txn)
    AuditLog.log_dispense(daana_id, quantity, remaining, by_user_id, txn.id, patient_ref)
    return DispenseResult(
        daana_id=daana_id,
        dispensed=quantity,
        remaining=remaining,
        transaction_id=txn.id,
    )


def _load_fresh(db: Session, cache: UnitCache, token: str) -> Unit:
    snapshot = resolve_unit(db, cache, token)
    # The cache may lag the store; validation always runs on the current row
    row = get_unit_row(db, snapshot.daana_id)
    if row is None:
        cache.invalidate()
        raise LookupNotFound(snapshot.daana_id)
    db.refresh(row)
    return row


def preview_dispense(db: Session, cache: UnitCache, token: str, quantity: int) -> DispenseOutcome:
    """Validation + FEFO advisory without writing anything."""
    row = _load_fresh(db, cache, token)
    remaining = validate_dispense(row, quantity)
    cache.sync(db)
    advisory = find_older_unit(row, cache.filter(lambda u: True))
    return DispenseOutcome(unit=UnitRead.model_validate(row), remaining=remaining, advisory=advisory)


def dispense(
    db: Session,
    cache: UnitCache,
    token: str,
    quantity: int,
    by_user_id: str,
    patient_ref: Optional[str] = None,
    reason_note: Optional[str] = None,
    confirm_out_of_order: bool = False,
) -> DispenseOutcome:
    """
    Run the full check-out workflow.

    An out-of-order dispense (older unit available) is held back until the
    caller repeats the request with confirm_out_of_order=True.
    """
    row = _load_fresh(db, cache, token)
    remaining = validate_dispense(row, quantity)

    cache.sync(db)
    advisory = find_older_unit(row, cache.filter(lambda u: True))
    snapshot = UnitRead.model_validate(row)

    if advisory:
        AuditLog.log_fefo_advisory(row.daana_id, advisory.older_daana_id, by_user_id, confirm_out_of_order)
        if not confirm_out_of_order:
            logger.info(f"Dispense of {row.daana_id} held for FEFO confirmation")
            return DispenseOutcome(unit=snapshot, remaining=remaining, advisory=advisory)

    result = commit_dispense(
        db,
        row,
        quantity,
        remaining,
        by_user_id=by_user_id,
        patient_ref=patient_ref,
        reason_note=reason_note,
    )
    cache.invalidate()
    return DispenseOutcome(unit=snapshot, remaining=remaining, advisory=advisory, result=result)
