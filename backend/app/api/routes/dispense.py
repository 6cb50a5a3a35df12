"""Dispense (check-out): preview and commit."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_unit_cache, get_acting_user_id
from app.core.exceptions import BusinessError, InventoryError
from app.schemas.dispense import (
    DispenseRequest,
    DispensePreviewResponse,
    DispenseResponse,
    FefoAdvisoryResponse,
)
from app.services import dispense_service
from app.services.dispense_service import FefoAdvisory
from app.services.unit_cache import UnitCache

logger = logging.getLogger(__name__)

router = APIRouter()


def _advisory_response(advisory: FefoAdvisory) -> FefoAdvisoryResponse:
    return FefoAdvisoryResponse(
        daana_id=advisory.daana_id,
        exp_date=advisory.exp_date,
        older_daana_id=advisory.older_daana_id,
        older_exp_date=advisory.older_exp_date,
        message=advisory.message,
    )


@router.post("/preview", response_model=DispensePreviewResponse)
def preview(
    data: DispenseRequest,
    db: Session = Depends(get_db),
    cache: UnitCache = Depends(get_unit_cache),
):
    """Validate a dispense and report any FEFO advisory. Writes nothing."""
    try:
        outcome = dispense_service.preview_dispense(db, cache, data.token, data.quantity)
    except InventoryError as e:
        raise BusinessError.from_inventory_error(e)
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)

    return DispensePreviewResponse(
        daana_id=outcome.unit.daana_id,
        available=outcome.unit.qty_total,
        requested=data.quantity,
        remaining=outcome.remaining,
        advisory=_advisory_response(outcome.advisory) if outcome.advisory else None,
    )


@router.post("", response_model=DispenseResponse)
def dispense(
    data: DispenseRequest,
    db: Session = Depends(get_db),
    cache: UnitCache = Depends(get_unit_cache),
    user_id: str = Depends(get_acting_user_id),
):
    """
    Dispense from a unit.

    409 when an older unit of the same medication is in stock and the
    request did not set confirm_out_of_order. Resend with the flag to proceed.
    """
    try:
        outcome = dispense_service.dispense(
            db,
            cache,
            data.token,
            data.quantity,
            by_user_id=user_id,
            patient_ref=data.patient_ref or None,
            reason_note=data.reason_note or None,
            confirm_out_of_order=data.confirm_out_of_order,
        )
    except InventoryError as e:
        raise BusinessError.from_inventory_error(e)
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)

    if outcome.requires_confirmation:
        advisory = _advisory_response(outcome.advisory)
        raise BusinessError.conflict({
            "code": "fefo_confirmation_required",
            "message": advisory.message,
            "advisory": advisory.model_dump(),
        })

    result = outcome.result
    return DispenseResponse(
        daana_id=result.daana_id,
        dispensed=result.dispensed,
        remaining=result.remaining,
        unit_removed=result.unit_removed,
        transaction_id=result.transaction_id,
        message=result.message,
    )
