from pydantic import BaseModel, Field
from typing import Any, Optional


class DispenseRequest(BaseModel):
    token: str = Field(..., description="Daana ID or scanned QR payload")
    # Passed through uncoerced: the dispense validator owns the quantity
    # rules, so true / "4" / 2.5 / 0 all come back as InvalidQuantity
    quantity: Any = Field(..., description="Positive whole number of items")
    patient_ref: Optional[str] = Field(None, max_length=64, description="Pseudonymous code, no PHI")
    reason_note: Optional[str] = None
    confirm_out_of_order: bool = False


class FefoAdvisoryResponse(BaseModel):
    daana_id: str
    exp_date: str
    older_daana_id: str
    older_exp_date: str
    message: str


class DispensePreviewResponse(BaseModel):
    daana_id: str
    available: int
    requested: int
    remaining: int
    advisory: Optional[FefoAdvisoryResponse] = None


class DispenseResponse(BaseModel):
    daana_id: str
    dispensed: int
    remaining: int
    unit_removed: bool
    transaction_id: int
    message: str
