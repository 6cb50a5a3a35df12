from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date


class UnitRead(BaseModel):
    """Detached snapshot of a unit row. Safe to keep outside a DB session."""
    id: int
    daana_id: str
    lot_id: int
    med_generic: str
    med_brand: Optional[str] = None
    strength: str
    form: Optional[str] = None
    ndc: Optional[str] = None
    qty_total: int
    exp_date: str
    location_id: int
    location_name: Optional[str] = None
    status: str
    qr_code_value: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnitCheckIn(BaseModel):
    lot_id: int
    med_generic: str = Field(..., min_length=1)
    med_brand: Optional[str] = None
    strength: str = Field(..., min_length=1)
    form: Optional[str] = None
    ndc: Optional[str] = None
    qty_total: int = Field(..., gt=0)
    exp_date: date
    location_id: int


class QRPayload(BaseModel):
    """Compact label payload. Only `u` is authoritative for lookup."""
    u: str
    l: Optional[str] = None
    g: Optional[str] = None
    s: Optional[str] = None
    f: Optional[str] = None
    x: Optional[str] = None
    loc: Optional[str] = None


class LookupResponse(BaseModel):
    found: bool
    ignored: bool = False
    unit: Optional[UnitRead] = None
