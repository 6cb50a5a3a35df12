from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class TransactionRecord(BaseModel):
    id: int
    daana_id: str
    type: str
    qty: Optional[int] = None
    by_user_id: str
    patient_ref: Optional[str] = None
    reason_note: Optional[str] = None
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True
