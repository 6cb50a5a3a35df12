from pydantic import BaseModel


class StatusStats(BaseModel):
    in_stock: int
    expiring_soon: int
    checked_out_today: int


class LocationRecord(BaseModel):
    id: int
    name: str
    temp_type: str
    is_active: bool

    class Config:
        from_attributes = True


class LotRecord(BaseModel):
    id: int
    date_received: str
    source_donor: str
    notes: str | None = None

    class Config:
        from_attributes = True
