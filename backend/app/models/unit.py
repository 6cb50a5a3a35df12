from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

DISPENSABLE_STATUSES = ("in_stock", "partial")
TERMINAL_STATUSES = ("dispensed", "discarded", "expired", "quarantined")
UNIT_STATUSES = DISPENSABLE_STATUSES + TERMINAL_STATUSES


class Unit(Base):
    """
    One lot-tracked batch of a medication at a location.

    STOCK INVARIANT:
    - qty_total is the remaining available quantity, never negative
    - A unit that reaches 0 is deleted, never kept as a zero-quantity row
    - Status flow: in_stock -> partial (one-way); terminal statuses are
      set by administrative action only

    `version` is the optimistic-concurrency counter: every UPDATE/DELETE
    is issued as "WHERE id = ? AND version = ?".
    """
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    daana_id = Column(String(64), unique=True, index=True, nullable=False)
    lot_id = Column(Integer, ForeignKey("lots.id"), nullable=False)

    med_generic = Column(String(255), nullable=False)
    med_brand = Column(String(255), nullable=True)
    strength = Column(String(64), nullable=False)
    form = Column(String(64), nullable=True)
    ndc = Column(String(32), nullable=True)

    qty_total = Column(Integer, nullable=False, default=0)
    exp_date = Column(String(10), nullable=False)  # YYYY-MM-DD, compared lexicographically

    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    location_name = Column(String(255), nullable=True)  # cached display name

    status = Column(String(32), nullable=False, default="in_stock")
    qr_code_value = Column(Text, nullable=True)  # compact JSON payload printed on the label

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    version = Column(Integer, nullable=False, default=1)

    lot = relationship("Lot", backref="units")
    location = relationship("Location", backref="units")

    __mapper_args__ = {"version_id_col": version}
