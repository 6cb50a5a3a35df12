"""
Transaction: immutable audit record of one inventory-affecting event.
Keyed by the unit's daana_id (not its row id) so the record outlives the unit.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from app.db.base import Base

TRANSACTION_TYPES = ("check_in", "check_out", "adjust", "move", "remove")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    daana_id = Column(String(64), index=True, nullable=False)
    type = Column(String(16), nullable=False)  # check_in | check_out | adjust | move | remove
    qty = Column(Integer, nullable=True)
    by_user_id = Column(String(64), nullable=False)
    patient_ref = Column(String(64), nullable=True)  # pseudonymous code only, no PHI
    reason_note = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)
