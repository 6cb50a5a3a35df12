from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from app.db.base import Base


class Lot(Base):
    """A donation/receipt batch that one or more units originate from."""
    __tablename__ = "lots"

    id = Column(Integer, primary_key=True, index=True)
    date_received = Column(String(10), nullable=False)  # YYYY-MM-DD
    source_donor = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    received_by_user_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
