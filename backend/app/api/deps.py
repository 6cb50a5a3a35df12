"""FastAPI dependencies: DB session, unit cache and acting user.

Authentication is handled upstream; the acting user's id arrives in the
X-User-Id header and is recorded on every transaction.
"""
from typing import Generator, Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.unit_cache import UnitCache

_unit_cache = UnitCache(ttl_seconds=settings.UNIT_CACHE_TTL_SECONDS)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_unit_cache() -> UnitCache:
    return _unit_cache


def get_acting_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Acting user for audit records. Required on mutating endpoints."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()
