"""
Read-through snapshot of the units table.

Lookup and FEFO checks read from this cache instead of scanning the table on
every request. The service layer owns it: every write it performs calls
invalidate(), and sync() reloads it once it is invalidated or older than the
configured TTL. Snapshots are detached UnitRead models, never ORM rows.
"""
import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.unit import Unit
from app.schemas.unit import UnitRead

logger = logging.getLogger(__name__)


class UnitCache:
    def __init__(self, ttl_seconds: int = 30):
        self.ttl_seconds = ttl_seconds
        self._units: Dict[str, UnitRead] = {}
        self._loaded_at: Optional[float] = None
        self._lock = threading.Lock()

    def is_stale(self) -> bool:
        if self._loaded_at is None:
            return True
        return time.monotonic() - self._loaded_at > self.ttl_seconds

    def refresh(self, db: Session) -> None:
        rows = db.query(Unit).all()
        units = {row.daana_id: UnitRead.model_validate(row) for row in rows}
        with self._lock:
            self._units = units
            self._loaded_at = time.monotonic()
        logger.debug(f"Unit cache refreshed: {len(units)} units")

    def sync(self, db: Session) -> None:
        """Reload when invalidated or past the TTL."""
        if self.is_stale():
            self.refresh(db)

    def invalidate(self) -> None:
        with self._lock:
            self._loaded_at = None

    def get(self, daana_id: str) -> Optional[UnitRead]:
        return self._units.get(daana_id)

    def filter(self, predicate: Callable[[UnitRead], bool]) -> List[UnitRead]:
        return [u for u in self._units.values() if predicate(u)]

    def __len__(self) -> int:
        return len(self._units)
