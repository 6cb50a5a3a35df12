"""
UNIT DIRECTORY: resolve a typed or scanned token to a unit.

A token is either a bare Daana ID ("UNIT-1700000000000") or the compact JSON
payload printed on the unit label ({"u": "UNIT-...", "g": ..., ...}).
parse_token() turns it into one of two explicit variants; malformed JSON is
never an error, it simply falls back to a plain identifier.

Resolution order:
1. Unit cache (by daana_id)
2. Store query by daana_id
3. Scan flows only: store query by the literal qr_code_value

Store errors propagate to the caller untouched so they stay distinguishable
from "not found".
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Session

from app.core.exceptions import LookupNotFound
from app.models.unit import Unit
from app.schemas.unit import QRPayload, UnitRead
from app.services.unit_cache import UnitCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlainIdentifier:
    identifier: str
    raw: str
    from_json: bool = False  # token was a JSON object without a "u" field


@dataclass(frozen=True)
class StructuredPayload:
    identifier: str
    raw: str
    lot_prefix: Optional[str] = None
    generic: Optional[str] = None
    strength: Optional[str] = None
    form: Optional[str] = None
    expiry: Optional[str] = None
    location: Optional[str] = None

    @property
    def from_json(self) -> bool:
        return True


ParsedToken = Union[PlainIdentifier, StructuredPayload]


def parse_token(raw: str) -> Optional[ParsedToken]:
    """
    Parse a lookup token. Returns None for blank input.

    Examples:
        "UNIT-42"                 -> PlainIdentifier("UNIT-42")
        '{"u":"UNIT-42","g":"X"}' -> StructuredPayload("UNIT-42", generic="X")
        '{"g":"X"}'               -> PlainIdentifier('{"g":"X"}', from_json=True)
        '{not json'               -> PlainIdentifier('{not json')
    """
    if raw is None:
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None

    try:
        data = json.loads(trimmed)
    except ValueError:
        return PlainIdentifier(identifier=trimmed, raw=trimmed)

    if not isinstance(data, dict):
        return PlainIdentifier(identifier=trimmed, raw=trimmed)

    identifier = data.get("u")
    if not isinstance(identifier, str) or not identifier.strip():
        return PlainIdentifier(identifier=trimmed, raw=trimmed, from_json=True)

    # Hints are display-only; tolerate numbers or missing keys
    return StructuredPayload(
        identifier=identifier.strip(),
        raw=trimmed,
        lot_prefix=_hint(data, "l"),
        generic=_hint(data, "g"),
        strength=_hint(data, "s"),
        form=_hint(data, "f"),
        expiry=_hint(data, "x"),
        location=_hint(data, "loc"),
    )


def _hint(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None else str(value)


def build_qr_payload(unit: Unit, location_name: str) -> str:
    """Serialize the label payload in compact form."""
    return QRPayload(
        u=unit.daana_id,
        l=str(unit.lot_id)[:10],
        g=unit.med_generic,
        s=unit.strength,
        f=unit.form or "",
        x=unit.exp_date,
        loc=location_name,
    ).model_dump_json()


def get_unit_row(db: Session, daana_id: str) -> Optional[Unit]:
    return db.query(Unit).filter(Unit.daana_id == daana_id).first()


def lookup_unit(
    db: Session,
    cache: UnitCache,
    raw_token: str,
    scan: bool = False,
) -> Optional[UnitRead]:
    """
    Resolve a token to a unit snapshot.

    Returns None both for blank input and for no match; callers that need
    to tell them apart call parse_token() first, or use resolve_unit().
    """
    token = parse_token(raw_token)
    if token is None:
        return None

    unit = cache.get(token.identifier)
    if unit:
        return unit

    row = get_unit_row(db, token.identifier)
    if row is None and scan:
        logger.debug("Trying QR code value search")
        row = db.query(Unit).filter(Unit.qr_code_value == token.raw).first()

    if row is None:
        logger.info(f"Unit not found for token identifier: {token.identifier}")
        return None

    return UnitRead.model_validate(row)


def resolve_unit(db: Session, cache: UnitCache, raw_token: str, scan: bool = False) -> UnitRead:
    """Like lookup_unit(), but a missing unit is a LookupNotFound."""
    unit = lookup_unit(db, cache, raw_token, scan=scan)
    if unit is None:
        token = parse_token(raw_token)
        raise LookupNotFound(token.identifier if token else "")
    return unit
