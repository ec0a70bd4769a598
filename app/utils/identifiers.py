"""
Reader / book / record identifiers.

An identifier is either a structured reference (a UUID) or an opaque string such as a
reader code ("r10001"). UUIDs can reach us as `uuid.UUID` objects or as strings in several
spellings (32-hex, hyphenated, braced, urn:uuid:), and older rows were persisted with the
hyphenated spelling. New rows are always written in canonical form (`normalize_id`); reads go
through `match_id` so legacy spellings still match until `flask ids normalize` rewrites them.
"""
import uuid

from sqlalchemy import or_

from app.errors import ValidationError


def _as_uuid(raw):
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except (ValueError, AttributeError):
        return None


def new_id() -> str:
    return uuid.uuid4().hex


def normalize_id(raw) -> str:
    """Canonical storage/comparison form: lowercase 32-hex for UUIDs, stripped string otherwise."""
    if raw is None:
        raise ValidationError("Identifier is required")

    u = _as_uuid(raw)
    if u is not None:
        return u.hex

    value = str(raw).strip()
    if not value:
        raise ValidationError("Identifier is required")
    return value


def id_variants(raw) -> list:
    """Every spelling under which `raw` may have been persisted."""
    canonical = normalize_id(raw)
    u = _as_uuid(canonical)
    if u is None:
        return [canonical]
    return [u.hex, str(u)]


def match_id(column, raw):
    """`column = canonical OR column = legacy-spelling ...` predicate."""
    return or_(*[column == v for v in id_variants(raw)])


def is_legacy(value) -> bool:
    return value is not None and normalize_id(value) != value
