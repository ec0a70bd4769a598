from collections import namedtuple

from flask_jwt_extended import get_jwt_identity, get_jwt

READER = "Reader"
ADMINISTRATOR = "Administrator"

Identity = namedtuple("Identity", ["reader_id", "role", "name"])


def current_identity() -> Identity:
    """
    Authenticated reader from the JWT: identity is the reader id,
    `role` and `name` come from additional claims.
    """
    claims = get_jwt() or {}
    return Identity(
        reader_id=str(get_jwt_identity()),
        role=claims.get("role", READER),
        name=claims.get("name") or "",
    )
