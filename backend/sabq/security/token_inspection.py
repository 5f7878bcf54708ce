import uuid
from typing import Any

import jwt

from ..config import settings


class InvalidTokenError(Exception):
    """Raised when a token cannot be parsed or does not name a user."""


class ExpiredTokenError(Exception):
    """Raised when a token has expired."""


def _decode(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError from exc


def validate_access_token(token: str) -> uuid.UUID:
    """Return the id of the user a bearer token was issued to.

    Raises:
        ExpiredTokenError: If the token is past its ``exp``.
        InvalidTokenError: If the signature is bad or ``sub`` is not a user id.
    """
    subject = _decode(token)["sub"]
    if not isinstance(subject, str):
        raise InvalidTokenError("Token subject must be a string")
    try:
        return uuid.UUID(subject)
    except ValueError as exc:
        raise InvalidTokenError("Token subject is not a user id") from exc
