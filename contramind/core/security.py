"""Security primitives and authentication helpers."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from contramind.core.config import Settings, settings as default_settings
from contramind.services.users import Identity


class InvalidTokenError(Exception):
    """Raised when a bearer token is missing a subject, expired or badly signed."""


def decode_access_token(token: str, settings: Settings = default_settings) -> Identity:
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    open_id = claims.get("sub")
    if not open_id or not isinstance(open_id, str):
        raise InvalidTokenError("Token has no subject")
    return Identity(
        open_id=open_id,
        name=claims.get("name"),
        email=claims.get("email"),
        login_method=claims.get("login_method"),
    )


def create_access_token(
    open_id: str,
    *,
    expires_in: timedelta = timedelta(hours=12),
    settings: Settings = default_settings,
    **claims: Any,
) -> str:
    """Mint a token for ``open_id``; used by the login portal bridge and tests."""
    payload = {"sub": open_id, "exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
