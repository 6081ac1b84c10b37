"""Login sessions.

A successful login hands the browser an HTTP-only cookie holding a signed
JWT. The only identity it carries is the integer user id, which route
dependencies hand to the service layer.

## Claims

```json
{"sub": "42", "iat": 1709283600, "exp": 1709888400, "type": "session"}
```

`sub` is a string because JWT requires it; `type` keeps other tokens signed
with the same key from being accepted as sessions.

## Cookie

Named by SESSION_COOKIE_NAME, lives SESSION_MAX_AGE_SECONDS, SameSite=Lax,
and Secure only when ENVIRONMENT=production.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Response
from jose import JWTError, jwt

from weather_hub.config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_TYPE = "session"

_REQUIRED_CLAIMS = {"require_sub": True, "require_iat": True, "require_exp": True}


@dataclass(frozen=True)
class Session:
    """A verified login session."""

    user_id: int
    issued_at: datetime
    expires_at: datetime

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at


def create_session_token(user_id: int, lifetime: timedelta | None = None) -> str:
    """Sign a session token for ``user_id``.

    ``lifetime`` defaults to SESSION_MAX_AGE_SECONDS.
    """
    settings = get_settings()
    if lifetime is None:
        lifetime = timedelta(seconds=settings.session_max_age_seconds)

    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
        "type": TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def verify_session_token(token: str) -> Session | None:
    """Return the session a token stands for, or None if it is not valid.

    Bad signatures, expired tokens, other token types and malformed claims
    all come back as None.
    """
    try:
        claims = jwt.decode(
            token,
            get_settings().secret_key,
            algorithms=[ALGORITHM],
            options=_REQUIRED_CLAIMS,
        )
    except JWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None

    if claims.get("type") != TOKEN_TYPE:
        logger.debug(f"Rejected token of type {claims.get('type')!r}")
        return None

    try:
        session = Session(
            user_id=int(claims["sub"]),
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    except (KeyError, ValueError, TypeError) as e:
        logger.debug(f"Malformed session claims: {e}")
        return None

    return None if session.is_expired else session


def set_session_cookie(response: Response, user_id: int) -> None:
    """Start a session for ``user_id`` on the outgoing response."""
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)
