"""Session tokens for team and admin logins."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

import jwt
from pydantic import BaseModel

from .config import settings
from .exceptions import AuthenticationError


# JWT Configuration
JWT_ALGORITHM = "HS256"
JWT_ISSUER = "cashcrash"
JWT_AUDIENCE = "cashcrash-api"

SESSION_COOKIE = "session"

Role = Literal["team", "admin"]


class SessionData(BaseModel):
    """Decoded session token."""

    role: Role
    team_id: Optional[int] = None
    exp: datetime
    iat: datetime
    jti: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_session_token(
    role: Role,
    team_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed session token."""
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(hours=settings.session_ttl_hours))

    payload = {
        "sub": role if team_id is None else f"team:{team_id}",
        "role": role,
        "team_id": team_id,
        "exp": expires,
        "iat": now,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
    }

    return jwt.encode(payload, settings.session_secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str) -> SessionData:
    """Decode and validate a session token."""
    try:
        payload = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            audience=JWT_AUDIENCE,
            options={
                "require": ["exp", "iat", "sub", "iss", "aud", "jti"],
            },
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Session has expired", error_code="SESSION_EXPIRED")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid session", error_code="INVALID_SESSION")

    role = payload.get("role")
    if role not in ("team", "admin"):
        raise AuthenticationError(message="Invalid session", error_code="INVALID_SESSION")
    if role == "team" and payload.get("team_id") is None:
        raise AuthenticationError(message="Invalid session", error_code="INVALID_SESSION")

    return SessionData(
        role=role,
        team_id=payload.get("team_id"),
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        jti=payload["jti"],
    )


def credentials_match(submitted: str, expected: str) -> bool:
    """Exact string comparison in constant time."""
    return secrets.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))
