"""API dependencies for sessions, role checks and storage access."""

from __future__ import annotations

from fastapi import Cookie, Depends

from cashcrash.core.exceptions import AuthenticationError, AuthorizationError
from cashcrash.core.logging import bind_session, get_logger
from cashcrash.core.security import SessionData, decode_session_token
from cashcrash.repositories import Storage
from cashcrash.repositories import get_storage as _get_storage


logger = get_logger("api.dependencies")


__all__ = [
    "ensure_team_access",
    "get_session_data",
    "get_storage",
    "is_admin_session",
    "require_admin",
    "require_session",
]


def get_storage() -> Storage:
    """Storage backend for the current process."""
    return _get_storage()


async def get_session_data(
    session: str | None = Cookie(default=None),
) -> SessionData | None:
    """
    Decode the session cookie (optional).

    Returns None when the cookie is missing, expired or tampered with.
    """
    if not session:
        return None
    try:
        session_data = decode_session_token(session)
    except AuthenticationError as e:
        logger.debug(f"Ignoring session cookie: {e.error_code}")
        return None
    bind_session(session_data.role, session_data.team_id)
    return session_data


async def require_session(
    session_data: SessionData | None = Depends(get_session_data),
) -> SessionData:
    """Require a team or admin session."""
    if session_data is None:
        raise AuthenticationError(message="Authentication required", error_code="NOT_AUTHENTICATED")
    return session_data


async def require_admin(
    session_data: SessionData = Depends(require_session),
) -> SessionData:
    """Require an admin session; a team session is rejected like a missing one."""
    if not session_data.is_admin:
        raise AuthenticationError(
            message="Admin authentication required",
            error_code="ADMIN_REQUIRED",
        )
    return session_data


def is_admin_session(session_data: SessionData | None) -> bool:
    return session_data is not None and session_data.is_admin


def ensure_team_access(session_data: SessionData, team_id: int) -> None:
    """Allow admins and the team itself; anyone else gets a 403."""
    if session_data.is_admin or session_data.team_id == team_id:
        return
    raise AuthorizationError(
        message="You can only trade for your own team",
        error_code="TEAM_MISMATCH",
    )
