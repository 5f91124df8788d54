"""Authentication routes: team and admin login, logout, current session."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from cashcrash.api.dependencies import get_session_data, get_storage
from cashcrash.core.config import settings
from cashcrash.core.security import SESSION_COOKIE, Role, SessionData, create_session_token
from cashcrash.repositories import Storage
from cashcrash.schemas.auth import (
    AdminLoginRequest,
    AdminLoginResponse,
    SessionResponse,
    TeamLoginRequest,
    TeamLoginResponse,
)
from cashcrash.schemas.common import SuccessResponse
from cashcrash.schemas.teams import TeamResponse
from cashcrash.services import auth as auth_service


router = APIRouter()


def _set_session_cookie(response: Response, role: Role, team_id: int | None = None) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=create_session_token(role, team_id=team_id),
        httponly=True,
        secure=settings.https_enabled,
        samesite="lax",
        domain=settings.domain,
        max_age=settings.session_ttl_hours * 3600,
    )


@router.post(
    "/team",
    response_model=TeamLoginResponse,
    summary="Team login",
    responses={401: {"description": "Invalid access code"}},
)
async def team_login(
    payload: TeamLoginRequest,
    response: Response,
    storage: Storage = Depends(get_storage),
) -> TeamLoginResponse:
    """Log a team in with its access code and set the session cookie."""
    team = await auth_service.authenticate_team(storage, payload.access_code)
    _set_session_cookie(response, "team", team.id)
    return TeamLoginResponse(team=TeamResponse.from_team(team))


@router.post(
    "/admin",
    response_model=AdminLoginResponse,
    summary="Admin login",
    responses={401: {"description": "Invalid admin password"}},
)
async def admin_login(
    payload: AdminLoginRequest,
    response: Response,
    storage: Storage = Depends(get_storage),
) -> AdminLoginResponse:
    await auth_service.authenticate_admin(storage, payload.password)
    _set_session_cookie(response, "admin")
    return AdminLoginResponse(success=True)


@router.post("/logout", response_model=SuccessResponse, summary="Logout")
async def logout(response: Response) -> SuccessResponse:
    response.delete_cookie(key=SESSION_COOKIE, domain=settings.domain, path="/")
    return SuccessResponse(success=True)


@router.get("/me", response_model=SessionResponse, summary="Current session")
async def me(
    session_data: SessionData | None = Depends(get_session_data),
) -> SessionResponse:
    if session_data is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        role=session_data.role,
        team_id=session_data.team_id,
    )
