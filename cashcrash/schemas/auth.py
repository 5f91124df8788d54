"""Auth-related schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field

from cashcrash.domain import CamelModel
from cashcrash.schemas.teams import TeamResponse


class TeamLoginRequest(CamelModel):
    """Team login with its access code."""

    access_code: str = Field(..., min_length=1, description="Team access code")


class AdminLoginRequest(CamelModel):
    """Admin login.

    The dashboard posts ``{"code": ...}``; ``{"password": ...}`` is accepted too.
    """

    password: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("password", "code"),
        description="Admin password",
    )


class TeamLoginResponse(CamelModel):
    team: TeamResponse


class AdminLoginResponse(CamelModel):
    success: bool = True


class SessionResponse(CamelModel):
    """Current session."""

    authenticated: bool = Field(..., description="Whether a valid session cookie was sent")
    role: Optional[str] = Field(default=None, description="team or admin")
    team_id: Optional[int] = None
