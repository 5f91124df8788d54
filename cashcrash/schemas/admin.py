"""Admin credential management schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from cashcrash.domain import CamelModel
from cashcrash.schemas.teams import TeamResponse


class UpdateTeamPasswordRequest(CamelModel):
    team_id: int
    new_access_code: str = Field(..., min_length=1)


class UpdateAdminPasswordRequest(CamelModel):
    new_password: str = Field(..., min_length=1)


class UpdateTeamNameRequest(CamelModel):
    team_id: int
    new_name: str = Field(..., min_length=1)


class CredentialUpdateResponse(CamelModel):
    success: bool = True
    message: str
    team: Optional[TeamResponse] = None
    persisted: Optional[bool] = Field(
        default=None, description="Whether the admin password survives a restart"
    )
