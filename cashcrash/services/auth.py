"""Team and admin authentication plus credential management."""

from __future__ import annotations

from cashcrash.core.config import settings
from cashcrash.core.exceptions import AuthenticationError, BadRequestError, NotFoundError
from cashcrash.core.logging import get_logger
from cashcrash.core.security import credentials_match
from cashcrash.domain import Team
from cashcrash.repositories.storage import Storage


logger = get_logger("services.auth")

ADMIN_PASSWORD_KEY = "admin_password"

MIN_ACCESS_CODE_LENGTH = 4
MIN_ADMIN_PASSWORD_LENGTH = 6
MIN_TEAM_NAME_LENGTH = 2


async def authenticate_team(storage: Storage, access_code: str) -> Team:
    """Resolve a team by its exact access code."""
    team = await storage.find_team_by_access_code(access_code) if access_code else None
    if team is None:
        logger.info("Team login rejected")
        raise AuthenticationError(message="Invalid access code", error_code="INVALID_ACCESS_CODE")
    logger.info(f"Team {team.id} logged in")
    return team


async def current_admin_password(storage: Storage) -> str:
    stored = await storage.get_setting(ADMIN_PASSWORD_KEY)
    return stored if stored is not None else settings.admin_password


async def authenticate_admin(storage: Storage, password: str) -> None:
    expected = await current_admin_password(storage)
    if not password or not credentials_match(password, expected):
        logger.info("Admin login rejected")
        raise AuthenticationError(message="Invalid admin password", error_code="INVALID_PASSWORD")
    logger.info("Admin logged in")


async def update_team_access_code(storage: Storage, team_id: int, new_access_code: str) -> Team:
    if len(new_access_code) < MIN_ACCESS_CODE_LENGTH:
        raise BadRequestError(
            message=f"Access code must be at least {MIN_ACCESS_CODE_LENGTH} characters long"
        )
    if await storage.get_team(team_id) is None:
        raise NotFoundError(message="Team not found")
    holder = await storage.find_team_by_access_code(new_access_code)
    if holder is not None and holder.id != team_id:
        raise BadRequestError(
            message="Access code is already in use", error_code="ACCESS_CODE_TAKEN"
        )
    team = await storage.update_team(team_id, {"access_code": new_access_code})
    logger.info(f"Access code updated for team {team_id}")
    return team


async def update_admin_password(storage: Storage, new_password: str) -> bool:
    """Store a new admin password; returns whether it was persisted to the database."""
    if len(new_password) < MIN_ADMIN_PASSWORD_LENGTH:
        raise BadRequestError(
            message=f"Password must be at least {MIN_ADMIN_PASSWORD_LENGTH} characters long"
        )
    persisted = await storage.set_setting(ADMIN_PASSWORD_KEY, new_password)
    if persisted:
        logger.info("Admin password updated")
    else:
        logger.warning("Admin password updated in memory only; it will reset on restart")
    return persisted


async def update_team_name(storage: Storage, team_id: int, new_name: str) -> Team:
    name = new_name.strip()
    if len(name) < MIN_TEAM_NAME_LENGTH:
        raise BadRequestError(
            message=f"Team name must be at least {MIN_TEAM_NAME_LENGTH} characters long"
        )
    if await storage.get_team(team_id) is None:
        raise NotFoundError(message="Team not found")
    team = await storage.update_team(team_id, {"name": name})
    logger.info(f"Team {team_id} renamed to {name}")
    return team
