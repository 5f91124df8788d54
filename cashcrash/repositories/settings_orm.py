"""Key-value settings repository using SQLAlchemy ORM.

Used to persist the admin password. Without ``DATABASE_URL`` every call is a
no-op so the caller can fall back to process memory.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from cashcrash.core.config import settings
from cashcrash.core.logging import get_logger
from cashcrash.database.connection import get_session
from cashcrash.database.orm import SettingRow


logger = get_logger("repositories.settings_orm")


async def get_setting(key: str) -> str | None:
    """Read a persisted setting; None when absent or the database is unavailable."""
    if not settings.has_database:
        return None
    try:
        async with get_session() as session:
            result = await session.execute(select(SettingRow.value).where(SettingRow.key == key))
            return result.scalar_one_or_none()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Failed to read setting {key}: {e}")
        return None


async def set_setting(key: str, value: str) -> bool:
    """Upsert a setting; False when it could not be persisted."""
    if not settings.has_database:
        return False
    try:
        async with get_session() as session:
            result = await session.execute(select(SettingRow).where(SettingRow.key == key))
            row = result.scalar_one_or_none()
            if row is None:
                session.add(SettingRow(key=key, value=value))
            else:
                row.value = value
            await session.commit()
            return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Failed to persist setting {key}: {e}")
        return False
