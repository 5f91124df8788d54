"""Data access layer.

- storage: abstract Storage interface plus the portfolio read path
- memory: dict-backed MemoryStorage (default backend)
- sql: SQLAlchemy ORM SqlStorage (STORAGE_BACKEND=postgres)
- settings_orm: key-value settings table (admin password persistence)
"""

from __future__ import annotations

from cashcrash.core.config import settings

from . import settings_orm
from .memory import MemoryStorage
from .sql import SqlStorage
from .storage import Storage


_storage: Storage | None = None


def create_storage() -> Storage:
    """Build the backend selected by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "postgres":
        return SqlStorage()
    return MemoryStorage()


def get_storage() -> Storage:
    """Process-wide storage instance."""
    global _storage
    if _storage is None:
        _storage = create_storage()
    return _storage


def set_storage(storage: Storage | None) -> None:
    """Replace the process-wide storage (used by tests)."""
    global _storage
    _storage = storage


__all__ = [
    "MemoryStorage",
    "SqlStorage",
    "Storage",
    "create_storage",
    "get_storage",
    "set_storage",
    "settings_orm",
]
