"""API module with routers and dependencies."""

from .app import create_api_app
from .dependencies import (
    get_session_data,
    get_storage,
    require_admin,
    require_session,
)


__all__ = [
    "create_api_app",
    "get_session_data",
    "get_storage",
    "require_admin",
    "require_session",
]
