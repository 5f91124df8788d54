"""Database module with SQLAlchemy async engine and ORM models."""

from .connection import (
    close_database,
    close_sqlalchemy_engine,
    get_async_database_url,
    get_engine,
    get_session,
    init_database,
    init_sqlalchemy_engine,
)
from .orm import (
    Base,
    CompanyRow,
    CurrencyRow,
    SettingRow,
    TeamCurrencyRow,
    TeamRow,
    TeamStartupRow,
    TeamStockRow,
)


__all__ = [
    "init_sqlalchemy_engine",
    "close_sqlalchemy_engine",
    "get_session",
    "get_engine",
    "get_async_database_url",
    "init_database",
    "close_database",
    "Base",
    "CompanyRow",
    "CurrencyRow",
    "TeamRow",
    "TeamStockRow",
    "TeamCurrencyRow",
    "TeamStartupRow",
    "SettingRow",
]
