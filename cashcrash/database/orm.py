"""SQLAlchemy ORM models for Cash or Crash.

This module defines all database tables using SQLAlchemy 2.0 ORM style.
Uses async support via asyncpg driver.

Ledger rows reference instruments by id only, without a foreign key, so a
deleted company or currency leaves orphaned rows behind instead of blocking
the delete. Team ids cascade.

Usage:
    from cashcrash.database.orm import TeamRow
    from cashcrash.database.connection import get_session

    async with get_session() as session:
        team = await session.get(TeamRow, 1)
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


# Naming convention for constraints and indexes
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models with naming convention."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# =============================================================================
# MARKET
# =============================================================================


class CompanyRow(Base):
    """Listed company with a buy/sell price pair."""
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sell_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    dividend: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    logo_url: Mapped[str | None] = mapped_column(Text)


class CurrencyRow(Base):
    """Currency quoted against the base currency."""
    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    sell_rate: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(Text)


# =============================================================================
# TEAMS & LEDGERS
# =============================================================================


class TeamRow(Base):
    """Trading team."""
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    cash_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("50000.00")
    )
    access_code: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    profile_pic_url: Mapped[str | None] = mapped_column(Text)

    # Relationships
    stock_rows: Mapped[list[TeamStockRow]] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    currency_rows: Mapped[list[TeamCurrencyRow]] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    startups: Mapped[list[TeamStartupRow]] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )


class TeamStockRow(Base):
    """Append-only share ledger row."""
    __tablename__ = "team_stocks"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[int] = mapped_column(Integer, nullable=False)
    shares: Mapped[int] = mapped_column(Integer, nullable=False)

    team: Mapped[TeamRow] = relationship(back_populates="stock_rows")

    __table_args__ = (
        Index("idx_team_stocks_team_company", "team_id", "company_id"),
    )


class TeamCurrencyRow(Base):
    """Append-only currency ledger row."""
    __tablename__ = "team_currencies"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    currency_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    team: Mapped[TeamRow] = relationship(back_populates="currency_rows")

    __table_args__ = (
        Index("idx_team_currencies_team_currency", "team_id", "currency_id"),
    )


class TeamStartupRow(Base):
    """Startup investment; one per team, enforced by the storage layer."""
    __tablename__ = "team_startups"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    industry: Mapped[str] = mapped_column(Text, nullable=False)
    risk_level: Mapped[str] = mapped_column(Text, nullable=False)

    team: Mapped[TeamRow] = relationship(back_populates="startups")

    __table_args__ = (
        Index("idx_team_startups_team", "team_id"),
    )


# =============================================================================
# SETTINGS
# =============================================================================


class SettingRow(Base):
    """Persisted key-value setting (admin password)."""
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
