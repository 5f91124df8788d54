"""PostgreSQL storage backend using SQLAlchemy ORM.

Selected with ``STORAGE_BACKEND=postgres``. Every settlement runs in one
transaction that locks the team row with ``SELECT ... FOR UPDATE`` before
reading the balance and the ledger.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cashcrash.core.exceptions import (
    BadRequestError,
    ConflictError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    NotFoundError,
)
from cashcrash.core.logging import get_logger
from cashcrash.database.connection import close_database, get_session, init_database
from cashcrash.database.orm import (
    CompanyRow,
    CurrencyRow,
    TeamCurrencyRow,
    TeamRow,
    TeamStartupRow,
    TeamStockRow,
)
from cashcrash.domain import (
    AMOUNT_SCALE,
    CASH_SCALE,
    MAX_CASH,
    Company,
    Currency,
    Settlement,
    Team,
    TeamCurrency,
    TeamStartup,
    TeamStock,
    quantize,
)
from cashcrash.repositories import settings_orm
from cashcrash.repositories.storage import Storage


logger = get_logger("repositories.sql")


def _apply(row: Any, changes: dict[str, Any], protected: tuple[str, ...] = ("id",)) -> None:
    for key, value in changes.items():
        if key in protected:
            continue
        setattr(row, key, value)


async def _commit(session: AsyncSession, conflict_message: str) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Uniqueness violation: {e.orig}")
        raise ConflictError(message=conflict_message)


async def _lock_team(session: AsyncSession, team_id: int) -> TeamRow:
    result = await session.execute(
        select(TeamRow).where(TeamRow.id == team_id).with_for_update()
    )
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFoundError(message="Team not found")
    return team


def _apply_cash(team: TeamRow, cash_delta: Decimal, enforce_balance: bool) -> None:
    new_balance = quantize(team.cash_balance + cash_delta, CASH_SCALE)
    if abs(new_balance) > MAX_CASH:
        raise BadRequestError(message="Cash balance out of range", error_code="VALUE_OUT_OF_RANGE")
    if enforce_balance and new_balance < 0:
        raise InsufficientFundsError()
    team.cash_balance = new_balance


class SqlStorage(Storage):
    """Store backed by PostgreSQL tables."""

    def __init__(self) -> None:
        # Settings whose write to the settings table failed
        self._unpersisted: dict[str, str] = {}

    async def initialize(self) -> None:
        await init_database()

    async def close(self) -> None:
        await close_database()

    # Companies

    async def list_companies(self) -> list[Company]:
        async with get_session() as session:
            result = await session.execute(select(CompanyRow).order_by(CompanyRow.id))
            return [Company.model_validate(row) for row in result.scalars().all()]

    async def get_company(self, company_id: int) -> Company | None:
        async with get_session() as session:
            row = await session.get(CompanyRow, company_id)
            return Company.model_validate(row) if row else None

    async def create_company(
        self,
        *,
        name: str,
        symbol: str,
        price: Decimal,
        sell_price: Decimal,
        dividend: Decimal = Decimal("0.00"),
        description: str = "",
        logo_url: str | None = None,
    ) -> Company:
        async with get_session() as session:
            row = CompanyRow(
                name=name,
                symbol=symbol,
                price=price,
                sell_price=sell_price,
                dividend=dividend,
                description=description,
                logo_url=logo_url,
            )
            session.add(row)
            await _commit(session, f"Company symbol {symbol} already exists")
            return Company.model_validate(row)

    async def update_company(self, company_id: int, changes: dict[str, Any]) -> Company:
        async with get_session() as session:
            row = await session.get(CompanyRow, company_id)
            if row is None:
                raise NotFoundError(message="Company not found")
            _apply(row, changes)
            await _commit(session, "Company symbol already exists")
            return Company.model_validate(row)

    async def delete_company(self, company_id: int) -> bool:
        async with get_session() as session:
            result = await session.execute(delete(CompanyRow).where(CompanyRow.id == company_id))
            await session.commit()
            return result.rowcount > 0

    # Currencies

    async def list_currencies(self) -> list[Currency]:
        async with get_session() as session:
            result = await session.execute(select(CurrencyRow).order_by(CurrencyRow.id))
            return [Currency.model_validate(row) for row in result.scalars().all()]

    async def get_currency(self, currency_id: int) -> Currency | None:
        async with get_session() as session:
            row = await session.get(CurrencyRow, currency_id)
            return Currency.model_validate(row) if row else None

    async def create_currency(
        self,
        *,
        name: str,
        code: str,
        rate: Decimal,
        sell_rate: Decimal,
        logo_url: str | None = None,
    ) -> Currency:
        async with get_session() as session:
            row = CurrencyRow(
                name=name, code=code, rate=rate, sell_rate=sell_rate, logo_url=logo_url
            )
            session.add(row)
            await _commit(session, f"Currency code {code} already exists")
            return Currency.model_validate(row)

    async def update_currency(self, currency_id: int, changes: dict[str, Any]) -> Currency:
        async with get_session() as session:
            row = await session.get(CurrencyRow, currency_id)
            if row is None:
                raise NotFoundError(message="Currency not found")
            _apply(row, changes)
            await _commit(session, "Currency code already exists")
            return Currency.model_validate(row)

    async def delete_currency(self, currency_id: int) -> bool:
        async with get_session() as session:
            result = await session.execute(
                delete(CurrencyRow).where(CurrencyRow.id == currency_id)
            )
            await session.commit()
            return result.rowcount > 0

    # Teams

    async def list_teams(self) -> list[Team]:
        async with get_session() as session:
            result = await session.execute(select(TeamRow).order_by(TeamRow.id))
            return [Team.model_validate(row) for row in result.scalars().all()]

    async def get_team(self, team_id: int) -> Team | None:
        async with get_session() as session:
            row = await session.get(TeamRow, team_id)
            return Team.model_validate(row) if row else None

    async def find_team_by_access_code(self, access_code: str) -> Team | None:
        async with get_session() as session:
            result = await session.execute(
                select(TeamRow).where(TeamRow.access_code == access_code)
            )
            row = result.scalar_one_or_none()
            return Team.model_validate(row) if row else None

    async def create_team(
        self,
        *,
        name: str,
        access_code: str,
        cash_balance: Decimal,
        profile_pic_url: str | None = None,
    ) -> Team:
        async with get_session() as session:
            row = TeamRow(
                name=name,
                access_code=access_code,
                cash_balance=quantize(cash_balance, CASH_SCALE),
                profile_pic_url=profile_pic_url,
            )
            session.add(row)
            await _commit(session, "Team name or access code already exists")
            return Team.model_validate(row)

    async def update_team(self, team_id: int, changes: dict[str, Any]) -> Team:
        async with get_session() as session:
            row = await _lock_team(session, team_id)
            _apply(row, changes)
            await _commit(session, "Team name or access code already exists")
            return Team.model_validate(row)

    async def delete_team(self, team_id: int) -> bool:
        async with get_session() as session:
            row = await session.get(TeamRow, team_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True

    # Ledgers

    async def list_stock_rows(self, team_id: int) -> list[TeamStock]:
        async with get_session() as session:
            result = await session.execute(
                select(TeamStockRow)
                .where(TeamStockRow.team_id == team_id)
                .order_by(TeamStockRow.id)
            )
            return [TeamStock.model_validate(row) for row in result.scalars().all()]

    async def list_currency_rows(self, team_id: int) -> list[TeamCurrency]:
        async with get_session() as session:
            result = await session.execute(
                select(TeamCurrencyRow)
                .where(TeamCurrencyRow.team_id == team_id)
                .order_by(TeamCurrencyRow.id)
            )
            return [TeamCurrency.model_validate(row) for row in result.scalars().all()]

    async def settle_stock(
        self,
        team_id: int,
        company_id: int,
        shares: int,
        cash_delta: Decimal,
        *,
        enforce_balance: bool,
    ) -> Settlement:
        async with get_session() as session:
            team = await _lock_team(session, team_id)
            if shares < 0:
                held = await session.scalar(
                    select(func.coalesce(func.sum(TeamStockRow.shares), 0)).where(
                        TeamStockRow.team_id == team_id,
                        TeamStockRow.company_id == company_id,
                    )
                )
                if max(held, 0) < -shares:
                    raise InsufficientHoldingsError(message="Insufficient shares")
            _apply_cash(team, cash_delta, enforce_balance)
            entry = TeamStockRow(team_id=team_id, company_id=company_id, shares=shares)
            session.add(entry)
            await session.commit()
            return Settlement(
                team=Team.model_validate(team),
                cash_delta=cash_delta,
                entry=TeamStock.model_validate(entry),
            )

    async def settle_currency(
        self,
        team_id: int,
        currency_id: int,
        amount: Decimal,
        cash_delta: Decimal,
        *,
        enforce_balance: bool,
    ) -> Settlement:
        amount = quantize(amount, AMOUNT_SCALE)
        async with get_session() as session:
            team = await _lock_team(session, team_id)
            if amount < 0:
                held = await session.scalar(
                    select(func.coalesce(func.sum(TeamCurrencyRow.amount), 0)).where(
                        TeamCurrencyRow.team_id == team_id,
                        TeamCurrencyRow.currency_id == currency_id,
                    )
                )
                if max(Decimal(held), Decimal("0")) < -amount:
                    raise InsufficientHoldingsError(message="Insufficient currency amount")
            _apply_cash(team, cash_delta, enforce_balance)
            entry = TeamCurrencyRow(team_id=team_id, currency_id=currency_id, amount=amount)
            session.add(entry)
            await session.commit()
            return Settlement(
                team=Team.model_validate(team),
                cash_delta=cash_delta,
                entry=TeamCurrency.model_validate(entry),
            )

    async def adjust_cash(
        self, team_id: int, delta: Decimal, *, allow_negative: bool = False
    ) -> Team:
        async with get_session() as session:
            team = await _lock_team(session, team_id)
            _apply_cash(team, delta, not allow_negative)
            await session.commit()
            return Team.model_validate(team)

    # Startups

    async def get_team_startup(self, team_id: int) -> TeamStartup | None:
        async with get_session() as session:
            result = await session.execute(
                select(TeamStartupRow)
                .where(TeamStartupRow.team_id == team_id)
                .order_by(TeamStartupRow.id)
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return TeamStartup.model_validate(row) if row else None

    async def get_startup(self, startup_id: int) -> TeamStartup | None:
        async with get_session() as session:
            row = await session.get(TeamStartupRow, startup_id)
            return TeamStartup.model_validate(row) if row else None

    async def create_startup(
        self,
        *,
        team_id: int,
        name: str,
        description: str,
        value: Decimal,
        industry: str,
        risk_level: str,
    ) -> TeamStartup:
        async with get_session() as session:
            await _lock_team(session, team_id)
            existing = await session.scalar(
                select(TeamStartupRow.id).where(TeamStartupRow.team_id == team_id)
            )
            if existing is not None:
                raise ConflictError(
                    message="Team already has a startup", error_code="STARTUP_EXISTS"
                )
            row = TeamStartupRow(
                team_id=team_id,
                name=name,
                description=description,
                value=quantize(value, CASH_SCALE),
                industry=industry,
                risk_level=risk_level,
            )
            session.add(row)
            await session.commit()
            return TeamStartup.model_validate(row)

    async def update_startup(self, startup_id: int, changes: dict[str, Any]) -> TeamStartup:
        async with get_session() as session:
            row = await session.get(TeamStartupRow, startup_id)
            if row is None:
                raise NotFoundError(message="Startup not found")
            _apply(row, changes, protected=("id", "team_id"))
            await session.commit()
            return TeamStartup.model_validate(row)

    async def sell_startup(self, startup_id: int) -> tuple[Team, TeamStartup]:
        async with get_session() as session:
            team_id = await session.scalar(
                select(TeamStartupRow.team_id).where(TeamStartupRow.id == startup_id)
            )
            if team_id is None:
                raise NotFoundError(message="Startup not found")
            # Lock order: team, then startup
            team = await _lock_team(session, team_id)
            startup = (
                await session.execute(
                    select(TeamStartupRow)
                    .where(TeamStartupRow.id == startup_id)
                    .with_for_update()
                )
            ).scalar_one_or_none()
            if startup is None:
                raise NotFoundError(message="Startup not found")
            sold = TeamStartup.model_validate(startup)
            _apply_cash(team, startup.value, enforce_balance=False)
            await session.delete(startup)
            await session.commit()
            return Team.model_validate(team), sold

    # Settings

    async def get_setting(self, key: str) -> str | None:
        if key in self._unpersisted:
            return self._unpersisted[key]
        return await settings_orm.get_setting(key)

    async def set_setting(self, key: str, value: str) -> bool:
        persisted = await settings_orm.set_setting(key, value)
        if persisted:
            self._unpersisted.pop(key, None)
        else:
            self._unpersisted[key] = value
        return persisted
