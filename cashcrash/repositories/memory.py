"""In-process storage backend.

Everything lives in dicts keyed by id with monotonically increasing counters.
Balance-affecting mutations run under one ``asyncio.Lock`` so the sufficiency
check, the balance update and the ledger append cannot interleave.

The admin password is additionally written through to PostgreSQL when
``DATABASE_URL`` is configured.
"""

from __future__ import annotations

import asyncio
import itertools
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel

from cashcrash.core.exceptions import (
    BadRequestError,
    ConflictError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    NotFoundError,
)
from cashcrash.core.logging import get_logger
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
from cashcrash.services.ledger import currency_holding_of, stock_holding_of


logger = get_logger("repositories.memory")

M = TypeVar("M", bound=BaseModel)


def _merge(model: M, changes: dict[str, Any]) -> M:
    return type(model).model_validate({**model.model_dump(), **changes})


class MemoryStorage(Storage):
    """Dict-backed store; the default backend."""

    def __init__(self) -> None:
        self._companies: dict[int, Company] = {}
        self._currencies: dict[int, Currency] = {}
        self._teams: dict[int, Team] = {}
        self._team_stocks: dict[int, TeamStock] = {}
        self._team_currencies: dict[int, TeamCurrency] = {}
        self._team_startups: dict[int, TeamStartup] = {}
        self._settings: dict[str, str] = {}

        self._company_ids = itertools.count(1)
        self._currency_ids = itertools.count(1)
        self._team_ids = itertools.count(1)
        self._team_stock_ids = itertools.count(1)
        self._team_currency_ids = itertools.count(1)
        self._team_startup_ids = itertools.count(1)

        self._lock = asyncio.Lock()

    # Companies

    async def list_companies(self) -> list[Company]:
        return [c.model_copy() for c in self._companies.values()]

    async def get_company(self, company_id: int) -> Company | None:
        company = self._companies.get(company_id)
        return company.model_copy() if company else None

    def _check_symbol(self, symbol: str, exclude_id: int | None = None) -> None:
        for company in self._companies.values():
            if company.symbol == symbol and company.id != exclude_id:
                raise ConflictError(message=f"Company symbol {symbol} already exists")

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
        self._check_symbol(symbol)
        company = Company(
            id=next(self._company_ids),
            name=name,
            symbol=symbol,
            price=price,
            sell_price=sell_price,
            dividend=dividend,
            description=description,
            logo_url=logo_url,
        )
        self._companies[company.id] = company
        return company.model_copy()

    async def update_company(self, company_id: int, changes: dict[str, Any]) -> Company:
        existing = self._companies.get(company_id)
        if existing is None:
            raise NotFoundError(message="Company not found")
        if "symbol" in changes:
            self._check_symbol(changes["symbol"], exclude_id=company_id)
        updated = _merge(existing, changes)
        self._companies[company_id] = updated
        return updated.model_copy()

    async def delete_company(self, company_id: int) -> bool:
        return self._companies.pop(company_id, None) is not None

    # Currencies

    async def list_currencies(self) -> list[Currency]:
        return [c.model_copy() for c in self._currencies.values()]

    async def get_currency(self, currency_id: int) -> Currency | None:
        currency = self._currencies.get(currency_id)
        return currency.model_copy() if currency else None

    def _check_code(self, code: str, exclude_id: int | None = None) -> None:
        for currency in self._currencies.values():
            if currency.code == code and currency.id != exclude_id:
                raise ConflictError(message=f"Currency code {code} already exists")

    async def create_currency(
        self,
        *,
        name: str,
        code: str,
        rate: Decimal,
        sell_rate: Decimal,
        logo_url: str | None = None,
    ) -> Currency:
        self._check_code(code)
        currency = Currency(
            id=next(self._currency_ids),
            name=name,
            code=code,
            rate=rate,
            sell_rate=sell_rate,
            logo_url=logo_url,
        )
        self._currencies[currency.id] = currency
        return currency.model_copy()

    async def update_currency(self, currency_id: int, changes: dict[str, Any]) -> Currency:
        existing = self._currencies.get(currency_id)
        if existing is None:
            raise NotFoundError(message="Currency not found")
        if "code" in changes:
            self._check_code(changes["code"], exclude_id=currency_id)
        updated = _merge(existing, changes)
        self._currencies[currency_id] = updated
        return updated.model_copy()

    async def delete_currency(self, currency_id: int) -> bool:
        return self._currencies.pop(currency_id, None) is not None

    # Teams

    async def list_teams(self) -> list[Team]:
        return [t.model_copy() for t in self._teams.values()]

    async def get_team(self, team_id: int) -> Team | None:
        team = self._teams.get(team_id)
        return team.model_copy() if team else None

    async def find_team_by_access_code(self, access_code: str) -> Team | None:
        for team in self._teams.values():
            if team.access_code == access_code:
                return team.model_copy()
        return None

    def _check_team_unique(self, changes: dict[str, Any], exclude_id: int | None = None) -> None:
        for team in self._teams.values():
            if team.id == exclude_id:
                continue
            if "name" in changes and team.name == changes["name"]:
                raise ConflictError(message=f"Team name {changes['name']} already exists")
            if "access_code" in changes and team.access_code == changes["access_code"]:
                raise ConflictError(
                    message="Access code is already in use", error_code="ACCESS_CODE_TAKEN"
                )

    async def create_team(
        self,
        *,
        name: str,
        access_code: str,
        cash_balance: Decimal,
        profile_pic_url: str | None = None,
    ) -> Team:
        self._check_team_unique({"name": name, "access_code": access_code})
        team = Team(
            id=next(self._team_ids),
            name=name,
            cash_balance=quantize(cash_balance, CASH_SCALE),
            access_code=access_code,
            profile_pic_url=profile_pic_url,
        )
        self._teams[team.id] = team
        return team.model_copy()

    async def update_team(self, team_id: int, changes: dict[str, Any]) -> Team:
        async with self._lock:
            existing = self._teams.get(team_id)
            if existing is None:
                raise NotFoundError(message="Team not found")
            self._check_team_unique(changes, exclude_id=team_id)
            updated = _merge(existing, changes)
            self._teams[team_id] = updated
            return updated.model_copy()

    async def delete_team(self, team_id: int) -> bool:
        async with self._lock:
            if self._teams.pop(team_id, None) is None:
                return False
            for table in (self._team_stocks, self._team_currencies, self._team_startups):
                for row_id in [rid for rid, row in table.items() if row.team_id == team_id]:
                    del table[row_id]
            return True

    # Ledgers

    async def list_stock_rows(self, team_id: int) -> list[TeamStock]:
        return [r.model_copy() for r in self._team_stocks.values() if r.team_id == team_id]

    async def list_currency_rows(self, team_id: int) -> list[TeamCurrency]:
        return [r.model_copy() for r in self._team_currencies.values() if r.team_id == team_id]

    def _require_team(self, team_id: int) -> Team:
        team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError(message="Team not found")
        return team

    def _apply_cash(self, team: Team, cash_delta: Decimal, enforce_balance: bool) -> Team:
        new_balance = quantize(team.cash_balance + cash_delta, CASH_SCALE)
        if abs(new_balance) > MAX_CASH:
            raise BadRequestError(message="Cash balance out of range", error_code="VALUE_OUT_OF_RANGE")
        if enforce_balance and new_balance < 0:
            raise InsufficientFundsError()
        updated = team.model_copy(update={"cash_balance": new_balance})
        self._teams[team.id] = updated
        return updated

    async def settle_stock(
        self,
        team_id: int,
        company_id: int,
        shares: int,
        cash_delta: Decimal,
        *,
        enforce_balance: bool,
    ) -> Settlement:
        async with self._lock:
            team = self._require_team(team_id)
            if shares < 0:
                rows = [r for r in self._team_stocks.values() if r.team_id == team_id]
                if stock_holding_of(rows, company_id) < -shares:
                    raise InsufficientHoldingsError(message="Insufficient shares")
            updated = self._apply_cash(team, cash_delta, enforce_balance)
            entry = TeamStock(
                id=next(self._team_stock_ids),
                team_id=team_id,
                company_id=company_id,
                shares=shares,
            )
            self._team_stocks[entry.id] = entry
            return Settlement(
                team=updated.model_copy(), cash_delta=cash_delta, entry=entry.model_copy()
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
        async with self._lock:
            team = self._require_team(team_id)
            if amount < 0:
                rows = [r for r in self._team_currencies.values() if r.team_id == team_id]
                if currency_holding_of(rows, currency_id) < -amount:
                    raise InsufficientHoldingsError(message="Insufficient currency amount")
            updated = self._apply_cash(team, cash_delta, enforce_balance)
            entry = TeamCurrency(
                id=next(self._team_currency_ids),
                team_id=team_id,
                currency_id=currency_id,
                amount=amount,
            )
            self._team_currencies[entry.id] = entry
            return Settlement(
                team=updated.model_copy(), cash_delta=cash_delta, entry=entry.model_copy()
            )

    async def adjust_cash(
        self, team_id: int, delta: Decimal, *, allow_negative: bool = False
    ) -> Team:
        async with self._lock:
            team = self._require_team(team_id)
            return self._apply_cash(team, delta, not allow_negative).model_copy()

    # Startups

    async def get_team_startup(self, team_id: int) -> TeamStartup | None:
        for startup in self._team_startups.values():
            if startup.team_id == team_id:
                return startup.model_copy()
        return None

    async def get_startup(self, startup_id: int) -> TeamStartup | None:
        startup = self._team_startups.get(startup_id)
        return startup.model_copy() if startup else None

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
        async with self._lock:
            self._require_team(team_id)
            if any(s.team_id == team_id for s in self._team_startups.values()):
                raise ConflictError(
                    message="Team already has a startup", error_code="STARTUP_EXISTS"
                )
            startup = TeamStartup(
                id=next(self._team_startup_ids),
                team_id=team_id,
                name=name,
                description=description,
                value=quantize(value, CASH_SCALE),
                industry=industry,
                risk_level=risk_level,
            )
            self._team_startups[startup.id] = startup
            return startup.model_copy()

    async def update_startup(self, startup_id: int, changes: dict[str, Any]) -> TeamStartup:
        async with self._lock:
            existing = self._team_startups.get(startup_id)
            if existing is None:
                raise NotFoundError(message="Startup not found")
            changes = {k: v for k, v in changes.items() if k not in ("id", "team_id")}
            updated = _merge(existing, changes)
            self._team_startups[startup_id] = updated
            return updated.model_copy()

    async def sell_startup(self, startup_id: int) -> tuple[Team, TeamStartup]:
        async with self._lock:
            startup = self._team_startups.get(startup_id)
            if startup is None:
                raise NotFoundError(message="Startup not found")
            team = self._require_team(startup.team_id)
            updated = self._apply_cash(team, startup.value, enforce_balance=False)
            del self._team_startups[startup_id]
            return updated.model_copy(), startup

    # Settings

    async def get_setting(self, key: str) -> str | None:
        if key in self._settings:
            return self._settings[key]
        return await settings_orm.get_setting(key)

    async def set_setting(self, key: str, value: str) -> bool:
        self._settings[key] = value
        return await settings_orm.set_setting(key, value)
