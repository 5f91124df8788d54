"""Storage interface shared by the memory and SQL backends.

Every balance-affecting mutation is a single call (``settle_stock``,
``settle_currency``, ``sell_startup``, ``adjust_cash``) so the balance update,
the sufficiency checks and the ledger append happen atomically inside the
backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from cashcrash.domain import (
    Company,
    Currency,
    Portfolio,
    Settlement,
    Team,
    TeamCurrency,
    TeamStartup,
    TeamStock,
)
from cashcrash.services.ledger import build_portfolio


class Storage(ABC):
    """Abstract store of companies, currencies, teams and their ledgers."""

    async def initialize(self) -> None:
        """Prepare the backend (tables, connections)."""

    async def close(self) -> None:
        """Release backend resources."""

    async def is_empty(self) -> bool:
        return not await self.list_teams() and not await self.list_companies()

    # Companies

    @abstractmethod
    async def list_companies(self) -> list[Company]: ...

    @abstractmethod
    async def get_company(self, company_id: int) -> Company | None: ...

    @abstractmethod
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
    ) -> Company: ...

    @abstractmethod
    async def update_company(self, company_id: int, changes: dict[str, Any]) -> Company: ...

    @abstractmethod
    async def delete_company(self, company_id: int) -> bool: ...

    # Currencies

    @abstractmethod
    async def list_currencies(self) -> list[Currency]: ...

    @abstractmethod
    async def get_currency(self, currency_id: int) -> Currency | None: ...

    @abstractmethod
    async def create_currency(
        self,
        *,
        name: str,
        code: str,
        rate: Decimal,
        sell_rate: Decimal,
        logo_url: str | None = None,
    ) -> Currency: ...

    @abstractmethod
    async def update_currency(self, currency_id: int, changes: dict[str, Any]) -> Currency: ...

    @abstractmethod
    async def delete_currency(self, currency_id: int) -> bool: ...

    # Teams

    @abstractmethod
    async def list_teams(self) -> list[Team]: ...

    @abstractmethod
    async def get_team(self, team_id: int) -> Team | None: ...

    @abstractmethod
    async def find_team_by_access_code(self, access_code: str) -> Team | None: ...

    @abstractmethod
    async def create_team(
        self,
        *,
        name: str,
        access_code: str,
        cash_balance: Decimal,
        profile_pic_url: str | None = None,
    ) -> Team: ...

    @abstractmethod
    async def update_team(self, team_id: int, changes: dict[str, Any]) -> Team: ...

    @abstractmethod
    async def delete_team(self, team_id: int) -> bool:
        """Delete a team together with its ledgers and startup."""

    # Ledgers

    @abstractmethod
    async def list_stock_rows(self, team_id: int) -> list[TeamStock]: ...

    @abstractmethod
    async def list_currency_rows(self, team_id: int) -> list[TeamCurrency]: ...

    @abstractmethod
    async def settle_stock(
        self,
        team_id: int,
        company_id: int,
        shares: int,
        cash_delta: Decimal,
        *,
        enforce_balance: bool,
    ) -> Settlement:
        """Apply a cash delta and append a share row atomically.

        A negative ``shares`` requires the current holding to cover it
        (InsufficientHoldingsError). With ``enforce_balance`` the resulting
        balance may not drop below zero (InsufficientFundsError).
        """

    @abstractmethod
    async def settle_currency(
        self,
        team_id: int,
        currency_id: int,
        amount: Decimal,
        cash_delta: Decimal,
        *,
        enforce_balance: bool,
    ) -> Settlement:
        """Currency counterpart of :meth:`settle_stock`."""

    @abstractmethod
    async def adjust_cash(
        self, team_id: int, delta: Decimal, *, allow_negative: bool = False
    ) -> Team: ...

    # Startups

    @abstractmethod
    async def get_team_startup(self, team_id: int) -> TeamStartup | None: ...

    @abstractmethod
    async def get_startup(self, startup_id: int) -> TeamStartup | None: ...

    @abstractmethod
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
        """Create a startup; a team owning one already is a ConflictError."""

    @abstractmethod
    async def update_startup(self, startup_id: int, changes: dict[str, Any]) -> TeamStartup: ...

    @abstractmethod
    async def sell_startup(self, startup_id: int) -> tuple[Team, TeamStartup]:
        """Credit the startup value to its team and delete it atomically."""

    # Settings

    @abstractmethod
    async def get_setting(self, key: str) -> str | None: ...

    @abstractmethod
    async def set_setting(self, key: str, value: str) -> bool:
        """Store a setting; returns False when it could not be persisted."""

    # Derived

    async def get_team_portfolio(self, team_id: int) -> Portfolio | None:
        team = await self.get_team(team_id)
        if team is None:
            return None
        companies = {c.id: c for c in await self.list_companies()}
        currencies = {c.id: c for c in await self.list_currencies()}
        return build_portfolio(
            team,
            await self.list_stock_rows(team_id),
            await self.list_currency_rows(team_id),
            await self.get_team_startup(team_id),
            companies,
            currencies,
        )

    async def list_portfolios(self) -> list[Portfolio]:
        companies = {c.id: c for c in await self.list_companies()}
        currencies = {c.id: c for c in await self.list_currencies()}
        portfolios = []
        for team in await self.list_teams():
            portfolios.append(
                build_portfolio(
                    team,
                    await self.list_stock_rows(team.id),
                    await self.list_currency_rows(team.id),
                    await self.get_team_startup(team.id),
                    companies,
                    currencies,
                )
            )
        return portfolios
