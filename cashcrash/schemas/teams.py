"""Team and portfolio schemas.

Access codes are credentials: team payloads carry ``accessCode`` only when
built for an admin session.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, SerializerFunctionWrapHandler, field_validator, model_serializer

from cashcrash.domain import (
    MAX_CASH,
    CamelModel,
    CurrencyHolding,
    Portfolio,
    StockHolding,
    Team,
    TeamStartup,
)


class TeamCreate(CamelModel):
    """Create team request."""

    name: str = Field(..., min_length=1, max_length=100)
    access_code: str = Field(..., min_length=4, description="Login code for the team")
    cash_balance: Optional[Decimal] = Field(
        default=None, ge=0, le=MAX_CASH, description="Starting cash"
    )
    profile_pic_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class TeamUpdate(CamelModel):
    """Partial team update."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    access_code: Optional[str] = Field(default=None, min_length=4)
    cash_balance: Optional[Decimal] = Field(default=None, ge=0, le=MAX_CASH)
    profile_pic_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class TeamResponse(CamelModel):
    id: int
    name: str
    cash_balance: Decimal
    profile_pic_url: Optional[str] = None
    access_code: Optional[str] = None

    @model_serializer(mode="wrap")
    def _drop_hidden_access_code(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if self.access_code is None:
            data.pop("accessCode", None)
            data.pop("access_code", None)
        return data

    @classmethod
    def from_team(cls, team: Team, include_access_code: bool = False) -> "TeamResponse":
        return cls(
            id=team.id,
            name=team.name,
            cash_balance=team.cash_balance,
            profile_pic_url=team.profile_pic_url,
            access_code=team.access_code if include_access_code else None,
        )


class PortfolioResponse(CamelModel):
    """Team portfolio with holdings valued at sell prices."""

    team: TeamResponse
    stocks: list[StockHolding] = Field(default_factory=list)
    currencies: list[CurrencyHolding] = Field(default_factory=list)
    startup: Optional[TeamStartup] = None
    total_stock_value: Decimal
    total_currency_value: Decimal
    startup_value: Decimal
    total_portfolio_value: Decimal

    @classmethod
    def from_portfolio(
        cls, portfolio: Portfolio, include_access_code: bool = False
    ) -> "PortfolioResponse":
        return cls(
            team=TeamResponse.from_team(portfolio.team, include_access_code),
            stocks=portfolio.stocks,
            currencies=portfolio.currencies,
            startup=portfolio.startup,
            total_stock_value=portfolio.total_stock_value,
            total_currency_value=portfolio.total_currency_value,
            startup_value=portfolio.startup_value,
            total_portfolio_value=portfolio.total_portfolio_value,
        )
