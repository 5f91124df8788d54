"""Portfolio snapshot models derived from the ledgers."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from cashcrash.domain.models import CamelModel, Company, Currency, Team, TeamStartup


class StockHolding(CamelModel):
    """Aggregated share position for one company.

    ``company`` is None when the company was deleted after the shares were
    recorded; ``display_name`` then carries a placeholder.
    """

    id: int = Field(..., description="Id of the first ledger row of this position")
    team_id: int
    company_id: int
    shares: int
    company: Optional[Company] = None
    display_name: str
    market_value: Decimal


class CurrencyHolding(CamelModel):
    """Aggregated amount held of one currency."""

    id: int = Field(..., description="Id of the first ledger row of this position")
    team_id: int
    currency_id: int
    amount: Decimal
    currency: Optional[Currency] = None
    display_name: str
    market_value: Decimal


class Portfolio(CamelModel):
    """Valuation of everything a team owns."""

    team: Team
    stocks: list[StockHolding] = Field(default_factory=list)
    currencies: list[CurrencyHolding] = Field(default_factory=list)
    startup: Optional[TeamStartup] = None
    total_stock_value: Decimal
    total_currency_value: Decimal
    startup_value: Decimal
    total_portfolio_value: Decimal
