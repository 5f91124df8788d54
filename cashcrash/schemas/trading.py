"""Trade, assignment, dividend and startup schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from cashcrash.domain import MAX_CASH, CamelModel
from cashcrash.schemas.teams import PortfolioResponse, TeamResponse


TradeAction = Literal["buy", "sell"]


# =============================================================================
# Self-service trades
# =============================================================================


class StockTradeRequest(CamelModel):
    company_id: int
    shares: int = Field(..., description="Share count; the sign is ignored")
    action: TradeAction


class CurrencyTradeRequest(CamelModel):
    currency_id: int
    amount: Decimal = Field(..., description="Currency amount; the sign is ignored")
    action: TradeAction


class LegacyTradeRequest(CamelModel):
    """Original dashboard trade body."""

    company_id: int
    shares: int = Field(..., gt=0)
    type: TradeAction


class StockTradeResponse(CamelModel):
    success: bool = True
    action: TradeAction
    shares: int
    price: Decimal
    total: Decimal
    team: TeamResponse


class CurrencyTradeResponse(CamelModel):
    success: bool = True
    action: TradeAction
    amount: Decimal
    rate: Decimal
    total: Decimal
    team: TeamResponse


class TransactionSummary(CamelModel):
    type: TradeAction
    company_name: str
    shares: int
    price: Decimal
    total: Decimal


class LegacyTradeResponse(CamelModel):
    success: bool = True
    portfolio: PortfolioResponse
    transaction: TransactionSummary


# =============================================================================
# Admin bookkeeping
# =============================================================================


class AssignStockRequest(CamelModel):
    team_id: int
    company_id: int
    shares: int


class AssignCurrencyRequest(CamelModel):
    team_id: int
    currency_id: int
    amount: Decimal


class DividendResponse(CamelModel):
    success: bool = True
    total_distributed: Decimal = Field(..., description="Shares paid out across all teams")
    affected_teams: int
    dividend_rate: str = Field(..., description="Dividend in percent, one decimal")


class AdjustCashRequest(CamelModel):
    team_id: int
    amount: Decimal = Field(..., gt=0, le=MAX_CASH)
    direction: Literal["add", "subtract"]


# =============================================================================
# Startups
# =============================================================================


class StartupCreate(CamelModel):
    team_id: int
    name: str = Field(..., min_length=1)
    description: str = ""
    value: Decimal = Field(..., ge=0, le=MAX_CASH)
    industry: str = Field(..., min_length=1)
    risk_level: str = Field(..., min_length=1)


class StartupUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    value: Optional[Decimal] = Field(default=None, ge=0, le=MAX_CASH)
    industry: Optional[str] = Field(default=None, min_length=1)
    risk_level: Optional[str] = Field(default=None, min_length=1)


class StartupSaleResponse(CamelModel):
    success: bool = True
    sold_value: Decimal
    new_cash_balance: Decimal
