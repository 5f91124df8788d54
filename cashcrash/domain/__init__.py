"""Domain models shared by storage backends, services and routes.

Usage:
    from cashcrash.domain import Company, Team, Portfolio

    portfolio: Portfolio = await storage.get_team_portfolio(team_id)
    data = portfolio.model_dump(by_alias=True)
"""

from cashcrash.domain.models import (
    AMOUNT_SCALE,
    CASH_SCALE,
    MAX_CASH,
    MAX_DIVIDEND,
    MAX_PRICE,
    MAX_RATE,
    MAX_SHARES,
    PRICE_SCALE,
    RATE_SCALE,
    CamelModel,
    Company,
    Currency,
    Settlement,
    Team,
    TeamCurrency,
    TeamStartup,
    TeamStock,
    quantize,
)
from cashcrash.domain.portfolio import (
    CurrencyHolding,
    Portfolio,
    StockHolding,
)


__all__ = [
    "AMOUNT_SCALE",
    "CASH_SCALE",
    "MAX_CASH",
    "MAX_DIVIDEND",
    "MAX_PRICE",
    "MAX_RATE",
    "MAX_SHARES",
    "PRICE_SCALE",
    "RATE_SCALE",
    "CamelModel",
    "Company",
    "Currency",
    "CurrencyHolding",
    "Portfolio",
    "Settlement",
    "StockHolding",
    "Team",
    "TeamCurrency",
    "TeamStartup",
    "TeamStock",
    "quantize",
]
