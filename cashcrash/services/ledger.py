"""Ledger aggregation and portfolio valuation.

Holdings are never stored. They are derived by summing every signed ledger
row per (team, instrument) pair; aggregates that are zero or negative are
hidden. Valuation uses the current sell side of each instrument.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from cashcrash.domain import (
    AMOUNT_SCALE,
    CASH_SCALE,
    Company,
    Currency,
    CurrencyHolding,
    Portfolio,
    StockHolding,
    Team,
    TeamCurrency,
    TeamStartup,
    TeamStock,
    quantize,
)


ZERO = Decimal("0")


def sum_stock_rows(rows: Iterable[TeamStock]) -> dict[int, tuple[int, int]]:
    """Sum share deltas per company.

    Returns ``{company_id: (first_row_id, total_shares)}`` in first-seen order.
    """
    totals: dict[int, tuple[int, int]] = {}
    for row in rows:
        first_id, shares = totals.get(row.company_id, (row.id, 0))
        totals[row.company_id] = (first_id, shares + row.shares)
    return totals


def sum_currency_rows(rows: Iterable[TeamCurrency]) -> dict[int, tuple[int, Decimal]]:
    """Sum amount deltas per currency."""
    totals: dict[int, tuple[int, Decimal]] = {}
    for row in rows:
        first_id, amount = totals.get(row.currency_id, (row.id, ZERO))
        totals[row.currency_id] = (first_id, amount + row.amount)
    return totals


def stock_holding_of(rows: Iterable[TeamStock], company_id: int) -> int:
    """Net shares of one company; 0 when the aggregate is not positive."""
    total = sum(row.shares for row in rows if row.company_id == company_id)
    return total if total > 0 else 0


def currency_holding_of(rows: Iterable[TeamCurrency], currency_id: int) -> Decimal:
    """Net amount of one currency; 0 when the aggregate is not positive."""
    total = sum((row.amount for row in rows if row.currency_id == currency_id), ZERO)
    return total if total > 0 else ZERO


def aggregate_stock_holdings(
    team_id: int,
    rows: Iterable[TeamStock],
    companies: Mapping[int, Company],
) -> list[StockHolding]:
    """Join positive share aggregates with current company data."""
    holdings = []
    for company_id, (first_id, shares) in sum_stock_rows(rows).items():
        if shares <= 0:
            continue
        company = companies.get(company_id)
        if company is None:
            display_name = f"Unknown company #{company_id}"
            market_value = ZERO
        else:
            display_name = company.name
            market_value = company.sell_price * shares
        holdings.append(
            StockHolding(
                id=first_id,
                team_id=team_id,
                company_id=company_id,
                shares=shares,
                company=company,
                display_name=display_name,
                market_value=quantize(market_value, CASH_SCALE),
            )
        )
    return holdings


def aggregate_currency_holdings(
    team_id: int,
    rows: Iterable[TeamCurrency],
    currencies: Mapping[int, Currency],
) -> list[CurrencyHolding]:
    """Join positive currency aggregates with current rate data."""
    holdings = []
    for currency_id, (first_id, amount) in sum_currency_rows(rows).items():
        if amount <= 0:
            continue
        currency = currencies.get(currency_id)
        if currency is None:
            display_name = f"Unknown currency #{currency_id}"
            market_value = ZERO
        else:
            display_name = currency.name
            market_value = currency.sell_rate * amount
        holdings.append(
            CurrencyHolding(
                id=first_id,
                team_id=team_id,
                currency_id=currency_id,
                amount=quantize(amount, AMOUNT_SCALE),
                currency=currency,
                display_name=display_name,
                market_value=quantize(market_value, CASH_SCALE),
            )
        )
    return holdings


def build_portfolio(
    team: Team,
    stock_rows: Iterable[TeamStock],
    currency_rows: Iterable[TeamCurrency],
    startup: TeamStartup | None,
    companies: Mapping[int, Company],
    currencies: Mapping[int, Currency],
) -> Portfolio:
    """Compute the portfolio snapshot of one team."""
    stocks = aggregate_stock_holdings(team.id, stock_rows, companies)
    held_currencies = aggregate_currency_holdings(team.id, currency_rows, currencies)

    total_stock_value = sum((h.market_value for h in stocks), ZERO)
    total_currency_value = sum((h.market_value for h in held_currencies), ZERO)
    startup_value = startup.value if startup else ZERO
    total = team.cash_balance + total_stock_value + total_currency_value + startup_value

    return Portfolio(
        team=team,
        stocks=stocks,
        currencies=held_currencies,
        startup=startup,
        total_stock_value=quantize(total_stock_value, CASH_SCALE),
        total_currency_value=quantize(total_currency_value, CASH_SCALE),
        startup_value=quantize(startup_value, CASH_SCALE),
        total_portfolio_value=quantize(total, CASH_SCALE),
    )
