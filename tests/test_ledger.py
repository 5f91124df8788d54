"""Tests for ledger aggregation and portfolio valuation."""

from __future__ import annotations

from decimal import Decimal

from cashcrash.domain import Company, Currency, Team, TeamCurrency, TeamStartup, TeamStock
from cashcrash.services.ledger import (
    aggregate_currency_holdings,
    aggregate_stock_holdings,
    build_portfolio,
    stock_holding_of,
)


APPLE = Company(
    id=1, name="Apple Inc.", symbol="AAPL", price=Decimal("170.00"), sell_price=Decimal("162.00")
)
USD = Currency(id=1, name="ABD Doları", code="USD", rate=Decimal("34.20"), sell_rate=Decimal("32.80"))
TEAM = Team(id=7, name="7. Takım", cash_balance=Decimal("1000.00"), access_code="abcd")


def _stock(row_id: int, company_id: int, shares: int) -> TeamStock:
    return TeamStock(id=row_id, team_id=TEAM.id, company_id=company_id, shares=shares)


def _currency(row_id: int, currency_id: int, amount: str) -> TeamCurrency:
    return TeamCurrency(id=row_id, team_id=TEAM.id, currency_id=currency_id, amount=Decimal(amount))


class TestStockAggregation:
    """Holdings are the sum of signed ledger rows."""

    def test_rows_are_summed_per_company(self):
        rows = [_stock(1, 1, 10), _stock(2, 1, 5), _stock(3, 1, -3)]
        holdings = aggregate_stock_holdings(TEAM.id, rows, {1: APPLE})

        assert len(holdings) == 1
        assert holdings[0].shares == 12
        assert holdings[0].id == 1
        assert holdings[0].market_value == Decimal("1944.00")

    def test_zero_aggregate_is_hidden(self):
        rows = [_stock(1, 1, 10), _stock(2, 1, -10)]
        assert aggregate_stock_holdings(TEAM.id, rows, {1: APPLE}) == []

    def test_negative_aggregate_is_hidden(self):
        rows = [_stock(1, 1, -4)]
        assert aggregate_stock_holdings(TEAM.id, rows, {1: APPLE}) == []
        assert stock_holding_of(rows, 1) == 0

    def test_orphaned_company_gets_placeholder(self):
        """Shares of a deleted company render with a placeholder and no value."""
        holdings = aggregate_stock_holdings(TEAM.id, [_stock(1, 99, 3)], {1: APPLE})

        assert holdings[0].company is None
        assert holdings[0].display_name == "Unknown company #99"
        assert holdings[0].market_value == Decimal("0.00")


class TestCurrencyAggregation:
    def test_amounts_are_summed(self):
        rows = [_currency(1, 1, "100.50"), _currency(2, 1, "-0.50")]
        holdings = aggregate_currency_holdings(TEAM.id, rows, {1: USD})

        assert holdings[0].amount == Decimal("100.00")
        assert holdings[0].market_value == Decimal("3280.00")

    def test_orphaned_currency_gets_placeholder(self):
        holdings = aggregate_currency_holdings(TEAM.id, [_currency(1, 5, "10")], {})
        assert holdings[0].display_name == "Unknown currency #5"
        assert holdings[0].market_value == Decimal("0.00")


class TestBuildPortfolio:
    def test_total_includes_cash_stocks_currencies_and_startup(self):
        startup = TeamStartup(
            id=1,
            team_id=TEAM.id,
            name="Kite",
            description="",
            value=Decimal("500.00"),
            industry="Tech",
            risk_level="high",
        )
        portfolio = build_portfolio(
            TEAM,
            [_stock(1, 1, 2)],
            [_currency(1, 1, "10")],
            startup,
            {1: APPLE},
            {1: USD},
        )

        assert portfolio.total_stock_value == Decimal("324.00")
        assert portfolio.total_currency_value == Decimal("328.00")
        assert portfolio.startup_value == Decimal("500.00")
        assert portfolio.total_portfolio_value == Decimal("2152.00")

    def test_camel_case_serialization(self):
        portfolio = build_portfolio(TEAM, [], [], None, {}, {})
        data = portfolio.model_dump(mode="json", by_alias=True)

        assert data["totalPortfolioValue"] == "1000.00"
        assert data["team"]["cashBalance"] == "1000.00"
        assert data["startup"] is None
