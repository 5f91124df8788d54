"""Trade settlement service.

Self-service trades, admin assignments, dividends, startup sales and manual
cash adjustments. Each balance-affecting operation resolves prices here and
hands the resulting cash delta and ledger quantity to a single atomic storage
call.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel

from cashcrash.core.exceptions import BadRequestError, NotFoundError
from cashcrash.core.logging import get_logger
from cashcrash.domain import (
    AMOUNT_SCALE,
    CASH_SCALE,
    MAX_CASH,
    MAX_SHARES,
    Company,
    Currency,
    Portfolio,
    Settlement,
    Team,
    TeamStartup,
    quantize,
)
from cashcrash.repositories.storage import Storage
from cashcrash.services.ledger import stock_holding_of


logger = get_logger("services.trading")

TradeAction = Literal["buy", "sell"]
CashDirection = Literal["add", "subtract"]


class DividendResult(BaseModel):
    company_id: int
    total_distributed: int
    affected_teams: int
    dividend_rate: str


class StockTradeResult(BaseModel):
    action: TradeAction
    company: Company
    shares: int
    price: Decimal
    total: Decimal
    settlement: Settlement


class CurrencyTradeResult(BaseModel):
    action: TradeAction
    currency: Currency
    amount: Decimal
    rate: Decimal
    total: Decimal
    settlement: Settlement


def _check_action(action: str) -> None:
    if action not in ("buy", "sell"):
        raise BadRequestError(message="Invalid action", error_code="INVALID_ACTION")


def normalize_shares(shares: Any) -> int:
    """Absolute whole share count; zero and non-integers are rejected."""
    try:
        value = Decimal(str(shares))
    except (InvalidOperation, ValueError):
        raise BadRequestError(message="Invalid share count", error_code="INVALID_QUANTITY")
    if not value.is_finite() or value != value.to_integral_value() or value == 0:
        raise BadRequestError(message="Invalid share count", error_code="INVALID_QUANTITY")
    if abs(value) > MAX_SHARES:
        raise BadRequestError(
            message=f"Share count may not exceed {MAX_SHARES}", error_code="VALUE_OUT_OF_RANGE"
        )
    return abs(int(value))


def normalize_amount(amount: Any) -> Decimal:
    """Absolute currency amount at scale 2; zero is rejected."""
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise BadRequestError(message="Invalid amount", error_code="INVALID_QUANTITY")
    if not value.is_finite():
        raise BadRequestError(message="Invalid amount", error_code="INVALID_QUANTITY")
    if abs(value) > MAX_CASH:
        raise BadRequestError(
            message=f"Amount may not exceed {MAX_CASH}", error_code="VALUE_OUT_OF_RANGE"
        )
    value = quantize(abs(value), AMOUNT_SCALE)
    if value == 0:
        raise BadRequestError(message="Invalid amount", error_code="INVALID_QUANTITY")
    return value


def trade_total(unit_price: Decimal, quantity: Decimal | int) -> Decimal:
    """Cash value of a trade; totals the balance column cannot hold are a 400."""
    total = quantize(unit_price * quantity, CASH_SCALE)
    if total > MAX_CASH:
        raise BadRequestError(
            message=f"Trade value may not exceed {MAX_CASH}", error_code="VALUE_OUT_OF_RANGE"
        )
    return total


async def _load_team_and_company(
    storage: Storage, team_id: int, company_id: int
) -> tuple[Team, Company]:
    team = await storage.get_team(team_id)
    company = await storage.get_company(company_id)
    if team is None or company is None:
        raise NotFoundError(message="Team or company not found")
    return team, company


async def _load_team_and_currency(
    storage: Storage, team_id: int, currency_id: int
) -> tuple[Team, Currency]:
    team = await storage.get_team(team_id)
    currency = await storage.get_currency(currency_id)
    if team is None or currency is None:
        raise NotFoundError(message="Team or currency not found")
    return team, currency


# =============================================================================
# Stocks
# =============================================================================


async def _settle_stock(
    storage: Storage,
    team_id: int,
    company_id: int,
    shares: Any,
    action: str,
    *,
    enforce_balance: bool,
    source: str,
) -> StockTradeResult:
    _check_action(action)
    share_count = normalize_shares(shares)
    _, company = await _load_team_and_company(storage, team_id, company_id)

    if action == "buy":
        price = company.price
        total = trade_total(price, share_count)
        settlement = await storage.settle_stock(
            team_id, company_id, share_count, -total, enforce_balance=enforce_balance
        )
    else:
        price = company.sell_price
        total = trade_total(price, share_count)
        settlement = await storage.settle_stock(
            team_id, company_id, -share_count, total, enforce_balance=False
        )

    logger.info(
        f"{source}: team {team_id} {action} {share_count} {company.symbol} "
        f"@ {price} = {total}; balance {settlement.team.cash_balance}"
    )
    return StockTradeResult(
        action=action,
        company=company,
        shares=share_count,
        price=price,
        total=total,
        settlement=settlement,
    )


async def trade_stock(
    storage: Storage, team_id: int, company_id: int, shares: Any, action: str
) -> StockTradeResult:
    """Self-service stock trade.

    Buying debits ``shares x price`` and fails with INSUFFICIENT_FUNDS when the
    balance does not cover it. Selling requires the holding to cover the
    quantity and credits ``shares x sellPrice``.
    """
    return await _settle_stock(
        storage, team_id, company_id, shares, action, enforce_balance=True, source="Stock trade"
    )


async def assign_stock(
    storage: Storage, team_id: int, company_id: int, shares: Any
) -> StockTradeResult:
    """Admin buy bookkeeping; the balance may go negative."""
    return await _settle_stock(
        storage, team_id, company_id, shares, "buy", enforce_balance=False, source="Assign stock"
    )


async def unassign_stock(
    storage: Storage, team_id: int, company_id: int, shares: Any
) -> StockTradeResult:
    """Admin sell bookkeeping; the holding check still applies."""
    return await _settle_stock(
        storage, team_id, company_id, shares, "sell", enforce_balance=False, source="Unassign stock"
    )


# =============================================================================
# Currencies
# =============================================================================


async def _settle_currency(
    storage: Storage,
    team_id: int,
    currency_id: int,
    amount: Any,
    action: str,
    *,
    enforce_balance: bool,
    source: str,
) -> CurrencyTradeResult:
    _check_action(action)
    value = normalize_amount(amount)
    _, currency = await _load_team_and_currency(storage, team_id, currency_id)

    if action == "buy":
        rate = currency.rate
        total = trade_total(rate, value)
        settlement = await storage.settle_currency(
            team_id, currency_id, value, -total, enforce_balance=enforce_balance
        )
    else:
        rate = currency.sell_rate
        total = trade_total(rate, value)
        settlement = await storage.settle_currency(
            team_id, currency_id, -value, total, enforce_balance=False
        )

    logger.info(
        f"{source}: team {team_id} {action} {value} {currency.code} "
        f"@ {rate} = {total}; balance {settlement.team.cash_balance}"
    )
    return CurrencyTradeResult(
        action=action,
        currency=currency,
        amount=value,
        rate=rate,
        total=total,
        settlement=settlement,
    )


async def trade_currency(
    storage: Storage, team_id: int, currency_id: int, amount: Any, action: str
) -> CurrencyTradeResult:
    """Self-service currency trade priced at ``rate`` (buy) or ``sellRate`` (sell)."""
    return await _settle_currency(
        storage,
        team_id,
        currency_id,
        amount,
        action,
        enforce_balance=True,
        source="Currency trade",
    )


async def assign_currency(
    storage: Storage, team_id: int, currency_id: int, amount: Any
) -> CurrencyTradeResult:
    return await _settle_currency(
        storage,
        team_id,
        currency_id,
        amount,
        "buy",
        enforce_balance=False,
        source="Assign currency",
    )


async def unassign_currency(
    storage: Storage, team_id: int, currency_id: int, amount: Any
) -> CurrencyTradeResult:
    return await _settle_currency(
        storage,
        team_id,
        currency_id,
        amount,
        "sell",
        enforce_balance=False,
        source="Unassign currency",
    )


# =============================================================================
# Dividends
# =============================================================================


async def distribute_dividend(storage: Storage, company_id: int) -> DividendResult:
    """Pay a company's dividend as extra shares.

    Every team holding ``n > 0`` shares receives ``floor(n x dividend / 100)``
    new shares; teams whose payout rounds down to zero receive nothing.
    """
    company = await storage.get_company(company_id)
    if company is None:
        raise NotFoundError(message="Company not found")

    rate = company.dividend / 100
    if rate <= 0:
        raise BadRequestError(message="Company has no dividend", error_code="NO_DIVIDEND")

    total_distributed = 0
    affected_teams = 0
    for team in await storage.list_teams():
        held = stock_holding_of(await storage.list_stock_rows(team.id), company_id)
        if held <= 0:
            continue
        payout = int((held * rate).to_integral_value(rounding=ROUND_FLOOR))
        if payout <= 0:
            continue
        await storage.settle_stock(
            team.id, company_id, payout, Decimal("0"), enforce_balance=False
        )
        total_distributed += payout
        affected_teams += 1

    logger.info(
        f"Dividend for {company.symbol}: {total_distributed} shares to {affected_teams} teams"
    )
    return DividendResult(
        company_id=company_id,
        total_distributed=total_distributed,
        affected_teams=affected_teams,
        dividend_rate=str(quantize(company.dividend, Decimal("0.1"))),
    )


# =============================================================================
# Startups & cash
# =============================================================================


async def sell_startup(storage: Storage, startup_id: int) -> tuple[Team, TeamStartup]:
    """Credit a startup's value to its team and remove it."""
    team, startup = await storage.sell_startup(startup_id)
    logger.info(
        f"Startup {startup.name} sold for team {team.id}: +{startup.value}; "
        f"balance {team.cash_balance}"
    )
    return team, startup


async def adjust_cash(
    storage: Storage, team_id: int, amount: Any, direction: str
) -> Team:
    """Add or subtract cash; subtraction may not push the balance below zero."""
    if direction not in ("add", "subtract"):
        raise BadRequestError(message="Invalid direction", error_code="INVALID_DIRECTION")
    value = normalize_amount(amount)
    delta = value if direction == "add" else -value
    team = await storage.adjust_cash(team_id, delta)
    logger.info(f"Cash adjustment for team {team_id}: {delta}; balance {team.cash_balance}")
    return team


async def portfolio_after_trade(storage: Storage, team_id: int) -> Portfolio:
    portfolio = await storage.get_team_portfolio(team_id)
    if portfolio is None:
        raise NotFoundError(message="Team not found")
    return portfolio
