"""Market and team domain models.

These are the records every storage backend returns. Field names are
snake_case in Python and camelCase on the wire so the dashboard can keep
reading ``cashBalance``, ``sellPrice`` and friends.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cashcrash.core.exceptions import BadRequestError


CASH_SCALE = Decimal("0.01")
PRICE_SCALE = Decimal("0.01")
RATE_SCALE = Decimal("0.0001")
AMOUNT_SCALE = Decimal("0.01")

# Largest values the database columns hold
MAX_SHARES = 2_147_483_647
MAX_PRICE = Decimal("99999999.99")
MAX_RATE = Decimal("999999.9999")
MAX_CASH = Decimal("9999999999.99")
MAX_DIVIDEND = Decimal("999.99")


def quantize(value: Decimal | int | float | str, scale: Decimal = CASH_SCALE) -> Decimal:
    """Round a monetary value half-up to a fixed scale.

    Values too large for the decimal context are rejected with a 400.
    """
    try:
        return Decimal(str(value)).quantize(scale, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise BadRequestError(message="Value out of range", error_code="VALUE_OUT_OF_RANGE")


class CamelModel(BaseModel):
    """Base model speaking camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Company(CamelModel):
    """Listed company a team can hold shares of."""

    id: int
    name: str
    symbol: str
    price: Decimal = Field(..., description="Buy price")
    sell_price: Decimal = Field(..., description="Sell price")
    dividend: Decimal = Field(default=Decimal("0.00"), description="Dividend in percent")
    description: str = ""
    logo_url: Optional[str] = None


class Currency(CamelModel):
    """Foreign currency quoted against the base currency."""

    id: int
    name: str
    code: str
    rate: Decimal = Field(..., description="Buy rate")
    sell_rate: Decimal = Field(..., description="Sell rate")
    logo_url: Optional[str] = None


class Team(CamelModel):
    """Trading team."""

    id: int
    name: str
    cash_balance: Decimal
    access_code: str
    profile_pic_url: Optional[str] = None


class TeamStock(CamelModel):
    """One signed share delta in a team's stock ledger."""

    id: int
    team_id: int
    company_id: int
    shares: int


class TeamCurrency(CamelModel):
    """One signed amount delta in a team's currency ledger."""

    id: int
    team_id: int
    currency_id: int
    amount: Decimal


class TeamStartup(CamelModel):
    """Startup investment owned by a team."""

    id: int
    team_id: int
    name: str
    description: str
    value: Decimal
    industry: str
    risk_level: str


class Settlement(CamelModel):
    """Result of an atomic balance + ledger mutation."""

    team: Team
    cash_delta: Decimal
    entry: TeamStock | TeamCurrency
