"""Buy/sell price pair helpers.

Only one side of a quote is usually edited by the admin; the other side is
derived with a fixed spread factor (sell = buy x 0.98 by default).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple

from cashcrash.core.config import settings
from cashcrash.core.exceptions import BadRequestError
from cashcrash.domain import MAX_PRICE, MAX_RATE, PRICE_SCALE, RATE_SCALE, quantize


class PricePair(NamedTuple):
    buy: Decimal
    sell: Decimal


def parse_positive(value: Any, field: str) -> Decimal:
    """Parse a strictly positive decimal or raise a 400."""
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise BadRequestError(message=f"Invalid {field} value", error_code="INVALID_PRICE")
    if not parsed.is_finite() or parsed <= 0:
        raise BadRequestError(message=f"Invalid {field} value", error_code="INVALID_PRICE")
    return parsed


def _bounded(value: Decimal, scale: Decimal, limit: Decimal, field: str) -> Decimal:
    if value > limit:
        raise BadRequestError(
            message=f"{field} may not exceed {limit}", error_code="VALUE_OUT_OF_RANGE"
        )
    return quantize(value, scale)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_price_pair(
    buy: Any,
    sell: Any,
    *,
    scale: Decimal = PRICE_SCALE,
    limit: Decimal = MAX_PRICE,
    buy_field: str = "price",
    sell_field: str = "sellPrice",
    factor: Decimal | None = None,
) -> PricePair:
    """Complete a buy/sell pair from whichever sides were supplied.

    Both sides given are used verbatim; sell <= buy is not enforced. Either
    side, given or derived, above ``limit`` is a 400.
    """
    factor = factor if factor is not None else settings.sell_spread_factor

    if _is_blank(buy) and _is_blank(sell):
        raise BadRequestError(
            message=f"Either {buy_field} or {sell_field} must be provided",
            error_code="MISSING_PRICE",
        )

    if _is_blank(sell):
        buy_value = parse_positive(buy, buy_field)
        return PricePair(
            _bounded(buy_value, scale, limit, buy_field),
            _bounded(buy_value * factor, scale, limit, sell_field),
        )

    if _is_blank(buy):
        sell_value = parse_positive(sell, sell_field)
        sell_price = _bounded(sell_value, scale, limit, sell_field)
        return PricePair(_bounded(sell_value / factor, scale, limit, buy_field), sell_price)

    return PricePair(
        _bounded(parse_positive(buy, buy_field), scale, limit, buy_field),
        _bounded(parse_positive(sell, sell_field), scale, limit, sell_field),
    )


def resolve_company_prices(price: Any, sell_price: Any) -> PricePair:
    return resolve_price_pair(price, sell_price, scale=PRICE_SCALE, limit=MAX_PRICE)


def resolve_currency_rates(rate: Any, sell_rate: Any) -> PricePair:
    return resolve_price_pair(
        rate,
        sell_rate,
        scale=RATE_SCALE,
        limit=MAX_RATE,
        buy_field="rate",
        sell_field="sellRate",
    )


def parse_sell_price(value: Any) -> Decimal:
    """A lone ``sellPrice`` from a full company update."""
    return _bounded(parse_positive(value, "sellPrice"), PRICE_SCALE, MAX_PRICE, "sellPrice")


def parse_sell_rate(value: Any) -> Decimal:
    return _bounded(parse_positive(value, "sellRate"), RATE_SCALE, MAX_RATE, "sellRate")
