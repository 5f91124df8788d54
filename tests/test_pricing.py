"""Tests for buy/sell price pair resolution."""

from __future__ import annotations

from decimal import Decimal

import pytest

from cashcrash.core.exceptions import BadRequestError
from cashcrash.domain import CASH_SCALE, quantize
from cashcrash.services.pricing import (
    parse_positive,
    parse_sell_price,
    parse_sell_rate,
    resolve_company_prices,
    resolve_currency_rates,
)


class TestResolveCompanyPrices:
    """Tests for resolve_company_prices."""

    def test_only_buy_price_derives_sell(self):
        """Sell side is 98% of the buy side."""
        pair = resolve_company_prices("100", None)
        assert pair.buy == Decimal("100.00")
        assert pair.sell == Decimal("98.00")

    def test_only_sell_price_derives_buy(self):
        """Buy side is sell / 0.98, rounded half-up to cents."""
        pair = resolve_company_prices(None, "98")
        assert pair.buy == Decimal("100.00")
        assert pair.sell == Decimal("98.00")

    def test_derived_buy_is_rounded(self):
        pair = resolve_company_prices(None, "162")
        assert pair.buy == Decimal("165.31")

    def test_both_sides_used_verbatim(self):
        """Sell above buy is accepted as given."""
        pair = resolve_company_prices("150", "160")
        assert pair == (Decimal("150.00"), Decimal("160.00"))

    def test_numeric_input_accepted(self):
        pair = resolve_company_prices(170, None)
        assert pair.sell == Decimal("166.60")

    def test_blank_strings_count_as_missing(self):
        pair = resolve_company_prices("", "50")
        assert pair.sell == Decimal("50.00")

    def test_neither_side_raises(self):
        with pytest.raises(BadRequestError) as exc_info:
            resolve_company_prices(None, "  ")
        assert exc_info.value.error_code == "MISSING_PRICE"

    @pytest.mark.parametrize("value", ["0", "-5", "abc", "nan", "inf"])
    def test_invalid_values_raise(self, value):
        with pytest.raises(BadRequestError) as exc_info:
            resolve_company_prices(value, None)
        assert exc_info.value.status_code == 400


class TestResolveCurrencyRates:
    """Tests for resolve_currency_rates."""

    def test_rates_use_four_decimals(self):
        pair = resolve_currency_rates("34.2", None)
        assert pair.buy == Decimal("34.2000")
        assert pair.sell == Decimal("33.5160")

    def test_reverse_rate(self):
        pair = resolve_currency_rates(None, "0.22")
        assert pair.buy == Decimal("0.2245")

    def test_error_message_names_rate_fields(self):
        with pytest.raises(BadRequestError) as exc_info:
            resolve_currency_rates(None, None)
        assert "rate" in exc_info.value.message
        assert "sellRate" in exc_info.value.message


class TestParsePositive:
    def test_strips_whitespace(self):
        assert parse_positive(" 12.5 ", "price") == Decimal("12.5")

    def test_zero_rejected(self):
        with pytest.raises(BadRequestError):
            parse_positive(0, "price")


class TestColumnLimits:
    """Values the price and rate columns cannot hold are client errors."""

    @pytest.mark.parametrize("price, sell_price", [("1e40", None), (None, "1e40"), ("1e9", "1")])
    def test_company_price_beyond_limit(self, price, sell_price):
        with pytest.raises(BadRequestError) as exc_info:
            resolve_company_prices(price, sell_price)
        assert exc_info.value.error_code == "VALUE_OUT_OF_RANGE"

    def test_largest_price_accepted(self):
        assert resolve_company_prices("99999999.99", None).buy == Decimal("99999999.99")

    def test_rate_beyond_limit(self):
        with pytest.raises(BadRequestError):
            resolve_currency_rates("1000000", None)

    def test_lone_sell_side_bounded(self):
        assert parse_sell_price("12.345") == Decimal("12.35")
        with pytest.raises(BadRequestError):
            parse_sell_rate("1e7")

    def test_quantize_overflow_is_bad_request(self):
        with pytest.raises(BadRequestError) as exc_info:
            quantize("1e40", CASH_SCALE)
        assert exc_info.value.error_code == "VALUE_OUT_OF_RANGE"
