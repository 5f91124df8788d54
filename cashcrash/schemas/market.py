"""Company and currency request schemas.

Create and full-update requests arrive as multipart forms (they can carry a
logo file) and are declared as ``Form`` parameters on the routes. The JSON
bodies below serve the price-only PATCH endpoints and the logo URL update.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import Field

from cashcrash.domain import CamelModel, Company, Currency


PriceInput = Optional[Union[float, int, str]]


class CompanyPriceUpdate(CamelModel):
    """Price update: either side may be omitted and is then derived."""

    price: PriceInput = Field(default=None, description="Buy price")
    sell_price: PriceInput = Field(default=None, description="Sell price")


class CurrencyRateUpdate(CamelModel):
    """Rate update: either side may be omitted and is then derived."""

    rate: PriceInput = Field(default=None, description="Buy rate")
    sell_rate: PriceInput = Field(default=None, description="Sell rate")


class LogoUpdateRequest(CamelModel):
    logo_url: str = Field(..., min_length=1, description="Logo path or URL")


class CompanyLogoResponse(CamelModel):
    company: Company
    logo_path: str


class CurrencyLogoResponse(CamelModel):
    currency: Currency
    logo_path: str
