"""Company routes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from cashcrash.api.dependencies import get_storage, require_admin
from cashcrash.core.exceptions import BadRequestError, NotFoundError
from cashcrash.core.logging import get_logger
from cashcrash.domain import MAX_DIVIDEND, Company, quantize
from cashcrash.repositories import Storage
from cashcrash.schemas.market import CompanyLogoResponse, CompanyPriceUpdate, LogoUpdateRequest
from cashcrash.services.pricing import parse_sell_price, resolve_company_prices
from cashcrash.services.uploads import save_optional_image


router = APIRouter(prefix="/companies", tags=["Companies"])

logger = get_logger("api.companies")


def parse_dividend(value: Any) -> Decimal:
    try:
        dividend = Decimal(str(value).strip() or "0")
    except (InvalidOperation, ValueError):
        raise BadRequestError(message="Invalid dividend value", error_code="INVALID_DIVIDEND")
    if not dividend.is_finite() or dividend < 0 or dividend > MAX_DIVIDEND:
        raise BadRequestError(message="Invalid dividend value", error_code="INVALID_DIVIDEND")
    return quantize(dividend, Decimal("0.01"))


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@router.get("", response_model=List[Company])
async def list_companies(storage: Storage = Depends(get_storage)) -> List[Company]:
    return await storage.list_companies()


@router.get("/{company_id}", response_model=Company)
async def get_company(company_id: int, storage: Storage = Depends(get_storage)) -> Company:
    company = await storage.get_company(company_id)
    if company is None:
        raise NotFoundError(message="Company not found")
    return company


@router.post(
    "",
    response_model=Company,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_company(
    name: str = Form(..., min_length=1),
    symbol: str = Form(..., min_length=1),
    price: Optional[str] = Form(default=None),
    sell_price: Optional[str] = Form(default=None, alias="sellPrice"),
    dividend: str = Form(default="0"),
    description: str = Form(default=""),
    logo_url: Optional[str] = Form(default=None, alias="logoUrl"),
    logo: Optional[UploadFile] = File(default=None),
    storage: Storage = Depends(get_storage),
) -> Company:
    """
    Create a company from a multipart form.

    Either price side may be omitted and is derived from the other.
    An uploaded ``logo`` file takes precedence over ``logoUrl``.
    """
    prices = resolve_company_prices(price, sell_price)
    uploaded = await save_optional_image(logo)

    company = await storage.create_company(
        name=name.strip(),
        symbol=symbol.strip().upper(),
        price=prices.buy,
        sell_price=prices.sell,
        dividend=parse_dividend(dividend),
        description=description,
        logo_url=uploaded or _clean(logo_url),
    )
    logger.info(f"Company {company.symbol} created")
    return company


@router.put(
    "/{company_id}",
    response_model=Company,
    dependencies=[Depends(require_admin)],
)
async def update_company(
    company_id: int,
    name: Optional[str] = Form(default=None),
    symbol: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    sell_price: Optional[str] = Form(default=None, alias="sellPrice"),
    dividend: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    logo_url: Optional[str] = Form(default=None, alias="logoUrl"),
    logo: Optional[UploadFile] = File(default=None),
    storage: Storage = Depends(get_storage),
) -> Company:
    """
    Full company update from a multipart form.

    A new buy ``price`` always recomputes ``sellPrice`` with the default spread.
    """
    if await storage.get_company(company_id) is None:
        raise NotFoundError(message="Company not found")

    changes: dict[str, Any] = {}
    if _clean(name):
        changes["name"] = name.strip()
    if _clean(symbol):
        changes["symbol"] = symbol.strip().upper()
    if _clean(price):
        changes["price"], changes["sell_price"] = resolve_company_prices(price, None)
    elif _clean(sell_price):
        changes["sell_price"] = parse_sell_price(sell_price)
    if _clean(dividend) is not None:
        changes["dividend"] = parse_dividend(dividend)
    if description is not None:
        changes["description"] = description
    if _clean(logo_url):
        changes["logo_url"] = logo_url.strip()

    uploaded = await save_optional_image(logo)
    if uploaded:
        changes["logo_url"] = uploaded

    return await storage.update_company(company_id, changes)


@router.patch(
    "/{company_id}",
    response_model=Company,
    dependencies=[Depends(require_admin)],
)
async def update_company_prices(
    company_id: int,
    payload: CompanyPriceUpdate,
    storage: Storage = Depends(get_storage),
) -> Company:
    """Price-only update used by the bulk price editor."""
    if await storage.get_company(company_id) is None:
        raise NotFoundError(message="Company not found")
    prices = resolve_company_prices(payload.price, payload.sell_price)
    company = await storage.update_company(
        company_id, {"price": prices.buy, "sell_price": prices.sell}
    )
    logger.info(f"Prices for {company.symbol} set to {prices.buy}/{prices.sell}")
    return company


@router.put(
    "/{company_id}/logo",
    response_model=CompanyLogoResponse,
    dependencies=[Depends(require_admin)],
)
async def update_company_logo(
    company_id: int,
    payload: LogoUpdateRequest,
    storage: Storage = Depends(get_storage),
) -> CompanyLogoResponse:
    if await storage.get_company(company_id) is None:
        raise NotFoundError(message="Company not found")
    company = await storage.update_company(company_id, {"logo_url": payload.logo_url})
    return CompanyLogoResponse(company=company, logo_path=payload.logo_url)


@router.delete(
    "/{company_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_company(company_id: int, storage: Storage = Depends(get_storage)) -> Response:
    """Delete a company; team share rows stay in the ledger as orphans."""
    if not await storage.delete_company(company_id):
        raise NotFoundError(message="Company not found")
    logger.info(f"Company {company_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
