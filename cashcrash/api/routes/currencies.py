"""Currency routes."""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from cashcrash.api.dependencies import get_storage, require_admin
from cashcrash.core.exceptions import NotFoundError
from cashcrash.core.logging import get_logger
from cashcrash.domain import Currency
from cashcrash.repositories import Storage
from cashcrash.schemas.market import CurrencyLogoResponse, CurrencyRateUpdate, LogoUpdateRequest
from cashcrash.services.pricing import parse_sell_rate, resolve_currency_rates
from cashcrash.services.uploads import save_optional_image


router = APIRouter(prefix="/currencies", tags=["Currencies"])

logger = get_logger("api.currencies")


def _filled(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


@router.get("", response_model=List[Currency])
async def list_currencies(storage: Storage = Depends(get_storage)) -> List[Currency]:
    return await storage.list_currencies()


@router.get("/{currency_id}", response_model=Currency)
async def get_currency(currency_id: int, storage: Storage = Depends(get_storage)) -> Currency:
    currency = await storage.get_currency(currency_id)
    if currency is None:
        raise NotFoundError(message="Currency not found")
    return currency


@router.post(
    "",
    response_model=Currency,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_currency(
    name: str = Form(..., min_length=1),
    code: str = Form(..., min_length=1),
    rate: Optional[str] = Form(default=None),
    sell_rate: Optional[str] = Form(default=None, alias="sellRate"),
    logo_url: Optional[str] = Form(default=None, alias="logoUrl"),
    logo: Optional[UploadFile] = File(default=None),
    storage: Storage = Depends(get_storage),
) -> Currency:
    rates = resolve_currency_rates(rate, sell_rate)
    uploaded = await save_optional_image(logo)

    currency = await storage.create_currency(
        name=name.strip(),
        code=code.strip().upper(),
        rate=rates.buy,
        sell_rate=rates.sell,
        logo_url=uploaded or (logo_url.strip() if _filled(logo_url) else None),
    )
    logger.info(f"Currency {currency.code} created")
    return currency


@router.put(
    "/{currency_id}",
    response_model=Currency,
    dependencies=[Depends(require_admin)],
)
async def update_currency(
    currency_id: int,
    name: Optional[str] = Form(default=None),
    code: Optional[str] = Form(default=None),
    rate: Optional[str] = Form(default=None),
    sell_rate: Optional[str] = Form(default=None, alias="sellRate"),
    logo_url: Optional[str] = Form(default=None, alias="logoUrl"),
    logo: Optional[UploadFile] = File(default=None),
    storage: Storage = Depends(get_storage),
) -> Currency:
    """Full currency update; a new buy ``rate`` recomputes ``sellRate``."""
    if await storage.get_currency(currency_id) is None:
        raise NotFoundError(message="Currency not found")

    changes: dict[str, Any] = {}
    if _filled(name):
        changes["name"] = name.strip()
    if _filled(code):
        changes["code"] = code.strip().upper()
    if _filled(rate):
        changes["rate"], changes["sell_rate"] = resolve_currency_rates(rate, None)
    elif _filled(sell_rate):
        changes["sell_rate"] = parse_sell_rate(sell_rate)
    if _filled(logo_url):
        changes["logo_url"] = logo_url.strip()

    uploaded = await save_optional_image(logo)
    if uploaded:
        changes["logo_url"] = uploaded

    return await storage.update_currency(currency_id, changes)


@router.patch(
    "/{currency_id}",
    response_model=Currency,
    dependencies=[Depends(require_admin)],
)
async def update_currency_rates(
    currency_id: int,
    payload: CurrencyRateUpdate,
    storage: Storage = Depends(get_storage),
) -> Currency:
    if await storage.get_currency(currency_id) is None:
        raise NotFoundError(message="Currency not found")
    rates = resolve_currency_rates(payload.rate, payload.sell_rate)
    currency = await storage.update_currency(
        currency_id, {"rate": rates.buy, "sell_rate": rates.sell}
    )
    logger.info(f"Rates for {currency.code} set to {rates.buy}/{rates.sell}")
    return currency


@router.put(
    "/{currency_id}/logo",
    response_model=CurrencyLogoResponse,
    dependencies=[Depends(require_admin)],
)
async def update_currency_logo(
    currency_id: int,
    payload: LogoUpdateRequest,
    storage: Storage = Depends(get_storage),
) -> CurrencyLogoResponse:
    if await storage.get_currency(currency_id) is None:
        raise NotFoundError(message="Currency not found")
    currency = await storage.update_currency(currency_id, {"logo_url": payload.logo_url})
    return CurrencyLogoResponse(currency=currency, logo_path=payload.logo_url)


@router.delete(
    "/{currency_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_currency(currency_id: int, storage: Storage = Depends(get_storage)) -> Response:
    """Delete a currency; team currency rows stay in the ledger as orphans."""
    if not await storage.delete_currency(currency_id):
        raise NotFoundError(message="Currency not found")
    logger.info(f"Currency {currency_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
