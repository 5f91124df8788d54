"""Team startup routes. Deleting a startup sells it for its value."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from cashcrash.api.dependencies import get_storage, require_admin
from cashcrash.core.exceptions import NotFoundError
from cashcrash.domain import CASH_SCALE, TeamStartup, quantize
from cashcrash.repositories import Storage
from cashcrash.schemas.trading import StartupCreate, StartupSaleResponse, StartupUpdate
from cashcrash.services import trading


router = APIRouter(
    prefix="/team-startups",
    tags=["Startups"],
    dependencies=[Depends(require_admin)],
)


@router.post("", response_model=TeamStartup, status_code=status.HTTP_201_CREATED)
async def create_startup(
    payload: StartupCreate,
    storage: Storage = Depends(get_storage),
) -> TeamStartup:
    """Attach a startup to a team; a team holds at most one."""
    return await storage.create_startup(
        team_id=payload.team_id,
        name=payload.name,
        description=payload.description,
        value=payload.value,
        industry=payload.industry,
        risk_level=payload.risk_level,
    )


@router.put("/{startup_id}", response_model=TeamStartup)
async def update_startup(
    startup_id: int,
    payload: StartupUpdate,
    storage: Storage = Depends(get_storage),
) -> TeamStartup:
    if await storage.get_startup(startup_id) is None:
        raise NotFoundError(message="Startup not found")
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "value" in changes:
        changes["value"] = quantize(changes["value"], CASH_SCALE)
    return await storage.update_startup(startup_id, changes)


@router.delete("/{startup_id}", response_model=StartupSaleResponse)
async def sell_startup(
    startup_id: int,
    storage: Storage = Depends(get_storage),
) -> StartupSaleResponse:
    team, startup = await trading.sell_startup(storage, startup_id)
    return StartupSaleResponse(sold_value=startup.value, new_cash_balance=team.cash_balance)
