"""Admin routes: portfolio bookkeeping, dividends, cash and credentials.

All endpoints require an admin session.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, status

from cashcrash.api.dependencies import get_storage, require_admin
from cashcrash.domain import TeamCurrency, TeamStock
from cashcrash.repositories import Storage
from cashcrash.schemas.admin import (
    CredentialUpdateResponse,
    UpdateAdminPasswordRequest,
    UpdateTeamNameRequest,
    UpdateTeamPasswordRequest,
)
from cashcrash.schemas.common import SuccessResponse
from cashcrash.schemas.teams import TeamResponse
from cashcrash.schemas.trading import (
    AdjustCashRequest,
    AssignCurrencyRequest,
    AssignStockRequest,
    DividendResponse,
)
from cashcrash.services import auth as auth_service
from cashcrash.services import trading


router = APIRouter(dependencies=[Depends(require_admin)])


# =============================================================================
# Bookkeeping
# =============================================================================


@router.post(
    "/assign-stock",
    response_model=TeamStock,
    status_code=status.HTTP_201_CREATED,
)
async def assign_stock(
    payload: AssignStockRequest,
    storage: Storage = Depends(get_storage),
) -> TeamStock:
    """Give shares to a team at the buy price, without a balance check."""
    result = await trading.assign_stock(storage, payload.team_id, payload.company_id, payload.shares)
    return result.settlement.entry


@router.post("/unassign-stock", response_model=SuccessResponse)
async def unassign_stock(
    payload: AssignStockRequest,
    storage: Storage = Depends(get_storage),
) -> SuccessResponse:
    """Take shares back at the sell price; the team must hold them."""
    await trading.unassign_stock(storage, payload.team_id, payload.company_id, payload.shares)
    return SuccessResponse(success=True)


@router.post(
    "/assign-currency",
    response_model=TeamCurrency,
    status_code=status.HTTP_201_CREATED,
)
async def assign_currency(
    payload: AssignCurrencyRequest,
    storage: Storage = Depends(get_storage),
) -> TeamCurrency:
    result = await trading.assign_currency(
        storage, payload.team_id, payload.currency_id, payload.amount
    )
    return result.settlement.entry


@router.post("/unassign-currency", response_model=SuccessResponse)
async def unassign_currency(
    payload: AssignCurrencyRequest,
    storage: Storage = Depends(get_storage),
) -> SuccessResponse:
    await trading.unassign_currency(
        storage, payload.team_id, payload.currency_id, payload.amount
    )
    return SuccessResponse(success=True)


@router.post("/distribute-dividend/{company_id}", response_model=DividendResponse)
async def distribute_dividend(
    company_id: int,
    storage: Storage = Depends(get_storage),
) -> DividendResponse:
    """Pay the company's dividend percentage as extra shares to every holder."""
    result = await trading.distribute_dividend(storage, company_id)
    return DividendResponse(
        total_distributed=Decimal(result.total_distributed).quantize(Decimal("0.01")),
        affected_teams=result.affected_teams,
        dividend_rate=result.dividend_rate,
    )


@router.post("/adjust-cash", response_model=TeamResponse)
async def adjust_cash(
    payload: AdjustCashRequest,
    storage: Storage = Depends(get_storage),
) -> TeamResponse:
    team = await trading.adjust_cash(storage, payload.team_id, payload.amount, payload.direction)
    return TeamResponse.from_team(team, include_access_code=True)


# =============================================================================
# Credentials
# =============================================================================


@router.put("/update-team-password", response_model=CredentialUpdateResponse)
async def update_team_password(
    payload: UpdateTeamPasswordRequest,
    storage: Storage = Depends(get_storage),
) -> CredentialUpdateResponse:
    team = await auth_service.update_team_access_code(
        storage, payload.team_id, payload.new_access_code
    )
    return CredentialUpdateResponse(
        message="Team access code updated successfully",
        team=TeamResponse.from_team(team, include_access_code=True),
    )


@router.put("/update-admin-password", response_model=CredentialUpdateResponse)
async def update_admin_password(
    payload: UpdateAdminPasswordRequest,
    storage: Storage = Depends(get_storage),
) -> CredentialUpdateResponse:
    persisted = await auth_service.update_admin_password(storage, payload.new_password)
    return CredentialUpdateResponse(
        message="Admin password updated successfully",
        persisted=persisted,
    )


@router.put("/update-team-name", response_model=CredentialUpdateResponse)
async def update_team_name(
    payload: UpdateTeamNameRequest,
    storage: Storage = Depends(get_storage),
) -> CredentialUpdateResponse:
    team = await auth_service.update_team_name(storage, payload.team_id, payload.new_name)
    return CredentialUpdateResponse(
        message="Team name updated successfully",
        team=TeamResponse.from_team(team, include_access_code=True),
    )
