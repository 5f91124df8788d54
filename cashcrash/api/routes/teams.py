"""Team, portfolio and self-service trading routes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from cashcrash.api.dependencies import (
    ensure_team_access,
    get_session_data,
    get_storage,
    is_admin_session,
    require_admin,
    require_session,
)
from cashcrash.core.config import settings
from cashcrash.core.exceptions import BadRequestError, NotFoundError
from cashcrash.core.logging import get_logger
from cashcrash.core.security import SessionData
from cashcrash.domain import CASH_SCALE, MAX_CASH, quantize
from cashcrash.repositories import Storage
from cashcrash.schemas.teams import PortfolioResponse, TeamCreate, TeamResponse, TeamUpdate
from cashcrash.schemas.trading import (
    CurrencyTradeRequest,
    CurrencyTradeResponse,
    LegacyTradeRequest,
    LegacyTradeResponse,
    StockTradeRequest,
    StockTradeResponse,
    TransactionSummary,
)
from cashcrash.services import trading
from cashcrash.services.uploads import save_optional_image


router = APIRouter(prefix="/teams", tags=["Teams"])

logger = get_logger("api.teams")


def _parse_cash(value: str) -> Decimal:
    try:
        cash = Decimal(value.strip())
    except (InvalidOperation, ValueError):
        raise BadRequestError(message="Invalid cash balance", error_code="INVALID_CASH_BALANCE")
    if not cash.is_finite() or cash < 0 or cash > MAX_CASH:
        raise BadRequestError(message="Invalid cash balance", error_code="INVALID_CASH_BALANCE")
    return quantize(cash, CASH_SCALE)


# =============================================================================
# Teams
# =============================================================================


@router.get("", response_model=List[TeamResponse])
async def list_teams(
    storage: Storage = Depends(get_storage),
    session_data: SessionData | None = Depends(get_session_data),
) -> List[TeamResponse]:
    include_code = is_admin_session(session_data)
    return [TeamResponse.from_team(t, include_code) for t in await storage.list_teams()]


@router.get(
    "/portfolios",
    response_model=List[PortfolioResponse],
    dependencies=[Depends(require_admin)],
)
async def list_portfolios(storage: Storage = Depends(get_storage)) -> List[PortfolioResponse]:
    """Portfolio snapshot of every team for the admin overview."""
    return [
        PortfolioResponse.from_portfolio(p, include_access_code=True)
        for p in await storage.list_portfolios()
    ]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: int,
    storage: Storage = Depends(get_storage),
    session_data: SessionData | None = Depends(get_session_data),
) -> TeamResponse:
    team = await storage.get_team(team_id)
    if team is None:
        raise NotFoundError(message="Team not found")
    return TeamResponse.from_team(team, is_admin_session(session_data))


@router.get("/{team_id}/portfolio", response_model=PortfolioResponse)
async def get_team_portfolio(
    team_id: int,
    storage: Storage = Depends(get_storage),
    session_data: SessionData | None = Depends(get_session_data),
) -> PortfolioResponse:
    portfolio = await storage.get_team_portfolio(team_id)
    if portfolio is None:
        raise NotFoundError(message="Team not found")
    return PortfolioResponse.from_portfolio(portfolio, is_admin_session(session_data))


@router.post(
    "",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_team(
    payload: TeamCreate,
    storage: Storage = Depends(get_storage),
) -> TeamResponse:
    team = await storage.create_team(
        name=payload.name,
        access_code=payload.access_code,
        cash_balance=(
            payload.cash_balance
            if payload.cash_balance is not None
            else settings.default_cash_balance
        ),
        profile_pic_url=payload.profile_pic_url,
    )
    logger.info(f"Team {team.id} created")
    return TeamResponse.from_team(team, include_access_code=True)


@router.put(
    "/{team_id}",
    response_model=TeamResponse,
    dependencies=[Depends(require_admin)],
)
async def update_team(
    team_id: int,
    name: Optional[str] = Form(default=None),
    access_code: Optional[str] = Form(default=None, alias="accessCode"),
    cash_balance: Optional[str] = Form(default=None, alias="cashBalance"),
    profile_pic_url: Optional[str] = Form(default=None, alias="profilePicUrl"),
    profile_pic: Optional[UploadFile] = File(default=None, alias="profilePic"),
    storage: Storage = Depends(get_storage),
) -> TeamResponse:
    """Full team update from a multipart form with an optional ``profilePic`` file."""
    if await storage.get_team(team_id) is None:
        raise NotFoundError(message="Team not found")

    changes: dict[str, Any] = {}
    if name and name.strip():
        changes["name"] = name.strip()
    if access_code and access_code.strip():
        changes["access_code"] = access_code.strip()
    if cash_balance and cash_balance.strip():
        changes["cash_balance"] = _parse_cash(cash_balance)
    if profile_pic_url and profile_pic_url.strip():
        changes["profile_pic_url"] = profile_pic_url.strip()

    uploaded = await save_optional_image(profile_pic)
    if uploaded:
        changes["profile_pic_url"] = uploaded

    team = await storage.update_team(team_id, changes)
    return TeamResponse.from_team(team, include_access_code=True)


@router.patch(
    "/{team_id}",
    response_model=TeamResponse,
    dependencies=[Depends(require_admin)],
)
async def patch_team(
    team_id: int,
    payload: TeamUpdate,
    storage: Storage = Depends(get_storage),
) -> TeamResponse:
    changes = payload.model_dump(exclude_unset=True)
    if "cash_balance" in changes and changes["cash_balance"] is not None:
        changes["cash_balance"] = quantize(changes["cash_balance"], CASH_SCALE)
    changes = {k: v for k, v in changes.items() if v is not None or k == "profile_pic_url"}
    team = await storage.update_team(team_id, changes)
    return TeamResponse.from_team(team, include_access_code=True)


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_team(team_id: int, storage: Storage = Depends(get_storage)) -> Response:
    """Delete a team with its ledgers and startup."""
    if not await storage.delete_team(team_id):
        raise NotFoundError(message="Team not found")
    logger.info(f"Team {team_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Trading
# =============================================================================


@router.post(
    "/{team_id}/stocks/trade",
    response_model=StockTradeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def trade_stock(
    team_id: int,
    payload: StockTradeRequest,
    storage: Storage = Depends(get_storage),
    session_data: SessionData = Depends(require_session),
) -> StockTradeResponse:
    """Buy at ``price`` or sell at ``sellPrice``."""
    ensure_team_access(session_data, team_id)
    result = await trading.trade_stock(
        storage, team_id, payload.company_id, payload.shares, payload.action
    )
    return StockTradeResponse(
        action=result.action,
        shares=result.shares,
        price=result.price,
        total=result.total,
        team=TeamResponse.from_team(result.settlement.team),
    )


@router.post(
    "/{team_id}/currencies/trade",
    response_model=CurrencyTradeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def trade_currency(
    team_id: int,
    payload: CurrencyTradeRequest,
    storage: Storage = Depends(get_storage),
    session_data: SessionData = Depends(require_session),
) -> CurrencyTradeResponse:
    """Buy at ``rate`` or sell at ``sellRate``."""
    ensure_team_access(session_data, team_id)
    result = await trading.trade_currency(
        storage, team_id, payload.currency_id, payload.amount, payload.action
    )
    return CurrencyTradeResponse(
        action=result.action,
        amount=result.amount,
        rate=result.rate,
        total=result.total,
        team=TeamResponse.from_team(result.settlement.team),
    )


@router.post("/{team_id}/trade", response_model=LegacyTradeResponse)
async def legacy_trade(
    team_id: int,
    payload: LegacyTradeRequest,
    storage: Storage = Depends(get_storage),
    session_data: SessionData = Depends(require_session),
) -> LegacyTradeResponse:
    """Stock trade returning the refreshed portfolio and a transaction summary."""
    ensure_team_access(session_data, team_id)
    result = await trading.trade_stock(
        storage, team_id, payload.company_id, payload.shares, payload.type
    )
    portfolio = await trading.portfolio_after_trade(storage, team_id)
    return LegacyTradeResponse(
        portfolio=PortfolioResponse.from_portfolio(portfolio, session_data.is_admin),
        transaction=TransactionSummary(
            type=result.action,
            company_name=result.company.name,
            shares=result.shares,
            price=result.price,
            total=result.total,
        ),
    )
