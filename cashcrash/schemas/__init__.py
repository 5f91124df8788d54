"""Pydantic schemas for API request/response validation."""

from .admin import (
    CredentialUpdateResponse,
    UpdateAdminPasswordRequest,
    UpdateTeamNameRequest,
    UpdateTeamPasswordRequest,
)
from .auth import (
    AdminLoginRequest,
    AdminLoginResponse,
    SessionResponse,
    TeamLoginRequest,
    TeamLoginResponse,
)
from .common import (
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
)
from .market import (
    CompanyLogoResponse,
    CompanyPriceUpdate,
    CurrencyLogoResponse,
    CurrencyRateUpdate,
    LogoUpdateRequest,
)
from .teams import (
    PortfolioResponse,
    TeamCreate,
    TeamResponse,
    TeamUpdate,
)
from .trading import (
    AdjustCashRequest,
    AssignCurrencyRequest,
    AssignStockRequest,
    CurrencyTradeRequest,
    CurrencyTradeResponse,
    DividendResponse,
    LegacyTradeRequest,
    LegacyTradeResponse,
    StartupCreate,
    StartupSaleResponse,
    StartupUpdate,
    StockTradeRequest,
    StockTradeResponse,
    TransactionSummary,
)


__all__ = [
    "AdjustCashRequest",
    "AdminLoginRequest",
    "AdminLoginResponse",
    "AssignCurrencyRequest",
    "AssignStockRequest",
    "CompanyLogoResponse",
    "CompanyPriceUpdate",
    "CredentialUpdateResponse",
    "CurrencyLogoResponse",
    "CurrencyRateUpdate",
    "CurrencyTradeRequest",
    "CurrencyTradeResponse",
    "DividendResponse",
    "ErrorResponse",
    "HealthResponse",
    "LegacyTradeRequest",
    "LegacyTradeResponse",
    "LogoUpdateRequest",
    "PortfolioResponse",
    "SessionResponse",
    "StartupCreate",
    "StartupSaleResponse",
    "StartupUpdate",
    "StockTradeRequest",
    "StockTradeResponse",
    "SuccessResponse",
    "TeamCreate",
    "TeamLoginRequest",
    "TeamLoginResponse",
    "TeamResponse",
    "TeamUpdate",
    "TransactionSummary",
]
