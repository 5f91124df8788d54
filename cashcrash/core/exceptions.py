"""Application errors and the handlers that render them.

Storage and services raise these directly; the API layer never builds error
responses by hand. Every error body has the shape
``{"error": CODE, "message": ..., "status": N, "details"?: {...}}``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception with structured error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return _problem(self.error_code, self.message, self.status_code, self.details)


class BadRequestError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    message = "Bad request"


class AuthenticationError(AppException):
    """Missing, expired or rejected credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTHENTICATION_FAILED"
    message = "Authentication required"


class AuthorizationError(AppException):
    """Valid session without the required role or team."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    message = "You don't have permission to access this resource"


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


class ConflictError(AppException):
    """Duplicate symbol, currency code, team name/access code or startup."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
    message = "Resource conflict"


# =============================================================================
# Trading
# =============================================================================


class InsufficientFundsError(BadRequestError):
    """Cash balance does not cover the trade."""

    error_code = "INSUFFICIENT_FUNDS"
    message = "Insufficient cash balance"


class InsufficientHoldingsError(BadRequestError):
    """Holding is smaller than the quantity being sold."""

    error_code = "INSUFFICIENT_HOLDINGS"
    message = "Insufficient holdings"


# =============================================================================
# Handlers
# =============================================================================


def _problem(
    error_code: str, message: str, status_code: int, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error_code, "message": message, "status": status_code}
    if details:
        body["details"] = details
    return body


def _respond(request: Request, status_code: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={"X-Request-ID": getattr(request.state, "request_id", "unknown")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return _respond(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = _problem(
            "VALIDATION_ERROR",
            "Invalid request data",
            status.HTTP_400_BAD_REQUEST,
            {"errors": jsonable_encoder(exc.errors())},
        )
        return _respond(request, status.HTTP_400_BAD_REQUEST, body)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        from .config import settings

        logging.getLogger("cashcrash.error").exception(
            f"Unhandled exception on {request.method} {request.url.path}"
        )
        message = str(exc) if settings.debug else "An unexpected error occurred"
        body = _problem("INTERNAL_ERROR", message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        return _respond(request, status.HTTP_500_INTERNAL_SERVER_ERROR, body)
