"""API application factory."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cashcrash.core.config import settings
from cashcrash.core.exceptions import register_exception_handlers
from cashcrash.core.logging import bind_session, get_logger, request_id_var
from cashcrash.schemas.common import ErrorResponse

from .routes import (
    admin,
    auth,
    companies,
    currencies,
    health,
    startups,
    teams,
)


logger = get_logger("api")

MAX_REQUEST_ID_LENGTH = 64

# The dashboard polls these every few seconds
QUIET_PATHS = ("/health",)


async def start_storage() -> None:
    """Initialize the storage backend and load demo data into an empty store."""
    from cashcrash.repositories import get_storage
    from cashcrash.services.seed import seed_demo_data

    storage = get_storage()
    await storage.initialize()
    logger.info(f"Storage backend: {type(storage).__name__}")

    if settings.seed_demo_data:
        await seed_demo_data(storage)


async def stop_storage() -> None:
    from cashcrash.database.connection import close_database
    from cashcrash.repositories import get_storage

    await get_storage().close()
    await close_database()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await start_storage()
    yield
    await stop_storage()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers for a JSON API serving per-team balances."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        if settings.https_enabled:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request id and reset the session log context."""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming[:MAX_REQUEST_ID_LENGTH] if incoming else uuid.uuid4().hex
        request.state.request_id = request_id
        request_id_var.set(request_id)
        bind_session(None, None)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request; health polls only at DEBUG."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.monotonic()
        response = await call_next(request)
        duration = time.monotonic() - start_time

        # Path only; query strings are not logged
        path = request.url.path
        if response.status_code >= 500:
            level = logging.WARNING
        elif path.endswith(QUIET_PATHS):
            level = logging.DEBUG
        else:
            level = logging.INFO

        logger.log(
            level,
            f"{request.method} {path} -> {response.status_code} ({duration:.3f}s)",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": int(duration * 1000),
            },
        )
        return response


def create_api_app() -> FastAPI:
    """Create the API application; it is mounted under ``/api`` by the outer app."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Classroom trading simulation API",
        root_path=settings.root_path,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse, "description": "Bad Request"},
            401: {"model": ErrorResponse, "description": "Unauthorized"},
            403: {"model": ErrorResponse, "description": "Forbidden"},
            404: {"model": ErrorResponse, "description": "Not Found"},
            409: {"model": ErrorResponse, "description": "Conflict"},
            500: {"model": ErrorResponse, "description": "Internal Server Error"},
        },
    )

    # Last added is outermost
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # Session cookie requires explicit origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(companies.router)
    app.include_router(currencies.router)
    app.include_router(teams.router)
    app.include_router(startups.router)
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])

    return app
