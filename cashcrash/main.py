"""Main application entry point with app factory and lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from cashcrash.api.app import create_api_app, start_storage, stop_storage
from cashcrash.core.config import settings
from cashcrash.core.logging import get_logger, setup_logging
from cashcrash.services.uploads import upload_dir


logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    # Mounted apps do not run their own lifespan
    await start_storage()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_storage()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create the main FastAPI application."""
    api_app = create_api_app()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Mount API
    app.mount("/api", api_app)

    # Uploaded logos and profile pictures
    app.mount("/uploads", StaticFiles(directory=str(upload_dir())), name="uploads")

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": settings.app_version}

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/api/docs" if settings.debug else None,
            "health": "/api/health",
        }

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cashcrash.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
