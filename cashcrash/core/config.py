"""Application settings with Pydantic validation and environment loading."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Cash or Crash API"
    app_version: str = "1.0.0"
    debug: bool = Field(
        default=False, description="Enable debug mode (disable in production)"
    )
    root_path: str = Field(default="", description="Root path for reverse proxy")
    environment: str = Field(
        default="development",
        description="Environment: development, production",
    )
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=5000, ge=1, le=65535, description="Bind port")

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection URL (settings persistence, postgres backend)",
    )
    db_pool_min_size: int = Field(
        default=2, ge=1, le=20, description="Minimum database pool connections"
    )
    db_pool_max_size: int = Field(
        default=10, ge=2, le=100, description="Maximum database pool connections"
    )

    # Storage
    storage_backend: str = Field(
        default="memory", description="Storage backend: memory or postgres"
    )
    seed_demo_data: bool = Field(
        default=True, description="Seed demo companies, currencies and teams"
    )

    # Sessions
    session_secret: str = Field(
        default="cashcrash-dev-secret-please-change-in-production",
        description="Secret key for signing session tokens",
    )
    session_ttl_hours: int = Field(
        default=24, ge=1, description="Session cookie lifetime in hours"
    )
    domain: Optional[str] = Field(default=None, description="Cookie domain")
    https_enabled: bool = Field(default=False, description="Enable secure cookies")

    # Admin - env var is ADMIN_PASSWORD
    admin_password: str = Field(default="admin123", min_length=1, alias="ADMIN_PASSWORD")

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:5000"],
        description="Allowed CORS origins (no wildcards with credentials)",
    )

    # Uploads
    upload_dir: Optional[str] = Field(
        default=None, description="Upload directory (defaults per environment)"
    )
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1024, description="Maximum upload size in bytes"
    )

    # Market rules
    default_cash_balance: Decimal = Field(
        default=Decimal("50000.00"), ge=0, description="Cash balance for new teams"
    )
    sell_spread_factor: Decimal = Field(
        default=Decimal("0.98"),
        gt=0,
        le=1,
        description="Sell side = buy side x factor when only one side is given",
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR"
    )
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        lower = v.strip().lower()
        if lower not in {"memory", "postgres"}:
            raise ValueError("storage_backend must be 'memory' or 'postgres'")
        return lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return upper

    @model_validator(mode="after")
    def check_backend_has_database(self) -> "Settings":
        if self.storage_backend == "postgres" and not self.database_url:
            raise ValueError("STORAGE_BACKEND=postgres requires DATABASE_URL")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_database(self) -> bool:
        return bool(self.database_url)

    @property
    def resolved_upload_dir(self) -> str:
        if self.upload_dir:
            return self.upload_dir
        return "/tmp/uploads" if self.is_production else "uploads"


@lru_cache
def get_settings() -> Settings:
    """Cached settings factory."""
    return Settings()


settings = get_settings()
