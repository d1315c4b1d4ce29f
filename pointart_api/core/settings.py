from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DESCRIPTION = (
    "Inventory and point-of-sale backend for Point Art Hub: stationery, gift store, "
    "embroidery, machines and art services, with sales, customers, invoices, "
    "analytics, notifications and backups."
)


class AppSettings(BaseSettings):
    """
    Service configuration read from the environment (and a local .env file).

    Database connection settings live separately in pointart_api.db.config.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Point Art Hub API"
    APP_DESCRIPTION: str = _DESCRIPTION
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Optional[str] = Field(default=None, description="dev, test or prod")
    LOG_LEVEL: str = "INFO"

    # Comma-separated lists are accepted for all CORS values.
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])

    USE_MOCK_DB: bool = Field(default=False, description="Serve data from the in-memory store instead of PostgreSQL.")
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default=True, description="alembic upgrade head when the app starts.")
    AUTO_SEED: bool = Field(default=False, description="Insert demo inventory on startup.")

    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    REQUEST_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, description="Per-attempt timeout for data calls.")
    RETRY_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BASE_DELAY_SECONDS: float = Field(default=1.0, ge=0)

    DASHBOARD_REFRESH_SECONDS: float = Field(default=30.0, gt=0)

    CURRENCY_CODE: str = "UGX"
    LOW_STOCK_THRESHOLD: int = Field(default=10, ge=0)
    DAILY_SALES_TARGET: float = 500_000
    WEEKLY_SALES_TARGET: float = 3_000_000
    MONTHLY_SALES_TARGET: float = 12_000_000
    MAX_NOTIFICATIONS: int = Field(default=100, ge=1)

    @field_validator("CORS_ORIGINS", "CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS", mode="before")
    @classmethod
    def _split_list(cls, value):
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",") if part.strip()]
        return value or ["*"]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Process-wide settings; call `get_app_settings.cache_clear()` after changing the environment."""
    return AppSettings()
