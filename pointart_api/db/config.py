from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

_DRIVER_PREFIX = re.compile(r"^postgres(?:ql)?(?:\+\w+)?://")


class DatabaseSettings(BaseSettings):
    """
    PostgreSQL connection settings.

    POSTGRES_URL wins when set; otherwise the URL is assembled from
    POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB, POSTGRES_HOST and POSTGRES_PORT.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    POSTGRES_URL: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    SQL_ECHO: bool = False

    def _url_with_driver(self, driver: str) -> str:
        if self.POSTGRES_URL:
            return _DRIVER_PREFIX.sub(f"{driver}://", self.POSTGRES_URL)
        missing = [
            name
            for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"Database configuration incomplete (missing {', '.join(missing)}); "
                "set POSTGRES_URL or run with USE_MOCK_DB=true"
            )
        return (
            f"{driver}://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def async_url(self) -> str:
        """URL for the asyncpg-backed AsyncEngine."""
        return self._url_with_driver("postgresql+asyncpg")

    @property
    def offline_url(self) -> str:
        """Driverless URL used when Alembic renders SQL without connecting."""
        return self._url_with_driver("postgresql")


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()
