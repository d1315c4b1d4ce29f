from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pointart_api.core.settings import get_app_settings
from .client import DataClient
from .config import get_database_settings
from .mock_client import get_mock_client
from .sql_client import SqlDataClient


@lru_cache(maxsize=1)
def session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions bound to the shared engine, created on first use."""
    db = get_database_settings()
    engine = create_async_engine(db.async_url, echo=db.SQL_ECHO, pool_pre_ping=True)
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


# PUBLIC_INTERFACE
@asynccontextmanager
async def data_client_scope() -> AsyncIterator[DataClient]:
    """
    Yield the DataClient the configuration selects.

    USE_MOCK_DB gives the process-wide in-memory store. Otherwise an
    SqlDataClient wraps a fresh session that is closed on exit.
    """
    settings = get_app_settings()
    if settings.USE_MOCK_DB:
        yield get_mock_client()
        return

    async with session_factory()() as session:
        yield SqlDataClient(
            session,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            max_attempts=settings.RETRY_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY_SECONDS,
        )
