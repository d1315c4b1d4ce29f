"""
Point Art Hub API application.

REST routes live under /api/v1; the dashboard socket is served at /ws/dashboard.
Every response carries an X-Correlation-ID header and every error uses the
ErrorResponse envelope.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pointart_api.api.errors import install_error_handlers
from pointart_api.api.routes import (
    analytics,
    auth,
    backup,
    customers,
    dashboard,
    inventory,
    invoices,
    notifications,
    reports,
    sales,
    system,
    users,
)
from pointart_api.core.logging import configure_logging, request_context
from pointart_api.core.settings import AppSettings, get_app_settings
from pointart_api.db.run_migrations import main as run_alembic
from pointart_api.db.seed import seed_all
from pointart_api.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Sign up, sign in, token refresh, sign out and the current profile."},
    {"name": "Users", "description": "Admin management of profiles, roles and account status."},
    {"name": "Inventory", "description": "Stationery, gift store, embroidery, machines and art services."},
    {"name": "Sales", "description": "Stationery sales and gift store daily sales."},
    {"name": "Customers", "description": "Customer records and summary."},
    {"name": "Invoices", "description": "Invoices, line items and printable PDFs."},
    {"name": "Analytics", "description": "Dashboard statistics and sales analytics."},
    {"name": "Notifications", "description": "Stored notifications plus the low-stock and milestone checks."},
    {"name": "Reports", "description": "Dataset exports as CSV, Excel or PDF."},
    {"name": "Backup", "description": "Full JSON backups, validation and restore."},
    {"name": "System", "description": "Audit log and app settings."},
    {"name": "WebSocket", "description": "How to connect to the dashboard socket."},
]

DOMAIN_ROUTERS = (auth, users, inventory, sales, customers, invoices, analytics, notifications, reports, backup, system)


def _cors_credentials(settings: AppSettings) -> bool:
    # Browsers reject credentialed requests to a wildcard origin.
    if settings.CORS_ORIGINS == ["*"] and settings.CORS_ALLOW_CREDENTIALS:
        logger.warning("Ignoring CORS_ALLOW_CREDENTIALS because CORS_ORIGINS is '*'")
        return False
    return settings.CORS_ALLOW_CREDENTIALS


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    await _prepare_database()
    yield


async def _prepare_database() -> None:
    settings = get_app_settings()
    if settings.USE_MOCK_DB:
        logger.info("Using the in-memory mock database; migrations skipped")
    elif settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            # env.py drives its own event loop, so it cannot share this one.
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Database schema is at head")
        except Exception:
            # The service still starts; data calls will surface the failure.
            logger.exception("Alembic upgrade failed")

    if settings.AUTO_SEED:
        try:
            await seed_all()
        except Exception:
            logger.exception("Seeding failed")


def _build_v1_router() -> APIRouter:
    v1 = APIRouter(prefix="/api/v1")

    # PUBLIC_INTERFACE
    @v1.get("/health", response_model=MessageResponse, summary="Health Check", tags=["Health"])
    def health_check() -> MessageResponse:
        """Liveness check naming the active storage backend."""
        backend = "mock" if get_app_settings().USE_MOCK_DB else "postgresql"
        return MessageResponse(message="Healthy", details={"backend": backend})

    for module in DOMAIN_ROUTERS:
        v1.include_router(module.router)
    return v1


# PUBLIC_INTERFACE
def create_app() -> FastAPI:
    """Assemble the FastAPI application from the current settings."""
    settings = get_app_settings()
    configure_logging(settings.LOG_LEVEL)

    application = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=OPENAPI_TAGS,
        lifespan=_lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=_cors_credentials(settings),
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    @application.middleware("http")
    async def correlate(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or request.headers.get("X-Request-ID") or str(uuid4())
        request.state.correlation_id = correlation_id
        with request_context(correlation_id):
            logger.info("%s %s", request.method, request.url.path)
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    install_error_handlers(application)

    application.include_router(_build_v1_router())
    application.include_router(dashboard.router)
    return application


app = create_app()
