"""
Storage layer: ORM models, the DataClient interface and its PostgreSQL and
in-memory implementations.
"""

from .base import Base
from .client import DataClient, QueryResult
from .config import DatabaseSettings, get_database_settings
from .session import data_client_scope

# Registers every table on Base.metadata.
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "DataClient",
    "QueryResult",
    "DatabaseSettings",
    "get_database_settings",
    "data_client_scope",
    "models",
]
