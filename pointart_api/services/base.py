from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic_core import to_jsonable_python

from pointart_api.db.client import DataClient


@dataclass(frozen=True)
class Actor:
    """The signed-in user a service call acts for, plus request origin for auditing."""
    user_id: str
    email: str
    role: str = "user"
    full_name: Optional[str] = None
    session_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


def jsonable(values: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Dates, datetimes and decimals converted for JSONB storage."""
    if values is None:
        return None
    return to_jsonable_python(values)


class BaseService:
    """
    Base class for services. Holds a data client for use across multiple repositories.

    Services should keep business logic and orchestration, delegating data access
    to repositories.
    """

    def __init__(self, client: DataClient, actor: Optional[Actor] = None) -> None:
        self.client = client
        self.actor = actor
