from __future__ import annotations

import logging
from typing import AsyncContextManager, AsyncGenerator, Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from pointart_api.core.logging import user_id_var
from pointart_api.core.security import decode_token
from pointart_api.db.client import DataClient
from pointart_api.db.session import data_client_scope
from pointart_api.repositories.security import SecurityRepository
from pointart_api.services.base import Actor
from pointart_api.services.users import session_expired

logger = logging.getLogger(__name__)

# Bearer tokens come from the password-form login route.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# PUBLIC_INTERFACE
async def get_data_client() -> AsyncGenerator[DataClient, None]:
    """
    Yield the DataClient for one request.

    PostgreSQL-backed unless USE_MOCK_DB is set; tests override this
    dependency with a fresh in-memory client.
    """
    async with data_client_scope() as client:
        yield client


ClientScope = Callable[[], AsyncContextManager[DataClient]]


# PUBLIC_INTERFACE
def get_client_scope() -> ClientScope:
    """
    Give long-lived handlers (sockets) a way to open a short DataClient scope
    per unit of work instead of holding one session for the whole connection.
    """
    return data_client_scope


# PUBLIC_INTERFACE
async def resolve_actor(
    client: DataClient,
    token: str,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Actor:
    """
    Validate an access token against its sign-in session and load the user.

    Raises:
        HTTPException: 401 when the token, session or user is not valid.
    """
    try:
        payload = decode_token(token, "access")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user_id, session_id = payload["sub"], payload["sid"]

    repo = SecurityRepository(client)
    session = await repo.get_session(str(session_id))
    if not session or str(session["user_id"]) != str(user_id) or session_expired(session):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has ended")

    user = await repo.get_user_by_id(str(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    profile = await repo.get_profile(str(user_id)) or {}

    user_id_var.set(str(user_id))
    return Actor(
        user_id=str(user["id"]),
        email=user["email"],
        role=profile.get("role") or "user",
        full_name=profile.get("full_name"),
        session_id=str(session_id),
        ip_address=ip_address,
        user_agent=user_agent,
        is_active=bool(user.get("is_active", True)),
    )


# PUBLIC_INTERFACE
async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    client: DataClient = Depends(get_data_client),
) -> Actor:
    """Resolve and return the current user from the Authorization bearer token."""
    return await resolve_actor(
        client,
        token,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


# PUBLIC_INTERFACE
async def get_current_active_user(user: Actor = Depends(get_current_user)) -> Actor:
    """Reject deactivated accounts with 403."""
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """
    Create a dependency that requires the current user to have one of the specified roles.
    """

    async def _dep(user: Actor = Depends(get_current_active_user)) -> Actor:
        if user.role not in set(required):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return _dep
