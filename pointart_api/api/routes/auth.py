"""
Sign-up, sign-in and session lifecycle.

Sign-in opens a session row; the access and refresh tokens both point at it,
so signing out (deleting the row) invalidates both at once.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.security import OAuth2PasswordRequestForm

from pointart_api.core.deps import get_current_active_user, get_data_client
from pointart_api.db.client import DataClient
from pointart_api.schemas.auth import ProfileUpdate, RefreshRequest, RegisterRequest, TokenPair, UserRead
from pointart_api.schemas.common import MessageResponse
from pointart_api.services.base import Actor
from pointart_api.services.users import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _signed_in(
    actor: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> AuthService:
    return AuthService(client, actor)


# PUBLIC_INTERFACE
@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED, summary="Register")
async def register(payload: RegisterRequest, client: DataClient = Depends(get_data_client)) -> UserRead:
    """Create an account. On an empty installation the first account is made admin."""
    return await AuthService(client).sign_up(payload)


# PUBLIC_INTERFACE
@router.post("/login", response_model=TokenPair, summary="Sign in")
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    user_agent: Optional[str] = Header(None),
    client: DataClient = Depends(get_data_client),
) -> TokenPair:
    """OAuth2 password form; `username` carries the email address."""
    return await AuthService(client).sign_in(form.username, form.password, user_agent=user_agent)


# PUBLIC_INTERFACE
@router.post("/refresh", response_model=TokenPair, summary="Refresh tokens")
async def refresh(payload: RefreshRequest, client: DataClient = Depends(get_data_client)) -> TokenPair:
    """New token pair for the same session; the session's expiry moves forward."""
    return await AuthService(client).refresh(payload.refresh_token)


# PUBLIC_INTERFACE
@router.post("/logout", response_model=MessageResponse, summary="Sign out")
async def logout(auth: AuthService = Depends(_signed_in)) -> MessageResponse:
    await auth.sign_out()
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserRead, summary="Current user")
async def read_me(auth: AuthService = Depends(_signed_in)) -> UserRead:
    return await auth.current_user()


# PUBLIC_INTERFACE
@router.patch("/me", response_model=UserRead, summary="Update own profile")
async def update_me(payload: ProfileUpdate, auth: AuthService = Depends(_signed_in)) -> UserRead:
    """Display name and sales initials only; role and status are admin-managed."""
    return await auth.update_own_profile(payload)
