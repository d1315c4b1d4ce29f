from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import JWTError

from pointart_api.core.errors import (
    AuthenticationFailed,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    ValidationFailed,
)
from pointart_api.core.security import (
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from pointart_api.core.settings import get_app_settings
from pointart_api.db.client import Record
from pointart_api.repositories.security import SecurityRepository
from pointart_api.schemas.auth import (
    ProfileUpdate,
    RegisterRequest,
    TokenPair,
    UserCreate,
    UserRead,
    UserUpdate,
)
from .audit import AuditService
from .base import BaseService
from .realtime import broadcast_manager

logger = logging.getLogger(__name__)


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def session_expired(session: Record, now: Optional[datetime] = None) -> bool:
    expires_at = _as_datetime(session.get("expires_at"))
    return expires_at is not None and expires_at <= (now or datetime.now(timezone.utc))


# PUBLIC_INTERFACE
def to_user_read(user: Record, profile: Optional[Record]) -> UserRead:
    """Join an account row with its profile row."""
    profile = profile or {}
    return UserRead(
        id=str(user["id"]),
        email=user["email"],
        full_name=profile.get("full_name"),
        role=profile.get("role") or "user",
        sales_initials=profile.get("sales_initials"),
        is_active=bool(user.get("is_active", True)),
        created_at=user["created_at"],
    )


class AuthService(BaseService):
    """Sign up, sign in, token refresh and sign out against server-side sessions."""

    def _repo(self) -> SecurityRepository:
        return SecurityRepository(self.client)

    # PUBLIC_INTERFACE
    async def sign_up(self, payload: RegisterRequest) -> UserRead:
        """Create an account; the very first account becomes admin."""
        repo = self._repo()
        if await repo.get_user_by_email(payload.email):
            raise ConflictError("User with this email already exists")
        user = await repo.create_user(email=payload.email, hashed_password=hash_password(payload.password))
        role = "admin" if await repo.count_users() == 1 else "user"
        profile = await repo.create_profile(
            user_id=user["id"], full_name=payload.full_name, role=role, sales_initials=payload.sales_initials
        )
        logger.info("Registered user id=%s role=%s", user["id"], role)
        return to_user_read(user, profile)

    async def _issue(self, user: Record, profile: Optional[Record], session_id: str) -> TokenPair:
        role = (profile or {}).get("role") or "user"
        return TokenPair(
            access_token=issue_token("access", str(user["id"]), session_id, role=role),
            refresh_token=issue_token("refresh", str(user["id"]), session_id),
            session_id=session_id,
        )

    # PUBLIC_INTERFACE
    async def sign_in(self, email: str, password: str, user_agent: Optional[str] = None) -> TokenPair:
        repo = self._repo()
        user = await repo.get_user_by_email(email)
        if not user or not verify_password(password, user["hashed_password"]):
            raise AuthenticationFailed("Invalid credentials")
        if not user.get("is_active", True):
            raise PermissionDenied("User is inactive")

        expires_at = datetime.now(timezone.utc) + timedelta(minutes=get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES)
        session = await repo.create_session(user_id=user["id"], expires_at=expires_at, user_agent=user_agent)
        logger.info("User id=%s signed in; session=%s", user["id"], session["id"])
        return await self._issue(user, await repo.get_profile(user["id"]), str(session["id"]))

    # PUBLIC_INTERFACE
    async def refresh(self, refresh_token: str) -> TokenPair:
        """Issue a new token pair for a live session and extend the session."""
        try:
            claims: Dict[str, Any] = decode_token(refresh_token, "refresh")
        except JWTError:
            raise AuthenticationFailed("Invalid refresh token")

        repo = self._repo()
        session = await repo.get_session(str(claims.get("sid")))
        if not session or str(session["user_id"]) != str(claims.get("sub")) or session_expired(session):
            raise AuthenticationFailed("Session has ended")
        user = await repo.get_user_by_id(str(session["user_id"]))
        if not user or not user.get("is_active", True):
            raise AuthenticationFailed("User not found or inactive")

        expires_at = datetime.now(timezone.utc) + timedelta(minutes=get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES)
        await repo.touch_session(session["id"], expires_at)
        return await self._issue(user, await repo.get_profile(user["id"]), str(session["id"]))

    # PUBLIC_INTERFACE
    async def sign_out(self) -> None:
        """End the actor's session and tell their open connections."""
        if not self.actor or not self.actor.session_id:
            return
        await self._repo().delete_session(self.actor.session_id)
        logger.info("User id=%s signed out; session=%s", self.actor.user_id, self.actor.session_id)
        await broadcast_manager.publish_signed_out(self.actor.user_id, self.actor.session_id)

    async def current_user(self) -> UserRead:
        if not self.actor:
            raise AuthenticationFailed("Not authenticated")
        return await UserService(self.client, self.actor).get_user(self.actor.user_id)

    async def update_own_profile(self, payload: ProfileUpdate) -> UserRead:
        if not self.actor:
            raise AuthenticationFailed("Not authenticated")
        await self._repo().update_profile(self.actor.user_id, **payload.model_dump(exclude_unset=True))
        return await self.current_user()


class UserService(BaseService):
    """Administration of accounts, profiles and roles."""

    def _repo(self) -> SecurityRepository:
        return SecurityRepository(self.client)

    async def _audit(self, action: str, user_id: str, **kwargs) -> None:
        await AuditService(self.client, self.actor).record(action, "profiles", user_id, **kwargs)

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[UserRead]:
        repo = self._repo()
        users = await repo.list_users(limit=limit, offset=offset)
        profiles = {str(p["user_id"]): p for p in await repo.list_profiles()}
        return [to_user_read(u, profiles.get(str(u["id"]))) for u in users]

    async def get_user(self, user_id: str) -> UserRead:
        repo = self._repo()
        user = await repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return to_user_read(user, await repo.get_profile(user_id))

    # PUBLIC_INTERFACE
    async def create_user(self, payload: UserCreate) -> UserRead:
        repo = self._repo()
        if await repo.get_user_by_email(payload.email):
            raise ConflictError("User with this email already exists")
        user = await repo.create_user(
            email=payload.email, hashed_password=hash_password(payload.password), is_active=payload.is_active
        )
        profile = await repo.create_profile(
            user_id=user["id"], full_name=payload.full_name, role=payload.role, sales_initials=payload.sales_initials
        )
        await self._audit(
            "user_create", user["id"],
            new_values={"email": user["email"], "role": payload.role, "full_name": payload.full_name},
        )
        return to_user_read(user, profile)

    async def update_user(self, user_id: str, payload: UserUpdate) -> UserRead:
        before = await self.get_user(user_id)
        changes = payload.model_dump(exclude_unset=True)
        repo = self._repo()
        if "email" in changes and changes["email"]:
            other = await repo.get_user_by_email(changes["email"])
            if other and str(other["id"]) != user_id:
                raise ConflictError("User with this email already exists")
        if changes.get("is_active") is False and self.actor and self.actor.user_id == user_id:
            raise ValidationFailed("You cannot deactivate your own account")

        await repo.update_user(
            user_id,
            email=changes.get("email"),
            hashed_password=hash_password(changes["password"]) if changes.get("password") else None,
            is_active=changes.get("is_active"),
        )
        await repo.update_profile(
            user_id, full_name=changes.get("full_name"), sales_initials=changes.get("sales_initials")
        )
        changes.pop("password", None)
        await self._audit(
            "user_update", user_id,
            old_values={k: getattr(before, k) for k in changes}, new_values=changes,
        )
        return await self.get_user(user_id)

    # PUBLIC_INTERFACE
    async def change_role(self, user_id: str, role: str) -> UserRead:
        """Change a user's role; admins cannot demote themselves."""
        before = await self.get_user(user_id)
        if self.actor and self.actor.user_id == user_id and role != "admin":
            raise ValidationFailed("You cannot remove your own admin role")
        await self._repo().update_profile(user_id, role=role)
        await self._audit("role_change", user_id, old_values={"role": before.role}, new_values={"role": role})
        return await self.get_user(user_id)

    # PUBLIC_INTERFACE
    async def delete_user(self, user_id: str) -> None:
        before = await self.get_user(user_id)
        if self.actor and self.actor.user_id == user_id:
            raise ValidationFailed("You cannot delete your own account")
        await self._repo().delete_user(user_id)
        await self._audit("user_delete", user_id, old_values=before.model_dump(mode="json"))
