from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pointart_api.db.client import Record
from .base import BaseRepository


class SecurityRepository(BaseRepository):
    """Repository for accounts, profiles and sign-in sessions."""

    # Users
    async def get_user_by_email(self, email: str) -> Optional[Record]:
        res = await self.table("users").select("*").eq("email", email.lower()).maybe_single().execute()
        return res.data

    async def get_user_by_id(self, user_id: str) -> Optional[Record]:
        res = await self.table("users").select("*").eq("id", user_id).maybe_single().execute()
        return res.data

    async def count_users(self) -> int:
        res = await self.table("users").select("id", count="exact").execute()
        return int(res.count or 0)

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[Record]:
        res = await (
            self.table("users").select("*").order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        )
        return list(res.data)

    async def create_user(self, *, email: str, hashed_password: str, is_active: bool = True) -> Record:
        res = await self.table("users").insert(
            {"email": email.lower(), "hashed_password": hashed_password, "is_active": is_active}
        ).single().execute()
        return res.data

    async def update_user(self, user_id: str, **values) -> Optional[Record]:
        values = {k: v for k, v in values.items() if v is not None}
        if "email" in values:
            values["email"] = values["email"].lower()
        if not values:
            return await self.get_user_by_id(user_id)
        res = await self.table("users").update(values).eq("id", user_id).maybe_single().execute()
        return res.data

    async def delete_user(self, user_id: str) -> None:
        # Dependent rows first; the mock store has no cascades.
        await self.table("auth_sessions").delete().eq("user_id", user_id).execute()
        await self.table("profiles").delete().eq("user_id", user_id).execute()
        await self.table("users").delete().eq("id", user_id).execute()

    # Profiles
    async def get_profile(self, user_id: str) -> Optional[Record]:
        res = await self.table("profiles").select("*").eq("user_id", user_id).maybe_single().execute()
        return res.data

    async def list_profiles(self) -> List[Record]:
        res = await self.table("profiles").select("*").execute()
        return list(res.data)

    async def create_profile(
        self, *, user_id: str, full_name: Optional[str], role: str = "user", sales_initials: Optional[str] = None
    ) -> Record:
        res = await self.table("profiles").insert(
            {"user_id": user_id, "full_name": full_name, "role": role, "sales_initials": sales_initials}
        ).single().execute()
        return res.data

    async def update_profile(self, user_id: str, **values) -> Optional[Record]:
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            return await self.get_profile(user_id)
        res = await self.table("profiles").update(values).eq("user_id", user_id).maybe_single().execute()
        return res.data

    async def count_admins(self) -> int:
        res = await self.table("profiles").select("id", count="exact").eq("role", "admin").execute()
        return int(res.count or 0)

    # Sessions
    async def create_session(self, *, user_id: str, expires_at: datetime, user_agent: Optional[str]) -> Record:
        res = await self.table("auth_sessions").insert(
            {"user_id": user_id, "expires_at": expires_at, "user_agent": user_agent}
        ).single().execute()
        return res.data

    async def get_session(self, session_id: str) -> Optional[Record]:
        res = await self.table("auth_sessions").select("*").eq("id", session_id).maybe_single().execute()
        return res.data

    async def touch_session(self, session_id: str, expires_at: datetime) -> Optional[Record]:
        res = await (
            self.table("auth_sessions").update({"expires_at": expires_at}).eq("id", session_id).maybe_single().execute()
        )
        return res.data

    async def delete_session(self, session_id: str) -> None:
        await self.table("auth_sessions").delete().eq("id", session_id).execute()
