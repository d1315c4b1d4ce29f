from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["admin", "user"]

Password = Annotated[str, Field(min_length=6, description="At least six characters")]
Initials = Annotated[Optional[str], Field(max_length=8, description="Short code printed on sales receipts")]


class TokenPair(BaseModel):
    """Tokens for one sign-in session; refresh keeps the same session_id."""

    access_token: str
    refresh_token: str
    session_id: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    full_name: Optional[str] = None
    sales_initials: Initials = None


class RegisterRequest(ProfileUpdate):
    email: EmailStr
    password: Password


class UserCreate(RegisterRequest):
    """Account created by an admin, who may pick the role and status up front."""

    role: Role = "user"
    is_active: bool = True


class UserUpdate(ProfileUpdate):
    """Admin edits; role changes go through RoleUpdate so they are audited separately."""

    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    is_active: Optional[bool] = None


class RoleUpdate(BaseModel):
    role: Role


class UserRead(BaseModel):
    """An account joined with its profile."""

    id: str
    email: str
    full_name: Optional[str] = None
    role: Role = "user"
    sales_initials: Optional[str] = None
    is_active: bool = True
    created_at: datetime
