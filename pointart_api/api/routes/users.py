"""
Admin management of accounts. Every endpoint requires the admin role, and an
admin can never demote, deactivate or delete their own account.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from pointart_api.core.deps import get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.auth import RoleUpdate, UserCreate, UserRead, UserUpdate
from pointart_api.services.base import Actor
from pointart_api.services.users import UserService

router = APIRouter(prefix="/admin/users", tags=["Users"])


def _users(
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> UserService:
    return UserService(client, admin)


# PUBLIC_INTERFACE
@router.get("", response_model=List[UserRead], summary="List users")
async def list_users(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    users: UserService = Depends(_users),
) -> List[UserRead]:
    return await users.list_users(limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(payload: UserCreate, users: UserService = Depends(_users)) -> UserRead:
    """Create an account together with its profile; audited as user_create."""
    return await users.create_user(payload)


# PUBLIC_INTERFACE
@router.get("/{user_id}", response_model=UserRead, summary="Get user")
async def get_user(user_id: str, users: UserService = Depends(_users)) -> UserRead:
    return await users.get_user(user_id)


# PUBLIC_INTERFACE
@router.patch("/{user_id}", response_model=UserRead, summary="Update user")
async def update_user(user_id: str, payload: UserUpdate, users: UserService = Depends(_users)) -> UserRead:
    """Change email, password, name, initials or the active flag."""
    return await users.update_user(user_id, payload)


# PUBLIC_INTERFACE
@router.put("/{user_id}/role", response_model=UserRead, summary="Change role")
async def change_role(user_id: str, payload: RoleUpdate, users: UserService = Depends(_users)) -> UserRead:
    """Grant or revoke admin; audited as role_change with the old and new role."""
    return await users.change_role(user_id, payload.role)


# PUBLIC_INTERFACE
@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(user_id: str, users: UserService = Depends(_users)) -> None:
    """Remove the account, its profile and its sign-in sessions."""
    await users.delete_user(user_id)
