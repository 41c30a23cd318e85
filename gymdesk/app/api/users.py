"""Staff user endpoints: listing, the caller's own profile and role counts."""

from typing import Optional

from fastapi import APIRouter, Depends

from gymdesk.app.api.responses import JsonBody, unwrap
from gymdesk.app.dependencies.auth import get_current_user, require_admin
from gymdesk.app.dependencies.services import get_user_service
from gymdesk.app.models.user import User
from gymdesk.app.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    role: Optional[str] = None,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(users.get_users(role))


@router.get("/trainers")
async def list_trainer_users(users: UserService = Depends(get_user_service), current_user: User = Depends(get_current_user)):
    return unwrap(users.get_trainers())


@router.get("/stats")
async def user_stats(users: UserService = Depends(get_user_service), current_user: User = Depends(require_admin)):
    return unwrap(users.get_user_stats())


@router.get("/me")
async def read_profile(users: UserService = Depends(get_user_service), current_user: User = Depends(get_current_user)):
    return unwrap(users.get_user_by_id(current_user.id))


@router.put("/me")
async def update_profile(
    payload: JsonBody = None,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(users.update_profile(current_user.id, payload))


@router.put("/me/password")
async def change_password(
    payload: JsonBody = None,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(users.change_password(current_user.id, payload))


@router.get("/{user_id}")
async def get_user(user_id: str, users: UserService = Depends(get_user_service), current_user: User = Depends(require_admin)):
    return unwrap(users.get_user_by_id(user_id))
