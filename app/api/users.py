"""
app/api/users.py

Purpose: User profile endpoints

- /user/me for the signed-in user
- Admin-only listing, lookup, update and soft delete
"""

from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_user_service, require_admin
from app.models.user import User
from app.schemas.response import MessageResponse
from app.schemas.user import UpdateUserRequest, UserResponse
from app.services.user_service import UserService

router = APIRouter(prefix="/user", tags=["User"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return await service.get_me(user.id)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    body: UpdateUserRequest,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return await service.update_me(user.id, body)


@router.get("", response_model=List[UserResponse], dependencies=[Depends(require_admin)])
async def list_users(service: UserService = Depends(get_user_service)):
    return await service.list_users()


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get_user(user_id)


@router.patch("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
async def update_user(user_id: str, body: UpdateUserRequest, service: UserService = Depends(get_user_service)):
    return await service.update_user(user_id, body)


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.delete_user(user_id)
