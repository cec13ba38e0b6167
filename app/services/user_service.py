"""
app/services/user_service.py

Purpose: User data management

- Profile view and partial update for the signed-in user
- Admin listing, lookup and soft delete
"""

from typing import List

from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.db.repositories import UserRepository
from app.models.user import User
from app.schemas.response import MessageResponse
from app.schemas.user import UpdateUserRequest, UserResponse
from app.services.session_service import SessionRegistry
from utils.constants import USER_DELETED_MESSAGE, USER_ID_NOT_FOUND_ERROR

logger = get_logger(__name__)


class UserService:
    def __init__(self, users: UserRepository, sessions: SessionRegistry):
        self.users = users
        self.sessions = sessions

    async def _get_live_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None or user.is_deleted:
            raise ResourceNotFoundError(USER_ID_NOT_FOUND_ERROR)
        return user

    async def get_me(self, user_id: str) -> UserResponse:
        return UserResponse.from_user(await self._get_live_user(user_id))

    async def update_me(self, user_id: str, payload: UpdateUserRequest) -> UserResponse:
        return await self.update_user(user_id, payload)

    async def update_user(self, user_id: str, payload: UpdateUserRequest) -> UserResponse:
        """
        Applies only the fields present in `payload`.
        An empty payload returns the profile unchanged.
        """
        user = await self._get_live_user(user_id)
        changes = payload.to_changes()
        if not changes:
            return UserResponse.from_user(user)

        with LogContext(user_id=user_id):
            updated = await self.users.update(user.id, changes)
            if updated is None:
                raise ResourceNotFoundError(USER_ID_NOT_FOUND_ERROR)
            logger.info(f"Profile updated: {', '.join(sorted(changes))}")
            return UserResponse.from_user(updated)

    async def list_users(self) -> List[UserResponse]:
        """Non-deleted students, newest first."""
        return [UserResponse.from_user(u) for u in await self.users.list_active()]

    async def get_user(self, user_id: str) -> UserResponse:
        return UserResponse.from_user(await self._get_live_user(user_id))

    async def delete_user(self, user_id: str) -> MessageResponse:
        """
        Soft delete: the row (and its email) stays, every active session ends.
        """
        with LogContext(user_id=user_id):
            user = await self._get_live_user(user_id)
            await self.users.update(user.id, {"is_deleted": True})
            terminated = await self.sessions.terminate_all(user.id)
            logger.info(f"User soft-deleted, {terminated} session(s) terminated")
            return MessageResponse(message=USER_DELETED_MESSAGE)
