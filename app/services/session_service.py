"""
app/services/session_service.py

Purpose: Login session management

- One session row per (user, device name, user agent)
- Reactivates the row on re-login instead of duplicating it
- Single-active-session policy for students; admins are unlimited
- Logout of one session or all active sessions
"""

from typing import List, Optional

from app.core.exceptions import ResourceNotFoundError, SessionConflictError
from app.core.logging import get_logger, LogContext
from app.db.repositories import SessionRepository
from app.models.session import DeviceInfo, Session, SessionStatus
from app.models.user import User, UserRole
from utils.constants import SESSION_CONFLICT_ERROR, SESSION_NOT_FOUND_ERROR
from utils.time_utils import utc_now

logger = get_logger(__name__)


def _matches_device(
    session: Session,
    device_name: Optional[str],
    user_agent: Optional[str],
) -> bool:
    """
    Whether `session` belongs to the device identified by the given fields.
    With both fields, both must match; with one, that one alone decides.
    """
    if device_name is not None and user_agent is not None:
        return session.device_name == device_name and session.user_agent == user_agent
    if device_name is not None:
        return session.device_name == device_name
    if user_agent is not None:
        return session.user_agent == user_agent
    return False


class SessionRegistry:
    """
    Tracks session rows and enforces the per-role session policy.
    """

    def __init__(self, repository: SessionRepository):
        self.repository = repository

    async def find_active_conflict(
        self,
        user_id: str,
        device_name: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[Session]:
        """
        Returns an ACTIVE session of the user on some *other* device, if any.

        Re-login from the same device is never a conflict.
        """
        for session in await self.repository.find_active(user_id):
            if not _matches_device(session, device_name, user_agent):
                return session
        return None

    async def upsert_session(
        self,
        user_id: str,
        device_info: DeviceInfo,
        ip_address: Optional[str] = None,
    ) -> Session:
        """
        Reactivates the user's row for this device, or creates a new ACTIVE one.
        """
        with LogContext(user_id=user_id, device=device_info.device_name):
            now = utc_now()
            reactivate = {
                "status": SessionStatus.ACTIVE.value,
                "revoked_at": None,
                "last_seen_at": now,
                "ip_address": ip_address,
            }

            existing = await self.repository.find_by_device(
                user_id, device_info.device_name, device_info.user_agent
            )
            if existing is None:
                created = await self.repository.create({
                    "user_id": user_id,
                    "device_name": device_info.device_name,
                    "user_agent": device_info.user_agent,
                    "ip_address": ip_address,
                    "status": SessionStatus.ACTIVE.value,
                    "created_at": now,
                    "last_seen_at": now,
                    "revoked_at": None,
                })
                if created is not None:
                    logger.info("Session created", extra={"session_id": created.id})
                    return created

                # Lost an insert race against the same device; reactivate the winner's row
                existing = await self.repository.find_by_device(
                    user_id, device_info.device_name, device_info.user_agent
                )
                if existing is None:
                    raise ResourceNotFoundError(SESSION_NOT_FOUND_ERROR)

            session = await self.repository.update(existing.id, reactivate)
            if session is None:
                raise ResourceNotFoundError(SESSION_NOT_FOUND_ERROR)
            logger.info("Session reactivated", extra={"session_id": session.id})
            return session

    async def terminate(self, user_id: str, session_id: Optional[str] = None) -> int:
        """
        Terminates one session (scoped to the user) or, without `session_id`,
        every ACTIVE session of the user.

        Returns:
            Number of sessions terminated

        Raises:
            ResourceNotFoundError: If `session_id` does not belong to the user
        """
        if session_id is None:
            return await self.terminate_all(user_id)

        with LogContext(user_id=user_id, session_id=session_id):
            found = await self.repository.terminate_one(user_id, session_id, utc_now())
            if not found:
                raise ResourceNotFoundError(SESSION_NOT_FOUND_ERROR)
            logger.info("Session terminated")
            return 1

    async def terminate_all(self, user_id: str) -> int:
        count = await self.repository.terminate_active(user_id, utc_now())
        logger.info(f"Terminated {count} active session(s)", extra={"user_id": user_id})
        return count

    async def list_sessions(self, user_id: str) -> List[Session]:
        """All sessions of the user, most recently seen first."""
        sessions = await self.repository.find_for_user(user_id)
        return sorted(sessions, key=lambda s: s.last_seen_at, reverse=True)

    async def ensure_can_open(self, user: User, device_info: DeviceInfo) -> None:
        """
        Policy gate run before a session is created or reactivated.

        Raises:
            SessionConflictError: If a student is active on another device
        """
        if user.role == UserRole.ADMIN:
            return

        conflict = await self.find_active_conflict(
            user.id, device_info.device_name, device_info.user_agent
        )
        if conflict is not None:
            logger.warning(
                "Login rejected: active session on another device",
                extra={"user_id": user.id, "device": conflict.device_name},
            )
            raise SessionConflictError(
                SESSION_CONFLICT_ERROR.format(device=conflict.device_name),
                details={
                    "sessionId": conflict.id,
                    "deviceName": conflict.device_name,
                },
            )

    async def open_session(
        self,
        user: User,
        device_info: DeviceInfo,
        ip_address: Optional[str] = None,
    ) -> Session:
        """Role-gated conflict check followed by the device upsert."""
        await self.ensure_can_open(user, device_info)
        return await self.upsert_session(user.id, device_info, ip_address)
