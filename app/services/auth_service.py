"""
app/services/auth_service.py

Purpose: Account and authentication lifecycle

- Signup -> email verification -> profile completion -> login
- Password reset through mailed, purpose-bound tokens
- Access-token refresh
- Session opening (role-gated) and logout

Account states by flags:
    PendingVerification -> Verified -> Active
"""

from typing import List, Optional

from app.core.exceptions import (
    AlreadyCompletedError,
    AlreadyVerifiedError,
    DuplicateEmailError,
    EmailNotVerifiedError,
    ForbiddenError,
    InvalidCredentialsError,
    ProfileIncompleteError,
    ResourceNotFoundError,
)
from app.core.logging import get_logger, LogContext
from app.core.security import PasswordHasher
from app.db.repositories import UserRepository
from app.models.session import DeviceInfo
from app.models.user import User, UserRole, new_pending_user
from app.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    CompleteProfileRequest,
    SessionOpenedResponse,
)
from app.schemas.response import MessageResponse, TerminateSessionsResponse
from app.schemas.user import SessionResponse, UserResponse
from app.services.email_service import EmailService
from app.services.session_service import SessionRegistry
from app.services.token_service import TokenService, subject_of
from utils import constants
from utils.validation_utils import normalize_email

logger = get_logger(__name__)


class AuthService:
    """
    Coordinates the user store, session registry, token service and mailer.
    """

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRegistry,
        tokens: TokenService,
        hasher: PasswordHasher,
        email: EmailService,
    ):
        self.users = users
        self.sessions = sessions
        self.tokens = tokens
        self.hasher = hasher
        self.email = email

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _get_user_by_email(self, email: str, message: str = constants.USER_NOT_FOUND_ERROR) -> User:
        user = await self.users.find_by_email(email)
        if user is None or user.is_deleted:
            raise ResourceNotFoundError(message)
        return user

    async def _get_user_by_id(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None or user.is_deleted:
            raise ResourceNotFoundError(constants.USER_ID_NOT_FOUND_ERROR)
        return user

    async def _session_views(self, user_id: str) -> List[SessionResponse]:
        return [SessionResponse.from_session(s) for s in await self.sessions.list_sessions(user_id)]

    async def _authenticated(
        self,
        user: User,
        device_info: Optional[DeviceInfo],
        ip_address: Optional[str],
    ) -> AuthResponse:
        """Opens the session (if asked to) and issues the token pair."""
        if device_info is not None:
            await self.sessions.open_session(user, device_info, ip_address)

        return AuthResponse(
            access_token=self.tokens.issue_access_token(user.id, user.role, user.is_profile_completed),
            refresh_token=self.tokens.issue_refresh_token(user.id, user.role),
            user=UserResponse.from_user(user),
            sessions=await self._session_views(user.id),
        )

    async def _send_verification(self, user: User) -> None:
        token = self.tokens.issue_email_token(user.email, constants.PURPOSE_VERIFY)
        await self.email.send_template(
            constants.TEMPLATE_VERIFY_EMAIL, to=user.email, email=user.email, token=token
        )

    async def _send_reset(self, user: User) -> None:
        token = self.tokens.issue_email_token(user.email, constants.PURPOSE_RESET)
        await self.email.send_template(
            constants.TEMPLATE_RESET_PASSWORD, to=user.email, email=user.email, token=token
        )

    # ------------------------------------------------------------------
    # signup & verification
    # ------------------------------------------------------------------

    async def signup(self, email: str) -> MessageResponse:
        """
        Creates an unverified account and mails the verification link.

        Deleted accounts keep their email, so re-using it is also a duplicate.
        The account row survives a failed email; the link can be resent.
        """
        email = normalize_email(email)
        with LogContext(email=email):
            if await self.users.find_by_email(email) is not None:
                raise DuplicateEmailError(constants.DUPLICATE_EMAIL_ERROR)

            user = await self.users.create(new_pending_user(email))
            logger.info("Account created, pending verification", extra={"user_id": user.id})

            await self._send_verification(user)
            return MessageResponse(message=constants.SIGNUP_SUCCESS_MESSAGE)

    async def verify_email(
        self,
        email: str,
        token: str,
        device_info: Optional[DeviceInfo] = None,
        ip_address: Optional[str] = None,
    ) -> AuthResponse:
        email = normalize_email(email)
        with LogContext(email=email):
            self.tokens.verify_email_token(
                token, email, constants.PURPOSE_VERIFY, message=constants.INVALID_VERIFY_TOKEN_ERROR
            )

            user = await self._get_user_by_email(email)
            if user.is_email_verified:
                raise AlreadyVerifiedError(constants.ALREADY_VERIFIED_ERROR)

            user = await self.users.update(user.id, {"is_email_verified": True})
            if user is None:
                raise ResourceNotFoundError(constants.USER_NOT_FOUND_ERROR)
            logger.info("Email verified", extra={"user_id": user.id})

            return await self._authenticated(user, device_info, ip_address)

    async def resend_verification_email(self, email: str) -> MessageResponse:
        email = normalize_email(email)
        user = await self._get_user_by_email(email)
        if user.is_email_verified:
            raise AlreadyVerifiedError(constants.ALREADY_VERIFIED_ERROR)

        await self._send_verification(user)
        logger.info("Verification email resent", extra={"user_id": user.id})
        return MessageResponse(message=constants.VERIFICATION_RESENT_MESSAGE)

    # ------------------------------------------------------------------
    # profile completion
    # ------------------------------------------------------------------

    async def complete_profile(self, payload: CompleteProfileRequest, caller_user_id: str) -> UserResponse:
        """
        Sets name, password and role on a verified account.

        Only the account owner may complete it, and only once. The welcome
        email is best-effort. No tokens are issued; the client logs in next.
        """
        email = normalize_email(payload.email)
        with LogContext(email=email, user_id=caller_user_id):
            user = await self._get_user_by_email(email)

            if user.id != caller_user_id:
                raise ForbiddenError(constants.PROFILE_OWNERSHIP_ERROR)
            if not user.is_email_verified:
                raise EmailNotVerifiedError(constants.NOT_VERIFIED_ERROR)
            if user.has_password:
                raise AlreadyCompletedError(constants.ALREADY_COMPLETED_ERROR)

            password_hash = await self.hasher.hash_async(payload.password)
            changes = {
                "first_name": payload.first_name.strip(),
                "last_name": payload.last_name.strip(),
                "medical_college_name": payload.medical_college_name.strip(),
                "role": (payload.role or UserRole.STUDENT.value),
                "phone": payload.phone,
                "mmbs_passing_year": (
                    str(payload.mmbs_passing_year) if payload.mmbs_passing_year is not None else None
                ),
                "password": password_hash,
                "is_profile_completed": True,
            }
            user = await self.users.update(user.id, changes)
            if user is None:
                raise ResourceNotFoundError(constants.USER_NOT_FOUND_ERROR)
            logger.info("Profile completed", extra={"user_id": user.id})

            try:
                await self.email.send_template(
                    constants.TEMPLATE_WELCOME, to=user.email, first_name=user.first_name
                )
            except Exception as e:
                logger.error(f"Welcome email failed: {e}", extra={"user_id": user.id}, exc_info=True)

            return UserResponse.from_user(user)

    # ------------------------------------------------------------------
    # login & tokens
    # ------------------------------------------------------------------

    async def login(
        self,
        email: str,
        password: str,
        device_info: Optional[DeviceInfo] = None,
        ip_address: Optional[str] = None,
    ) -> AuthResponse:
        email = normalize_email(email)
        with LogContext(email=email, device=device_info.device_name if device_info else None):
            user = await self._get_user_by_email(email)

            if not user.has_password:
                raise ProfileIncompleteError(constants.PROFILE_INCOMPLETE_ERROR)

            if not await self.hasher.verify_async(password, user.password):
                logger.warning("Login failed: bad password", extra={"user_id": user.id})
                raise InvalidCredentialsError(constants.INVALID_CREDENTIALS_ERROR)

            response = await self._authenticated(user, device_info, ip_address)
            logger.info("Login succeeded", extra={"user_id": user.id})
            return response

    async def refresh_token(self, refresh_token: str) -> AccessTokenResponse:
        """
        Issues a new access token. The refresh token itself is not rotated.
        """
        payload = self.tokens.verify_refresh_token(
            refresh_token, message=constants.INVALID_REFRESH_TOKEN_ERROR
        )
        user = await self._get_user_by_id(subject_of(payload))
        return AccessTokenResponse(
            access_token=self.tokens.issue_access_token(user.id, user.role, user.is_profile_completed)
        )

    # ------------------------------------------------------------------
    # password reset
    # ------------------------------------------------------------------

    async def send_forgot_password(self, email: str) -> MessageResponse:
        email = normalize_email(email)
        user = await self._get_user_by_email(email, constants.RESET_USER_NOT_FOUND_ERROR)
        await self._send_reset(user)
        logger.info("Password reset email sent", extra={"user_id": user.id})
        return MessageResponse(message=constants.FORGOT_PASSWORD_SENT_MESSAGE)

    async def resend_forgot_password_email(self, email: str) -> MessageResponse:
        email = normalize_email(email)
        user = await self._get_user_by_email(email, constants.RESET_USER_NOT_FOUND_ERROR)
        await self._send_reset(user)
        logger.info("Password reset email resent", extra={"user_id": user.id})
        return MessageResponse(message=constants.FORGOT_PASSWORD_RESENT_MESSAGE)

    async def reset_password(self, email: str, token: str, new_password: str) -> MessageResponse:
        """
        Overwrites the password hash. Flags and existing sessions are untouched.
        """
        email = normalize_email(email)
        with LogContext(email=email):
            self.tokens.verify_email_token(
                token, email, constants.PURPOSE_RESET, message=constants.INVALID_RESET_TOKEN_ERROR
            )
            user = await self._get_user_by_email(email)

            password_hash = await self.hasher.hash_async(new_password)
            updated = await self.users.update(user.id, {"password": password_hash})
            if updated is None:
                raise ResourceNotFoundError(constants.USER_NOT_FOUND_ERROR)
            logger.info("Password reset", extra={"user_id": user.id})
            return MessageResponse(message=constants.PASSWORD_RESET_MESSAGE)

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------

    async def create_session_for_user(
        self,
        user_id: str,
        device_info: DeviceInfo,
        ip_address: Optional[str] = None,
    ) -> SessionOpenedResponse:
        user = await self._get_user_by_id(user_id)
        session = await self.sessions.open_session(user, device_info, ip_address)
        return SessionOpenedResponse(
            session=SessionResponse.from_session(session),
            sessions=await self._session_views(user.id),
        )

    async def list_sessions(self, user_id: str) -> List[SessionResponse]:
        return await self._session_views(user_id)

    async def logout(self, user_id: str, session_id: Optional[str] = None) -> MessageResponse:
        await self.sessions.terminate(user_id, session_id)
        if session_id is None:
            return MessageResponse(message=constants.LOGOUT_MESSAGE)
        return MessageResponse(message=constants.SESSION_LOGOUT_MESSAGE)

    async def terminate_all_sessions(self, user_id: str) -> TerminateSessionsResponse:
        count = await self.sessions.terminate_all(user_id)
        return TerminateSessionsResponse(message=constants.TERMINATE_ALL_MESSAGE, terminated_count=count)
