"""
app/services/token_service.py

Purpose: Signed, time-limited tokens

- Access tokens:   {userId, sub, role, isProfileComplete}
- Refresh tokens:  {userId, sub, role, type="refresh"}
- Email tokens:    {email, purpose} with purpose in {verify, reset}
- Verification that never leaks PyJWT errors to callers

No I/O; everything is derived from the token and the immutable TokenConfig.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

import jwt

from app.core.config import TokenConfig
from app.core.exceptions import InvalidTokenError
from app.core.logging import get_logger
from app.models.user import UserRole
from utils.constants import PURPOSE_RESET, PURPOSE_VERIFY, REFRESH_TOKEN_TYPE
from utils.time_utils import expires_at, utc_now

logger = get_logger(__name__)


class TokenService:
    """Issues and verifies every JWT the backend hands out."""

    def __init__(self, config: TokenConfig):
        self._config = config

    def _ttl_for_purpose(self, purpose: str) -> timedelta:
        if purpose == PURPOSE_VERIFY:
            return self._config.verify_ttl
        if purpose == PURPOSE_RESET:
            return self._config.reset_ttl
        raise ValueError(f"Unknown email token purpose: {purpose!r}")

    def _sign(self, payload: Dict[str, Any], ttl: timedelta) -> str:
        now = utc_now()
        claims = {**payload, "iat": now, "exp": expires_at(ttl, now)}
        return jwt.encode(claims, self._config.secret, algorithm=self._config.algorithm)

    def issue_access_token(self, user_id: str, role: UserRole, is_profile_complete: bool) -> str:
        return self._sign(
            {
                "userId": user_id,
                "sub": user_id,
                "role": UserRole(role).value,
                "isProfileComplete": bool(is_profile_complete),
            },
            self._config.access_ttl,
        )

    def issue_refresh_token(self, user_id: str, role: UserRole) -> str:
        return self._sign(
            {
                "userId": user_id,
                "sub": user_id,
                "role": UserRole(role).value,
                "type": REFRESH_TOKEN_TYPE,
            },
            self._config.refresh_ttl,
        )

    def issue_email_token(self, email: str, purpose: str) -> str:
        ttl = self._ttl_for_purpose(purpose)
        return self._sign({"email": email, "purpose": purpose}, ttl)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decodes a token, checking signature and expiry.

        Raises:
            InvalidTokenError: If the token is malformed, tampered with or expired
        """
        if not token:
            raise InvalidTokenError("Token is missing")
        try:
            return jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {type(e).__name__}")
            raise InvalidTokenError("Invalid token") from e

    def verify_email_token(
        self,
        token: str,
        email: str,
        purpose: str,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Verifies an email-purpose token for `email` and `purpose`.

        Raises:
            InvalidTokenError: On any signature/expiry failure, or when the
                purpose or email claim does not match
        """
        message = message or "Invalid token"
        try:
            payload = self.verify(token)
        except InvalidTokenError as e:
            raise InvalidTokenError(message) from e

        if payload.get("purpose") != purpose or payload.get("email") != email:
            raise InvalidTokenError(message)
        return payload

    def verify_refresh_token(self, token: str, message: Optional[str] = None) -> Dict[str, Any]:
        """
        Verifies a refresh token; access and email tokens are rejected.
        """
        message = message or "Invalid refresh token"
        try:
            payload = self.verify(token)
        except InvalidTokenError as e:
            raise InvalidTokenError(message) from e

        if payload.get("type") != REFRESH_TOKEN_TYPE or not subject_of(payload):
            raise InvalidTokenError(message)
        return payload

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        """
        Verifies a bearer access token. Refresh and email tokens are rejected.
        """
        payload = self.verify(token)
        if payload.get("type") is not None or "purpose" in payload or not subject_of(payload):
            raise InvalidTokenError("Access token required")
        return payload


def subject_of(payload: Dict[str, Any]) -> Optional[str]:
    """User id carried by an access or refresh token."""
    return payload.get("userId") or payload.get("sub")
