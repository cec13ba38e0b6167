"""
app/api/deps.py

Purpose: FastAPI dependencies

- Service wiring (repositories over the Motor collections)
- Bearer authentication and the admin gate
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings, token_settings
from app.core.exceptions import (
    AccountDeletedError,
    AuthenticationError,
    ForbiddenError,
    InvalidTokenError,
)
from app.core.security import PasswordHasher
from app.db.mongo import get_sessions_collection, get_users_collection
from app.db.repositories import SessionRepository, UserRepository
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.email_service import EmailService, get_email_service
from app.services.session_service import SessionRegistry
from app.services.token_service import TokenService, subject_of
from app.services.user_service import UserService
from utils.constants import ADMIN_ONLY_ERROR

http_bearer = HTTPBearer(auto_error=False)

_token_service: Optional[TokenService] = None
_password_hasher: Optional[PasswordHasher] = None


def get_token_service() -> TokenService:
    global _token_service
    if _token_service is None:
        _token_service = TokenService(token_settings())
    return _token_service


def get_password_hasher() -> PasswordHasher:
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    return _password_hasher


def get_user_repository() -> UserRepository:
    return UserRepository(get_users_collection())


def get_session_registry() -> SessionRegistry:
    return SessionRegistry(SessionRepository(get_sessions_collection()))


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    sessions: SessionRegistry = Depends(get_session_registry),
    tokens: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(users, sessions, tokens, hasher, email)


def get_user_service(
    users: UserRepository = Depends(get_user_repository),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> UserService:
    return UserService(users, sessions)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """
    Resolves the caller from `Authorization: Bearer <accessToken>`.

    Raises:
        AuthenticationError: Missing/invalid token, refresh token used, unknown user
        AccountDeletedError: The account was soft-deleted
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    try:
        payload = tokens.verify_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise AuthenticationError(e.message) from e

    user = await users.find_by_id(subject_of(payload))
    if user is None:
        raise AuthenticationError("User not found")
    if user.is_deleted:
        raise AccountDeletedError()
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError(ADMIN_ONLY_ERROR)
    return user
