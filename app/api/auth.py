"""
app/api/auth.py

Purpose: Authentication endpoints

- Signup, email verification, profile completion, login
- Password reset and access-token refresh
- Session opening, listing and logout
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status

from app.api.deps import client_ip, get_auth_service, get_current_user
from app.models.user import User
from app.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    CompleteProfileRequest,
    CreateSessionRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    ResendForgotPasswordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SessionOpenedResponse,
    SignupRequest,
    VerifyEmailRequest,
)
from app.schemas.response import EmailTestResponse, MessageResponse, TerminateSessionsResponse
from app.schemas.user import SessionResponse, UserResponse
from app.services.auth_service import AuthService
from app.services.email_service import EmailService, get_email_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, service: AuthService = Depends(get_auth_service)):
    return await service.signup(body.email)


@router.post("/complete-profile", response_model=UserResponse)
async def complete_profile(
    body: CompleteProfileRequest,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.complete_profile(body, user.id)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    device = body.session.to_device_info() if body.session else None
    return await service.login(body.email, body.password, device, client_ip(request))


@router.post("/verify-email", response_model=AuthResponse)
async def verify_email(
    body: VerifyEmailRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    device = body.session.to_device_info() if body.session else None
    return await service.verify_email(body.email, body.token, device, client_ip(request))


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return await service.send_forgot_password(body.email)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return await service.reset_password(body.email, body.token, body.new_password)


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(body: RefreshTokenRequest, service: AuthService = Depends(get_auth_service)):
    return await service.refresh_token(body.refresh_token)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: ResendVerificationRequest,
    service: AuthService = Depends(get_auth_service),
):
    return await service.resend_verification_email(body.email)


@router.post("/resend-forgot-password", response_model=MessageResponse)
async def resend_forgot_password(
    body: ResendForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    return await service.resend_forgot_password_email(body.email)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user), service: AuthService = Depends(get_auth_service)):
    """Terminates every active session of the caller."""
    return await service.logout(user.id)


@router.post("/logout/{session_id}", response_model=MessageResponse)
async def logout_session(
    session_id: str,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.logout(user.id, session_id)


@router.post("/session", response_model=SessionOpenedResponse)
async def create_session(
    body: CreateSessionRequest,
    request: Request,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.create_session_for_user(user.id, body.session.to_device_info(), client_ip(request))


@router.get("/sessions", response_model=List[SessionResponse])
async def list_sessions(user: User = Depends(get_current_user), service: AuthService = Depends(get_auth_service)):
    return await service.list_sessions(user.id)


@router.post("/terminate-all-sessions", response_model=TerminateSessionsResponse)
async def terminate_all_sessions(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.terminate_all_sessions(user.id)


@router.get("/test-email", response_model=EmailTestResponse)
async def test_email(email: EmailService = Depends(get_email_service)):
    ok = await email.test_connection()
    return EmailTestResponse(
        success=ok,
        message="Email connection successful" if ok else "Email connection failed",
    )
