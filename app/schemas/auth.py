"""
app/schemas/auth.py

Purpose: Auth request and response payloads

- Validates incoming auth bodies (email format, password length, phone)
- camelCase on the wire, snake_case in Python
"""

from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from app.models.session import DeviceInfo
from app.schemas.user import CamelModel, SessionResponse, UserResponse
from utils.validation_utils import (
    MAX_DEVICE_NAME_LENGTH,
    MAX_PASSING_YEAR,
    MAX_USER_AGENT_LENGTH,
    MAX_PASSWORD_BYTES,
    MIN_PASSING_YEAR,
    MIN_PASSWORD_LENGTH,
    PHONE_PATTERN,
    is_password_within_limit,
    normalize_email,
    sanitize_input,
)


def _check_password_bytes(value: str) -> str:
    if not is_password_within_limit(value):
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class EmailBody(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize(cls, value):
        return normalize_email(value)


class SessionInfo(CamelModel):
    """
    Device identity sent by the client when it wants a tracked session.
    """
    device_name: str = Field(..., min_length=1, max_length=MAX_DEVICE_NAME_LENGTH)
    user_agent: Optional[str] = Field(default=None, max_length=MAX_USER_AGENT_LENGTH)

    @field_validator("device_name")
    @classmethod
    def clean_device_name(cls, value):
        cleaned = sanitize_input(value)
        if not cleaned:
            raise ValueError("deviceName must not be blank")
        return cleaned

    @field_validator("user_agent")
    @classmethod
    def clean_user_agent(cls, value):
        return sanitize_input(value)

    def to_device_info(self) -> DeviceInfo:
        return DeviceInfo(device_name=self.device_name, user_agent=self.user_agent)


class SignupRequest(EmailBody):
    class Config:
        json_schema_extra = {"example": {"email": "jane@example.com"}}


class ResendVerificationRequest(EmailBody):
    pass


class ForgotPasswordRequest(EmailBody):
    pass


class ResendForgotPasswordRequest(EmailBody):
    pass


class CompleteProfileRequest(EmailBody):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    medical_college_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    role: Optional[Literal["student", "admin"]] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN.pattern)
    mmbs_passing_year: Optional[int] = Field(default=None, ge=MIN_PASSING_YEAR, le=MAX_PASSING_YEAR)

    @field_validator("password")
    @classmethod
    def password_fits_hash(cls, value):
        return _check_password_bytes(value)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane@example.com",
                "firstName": "Jane",
                "lastName": "Doe",
                "medicalCollegeName": "Dhaka Medical College",
                "password": "s3cure-passw0rd",
                "phone": "+8801712345678",
                "mmbsPassingYear": 2021,
            }
        }


class LoginRequest(EmailBody):
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    session: Optional[SessionInfo] = None


class VerifyEmailRequest(EmailBody):
    token: str = Field(..., min_length=16)
    session: Optional[SessionInfo] = None


class ResetPasswordRequest(EmailBody):
    token: str = Field(..., min_length=16)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("new_password")
    @classmethod
    def password_fits_hash(cls, value):
        return _check_password_bytes(value)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class CreateSessionRequest(CamelModel):
    session: SessionInfo


class AuthResponse(CamelModel):
    """Tokens plus the caller's profile and current sessions."""
    access_token: str
    refresh_token: str
    user: UserResponse
    sessions: List[SessionResponse] = []


class AccessTokenResponse(CamelModel):
    access_token: str


class SessionOpenedResponse(CamelModel):
    session: SessionResponse
    sessions: List[SessionResponse] = []
