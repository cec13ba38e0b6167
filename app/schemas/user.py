"""
app/schemas/user.py

Purpose: Public views of users and sessions

- Profile view returned to clients (never includes the password hash)
- Session view for session listings
- Partial profile update payload
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.session import Session, SessionStatus
from app.models.user import User, UserRole
from utils.validation_utils import (
    MAX_PASSING_YEAR,
    MIN_PASSING_YEAR,
    PHONE_PATTERN,
)


class CamelModel(BaseModel):
    """Base for payloads exchanged in camelCase with the frontend."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    medical_college_name: str
    phone: Optional[str] = None
    mmbs_passing_year: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarURL")
    is_email_verified: bool
    is_profile_completed: bool
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            medical_college_name=user.medical_college_name,
            phone=user.phone,
            mmbs_passing_year=user.mmbs_passing_year,
            avatar_url=user.avatar_url,
            is_email_verified=user.is_email_verified,
            is_profile_completed=user.is_profile_completed,
            is_deleted=user.is_deleted,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class SessionResponse(CamelModel):
    id: str
    device_name: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    status: SessionStatus
    created_at: datetime
    last_seen_at: datetime
    revoked_at: Optional[datetime] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id,
            device_name=session.device_name,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            status=session.status,
            created_at=session.created_at,
            last_seen_at=session.last_seen_at,
            revoked_at=session.revoked_at,
        )


class UpdateUserRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    medical_college_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN.pattern)
    mmbs_passing_year: Optional[int] = Field(default=None, ge=MIN_PASSING_YEAR, le=MAX_PASSING_YEAR)
    avatar_url: Optional[str] = Field(default=None, alias="avatarURL")

    @field_validator("first_name", "last_name", "medical_college_name")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if value is not None else value

    def to_changes(self) -> dict:
        """Only the fields the client actually sent, in storage form."""
        changes = self.model_dump(exclude_unset=True, exclude_none=True)
        if "mmbs_passing_year" in changes:
            changes["mmbs_passing_year"] = str(changes["mmbs_passing_year"])
        return changes
