"""
app/models/user.py

Purpose: User document model

- Identity, email and password hash
- Profile fields filled in at profile completion
- Verification / completion / soft-delete flags

Account states by flags:
    PendingVerification  is_email_verified=False, is_profile_completed=False
    Verified             is_email_verified=True,  is_profile_completed=False
    Active               is_profile_completed=True
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from utils.time_utils import utc_now


class UserRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class User(BaseModel):
    id: str
    email: str
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.STUDENT
    medical_college_name: str = ""
    phone: Optional[str] = None
    mmbs_passing_year: Optional[str] = None
    avatar_url: Optional[str] = None

    is_email_verified: bool = False
    is_profile_completed: bool = False
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def new_pending_user(email: str) -> dict:
    """
    Document for a freshly signed-up account: placeholder profile,
    empty password, nothing verified.
    """
    now = utc_now()
    return {
        "email": email,
        "password": "",
        "first_name": "",
        "last_name": "",
        "role": UserRole.STUDENT.value,
        "medical_college_name": "",
        "phone": None,
        "mmbs_passing_year": None,
        "avatar_url": None,
        "is_email_verified": False,
        "is_profile_completed": False,
        "is_deleted": False,
        "created_at": now,
        "updated_at": now,
    }
