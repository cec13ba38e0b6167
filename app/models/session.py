"""
app/models/session.py

Purpose: Login session document model

- One row per (user, device name, user agent)
- ACTIVE until logout / terminate-all, then TERMINATED
- Reactivated in place on re-login from the same device
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from utils.time_utils import utc_now


class SessionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    TERMINATED = "TERMINATED"


class DeviceInfo(BaseModel):
    """Client-supplied identity of the device opening a session."""
    device_name: str
    user_agent: Optional[str] = None


class Session(BaseModel):
    id: str
    user_id: str
    device_name: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    last_seen_at: datetime = Field(default_factory=utc_now)
    revoked_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE
