"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Duration strings for token TTLs ("15m", "1h", "14d")
- Expiry timestamps
- Timestamp utilities
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}


def parse_duration(value: Union[str, int, timedelta]) -> timedelta:
    """
    Parses a compact duration into a timedelta.

    Accepts "30s", "15m", "1h", "14d", "2w" or a bare number of seconds.

    Raises:
        ValueError: If the value is empty, negative or has an unknown unit
    """
    if isinstance(value, timedelta):
        return value

    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"Duration must be positive: {value}")
        return timedelta(seconds=value)

    match = _DURATION_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if amount <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")

    return timedelta(seconds=amount * _UNIT_SECONDS[unit])


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def expires_at(ttl: timedelta, start: Optional[datetime] = None) -> datetime:
    """
    Calculates the expiry timestamp for a TTL starting now (or at `start`).
    """
    return (start or utc_now()) + ttl

