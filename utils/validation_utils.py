"""
utils/validation_utils.py

Purpose: Input validation

- Email normalization
- Phone, graduation-year and password bounds
- Device label sanitization
"""

import re
from typing import Optional

PHONE_PATTERN = re.compile(r"^[+]?[0-9]{7,15}$")

MIN_PASSING_YEAR = 1950
MAX_PASSING_YEAR = 2100

MAX_DEVICE_NAME_LENGTH = 120
MAX_USER_AGENT_LENGTH = 512

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def normalize_email(email: str) -> str:
    """
    Normalizes an email address for lookups and token subjects.

    Addresses are stored lower-cased so "Jane@X.com" and "jane@x.com"
    resolve to the same account.
    """
    if not email:
        return ""
    return email.strip().lower()


def sanitize_input(text: Optional[str], max_length: int = 1000) -> Optional[str]:
    """
    Sanitizes free-text client input (device labels, user agents).

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text, or None when nothing usable remains
    """
    if text is None:
        return None

    text = text[:max_length]

    # Strip markup characters
    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip() or None


def is_password_within_limit(password: str) -> bool:
    """True when the UTF-8 encoded password fits in a bcrypt hash."""
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES
