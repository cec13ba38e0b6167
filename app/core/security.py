"""
app/core/security.py

Purpose: Password hashing

- Salted bcrypt hashes with a configurable cost factor
- Constant-time verification
"""

import asyncio

import bcrypt

from app.core.logging import get_logger

logger = get_logger(__name__)


class PasswordHasher:
    """Bcrypt password hashing utility."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a password against its hash.

        An empty hash (profile not completed) never matches.
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False

    async def hash_async(self, password: str) -> str:
        """bcrypt is CPU bound; keep it off the event loop."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
