"""
app/services/admin_service.py

Purpose: Bootstrap admin account

- Runs once at startup, idempotent
- Upgrades an existing account with the admin email, or creates one
"""

from typing import Optional

from app.core.config import Settings, settings as default_settings
from app.core.logging import get_logger, LogContext
from app.core.security import PasswordHasher
from app.db.repositories import UserRepository
from app.models.user import User, UserRole, new_pending_user
from utils.constants import ADMIN_SEED_COLLEGE, ADMIN_SEED_FIRST_NAME, ADMIN_SEED_LAST_NAME
from utils.validation_utils import normalize_email

logger = get_logger(__name__)


async def _seed_profile(hasher: PasswordHasher, password: str) -> dict:
    return {
        "first_name": ADMIN_SEED_FIRST_NAME,
        "last_name": ADMIN_SEED_LAST_NAME,
        "medical_college_name": ADMIN_SEED_COLLEGE,
        "password": await hasher.hash_async(password),
    }


async def ensure_admin_user(
    users: UserRepository,
    hasher: PasswordHasher,
    config: Optional[Settings] = None,
) -> Optional[User]:
    """
    Makes sure the ADMIN_EMAIL account exists and is a verified admin.

    An existing account keeps its password; only its flags are raised.
    A pending account without a password gets the seed profile and password.

    Returns:
        The admin user, or None when the seed is not configured
    """
    config = config or default_settings
    if not config.ADMIN_EMAIL or not config.ADMIN_PASSWORD:
        logger.warning("Admin seed skipped: missing ADMIN_EMAIL, ADMIN_PASSWORD in env")
        return None

    email = normalize_email(config.ADMIN_EMAIL)
    with LogContext(email=email):
        existing = await users.find_by_email(email)

        if existing is not None:
            if (
                existing.role == UserRole.ADMIN
                and existing.is_email_verified
                and existing.is_profile_completed
                and existing.has_password
            ):
                logger.debug("Admin user already present")
                return existing

            changes = {
                "role": UserRole.ADMIN.value,
                "is_email_verified": True,
                "is_profile_completed": True,
            }
            # A pending signup has no profile yet; completion requires a password
            if not existing.has_password:
                changes.update(await _seed_profile(hasher, config.ADMIN_PASSWORD))

            upgraded = await users.update(existing.id, changes)
            logger.info("Existing admin user updated with admin role and verified email")
            return upgraded

        document = new_pending_user(email)
        document.update(await _seed_profile(hasher, config.ADMIN_PASSWORD))
        document.update({
            "role": UserRole.ADMIN.value,
            "is_email_verified": True,
            "is_profile_completed": True,
        })
        admin = await users.create(document)
        logger.info("Admin user created", extra={"user_id": admin.id})
        return admin
