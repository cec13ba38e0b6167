"""
app/db/indexes.py

Purpose: Database index management

- Creates unique and performance indexes
- Ensures fast lookups and data integrity
"""

from pymongo import ASCENDING, DESCENDING

from app.db.mongo import get_users_collection, get_sessions_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()
        sessions = get_sessions_collection()

        logger.info("Creating database indexes...")

        # ==============================================
        # USERS COLLECTION INDEXES
        # ==============================================

        # Deleted accounts keep their email reserved, so the unique index is not partial.
        await users.create_index("email", unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        await users.create_index(
            [("is_deleted", ASCENDING), ("role", ASCENDING), ("created_at", DESCENDING)],
            name="user_listing_idx"
        )
        logger.debug("Created compound index on users.is_deleted + role + created_at")

        # ==============================================
        # SESSIONS COLLECTION INDEXES
        # ==============================================

        # One row per device; re-login reactivates it
        await sessions.create_index(
            [("user_id", ASCENDING), ("device_name", ASCENDING), ("user_agent", ASCENDING)],
            unique=True,
            name="session_device_unique"
        )
        logger.debug("Created unique index on sessions.user_id + device_name + user_agent")

        await sessions.create_index(
            [("user_id", ASCENDING), ("status", ASCENDING)],
            name="session_user_status_idx"
        )
        logger.debug("Created compound index on sessions.user_id + status")

        await sessions.create_index(
            [("user_id", ASCENDING), ("last_seen_at", DESCENDING)],
            name="session_last_seen_idx"
        )
        logger.debug("Created compound index on sessions.user_id + last_seen_at")

        logger.info("All database indexes created successfully")

        user_indexes = await users.index_information()
        session_indexes = await sessions.index_information()

        logger.info(
            f"Index summary: Users={len(user_indexes)}, "
            f"Sessions={len(session_indexes)}"
        )

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from app.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
