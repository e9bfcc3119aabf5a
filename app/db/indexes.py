"""
app/db/indexes.py

Purpose: Database index management

- Unique keys backing the keyed upserts (users by chat, membership pairs)
- Lookup indexes for the auth session audit trail
"""

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.db.mongo import USERS_COLLECTION, MEMBERSHIPS_COLLECTION, AUTH_SESSIONS_COLLECTION
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes(database: AsyncIOMotorDatabase):
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = database[USERS_COLLECTION]
        memberships = database[MEMBERSHIPS_COLLECTION]
        sessions = database[AUTH_SESSIONS_COLLECTION]

        logger.info("Creating database indexes...")

        # ==============================================
        # USERS COLLECTION INDEXES
        # ==============================================

        await users.create_index("chat_id", unique=True, name="chat_id_unique")
        logger.debug("Created unique index on users.chat_id")

        await users.create_index("wallet_address", name="wallet_address_idx")
        logger.debug("Created index on users.wallet_address")

        # ==============================================
        # MEMBERSHIPS COLLECTION INDEXES
        # ==============================================

        await memberships.create_index(
            [("chat_id", 1), ("group_id", 1)],
            unique=True,
            name="chat_group_unique"
        )
        logger.debug("Created unique index on memberships.chat_id + group_id")

        await memberships.create_index("group_id", name="membership_group_idx")
        logger.debug("Created index on memberships.group_id")

        # ==============================================
        # AUTH SESSIONS COLLECTION INDEXES
        # ==============================================

        await sessions.create_index(
            [("user_id", 1), ("created_at", -1)],
            name="session_user_idx"
        )
        logger.debug("Created index on auth_sessions.user_id + created_at")

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes(database: AsyncIOMotorDatabase):
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    logger.warning("Dropping all database indexes...")

    for name in (USERS_COLLECTION, MEMBERSHIPS_COLLECTION, AUTH_SESSIONS_COLLECTION):
        await database[name].drop_indexes()

    logger.info("✅ All indexes dropped successfully")
