"""
app/db/mongo.py

Motor client lifecycle for the bot's three collections (users,
memberships, auth_sessions). One client per process, opened in the
FastAPI lifespan and by the maintenance scripts.
"""

import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

USERS_COLLECTION = "users"
MEMBERSHIPS_COLLECTION = "memberships"
AUTH_SESSIONS_COLLECTION = "auth_sessions"

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


def _new_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
    )


async def connect_to_mongo() -> AsyncIOMotorDatabase:
    """
    Opens the client and pings the server, backing off between attempts.

    Raises:
        ConnectionError: When every attempt fails
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return _database

    attempts = settings.MONGODB_CONNECT_RETRIES
    delay = 2

    for attempt in range(1, attempts + 1):
        client = _new_client()
        try:
            await client.admin.command("ping")
        except ConnectionFailure as e:
            client.close()
            logger.error(f"MongoDB ping failed (attempt {attempt}/{attempts}): {e}")
            if attempt == attempts:
                logger.critical("Giving up on MongoDB")
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(delay)
            delay *= 2
            continue

        _client = client
        _database = client[settings.MONGODB_DB_NAME]
        logger.info(f"✅ Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
        return _database


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return

    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    """True when the server answers a ping."""
    if _client is None:
        return False

    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"Database health check failed: {e}")
        return False
