"""
app/services/user_service.py

Purpose: User, membership and auth-session persistence

- Get or create chat users
- Link wallets (keyed upsert, last writer wins)
- Append auth session audit records
- Record speculative group memberships
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from datetime import datetime
from typing import Optional, List

from app.db.mongo import USERS_COLLECTION, MEMBERSHIPS_COLLECTION, AUTH_SESSIONS_COLLECTION
from app.models.user import User, Membership, AuthSession
from app.core.exceptions import PersistenceError
from app.core.logging import get_logger, LogContext
from utils.validation_utils import normalize_address

logger = get_logger(__name__)


class UserService:
    """
    Session/membership store backed by MongoDB.

    Every write is a single-document upsert keyed by chat identity (or by
    the chat/group pair), so concurrent writes for different keys never
    conflict and writes for the same key resolve last-write-wins.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.users = database[USERS_COLLECTION]
        self.memberships = database[MEMBERSHIPS_COLLECTION]
        self.auth_sessions = database[AUTH_SESSIONS_COLLECTION]

    async def get_or_create_user(self, chat_id: str) -> User:
        """
        Retrieves an existing user or creates a new one.

        Args:
            chat_id: Chat identity

        Returns:
            User document
        """
        with LogContext(chat_id=chat_id):
            try:
                doc = await self.users.find_one_and_update(
                    {"chat_id": chat_id},
                    {
                        "$setOnInsert": {
                            "wallet_address": None,
                            "created_at": datetime.utcnow(),
                        }
                    },
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            except PyMongoError as e:
                logger.error(f"Failed to load user: {e}", exc_info=True)
                raise PersistenceError("Could not load user") from e

            return User(**doc)

    async def get_user(self, chat_id: str) -> Optional[User]:
        """
        Retrieves a user by chat identity.

        Returns:
            User or None if not found
        """
        try:
            doc = await self.users.find_one({"chat_id": chat_id})
        except PyMongoError as e:
            logger.error(f"Failed to load user {chat_id}: {e}", exc_info=True)
            raise PersistenceError("Could not load user") from e

        return User(**doc) if doc else None

    async def get_wallet(self, chat_id: str) -> Optional[str]:
        user = await self.get_user(chat_id)
        return user.wallet_address if user else None

    async def link_wallet(self, chat_id: str, wallet_address: str) -> User:
        """
        Stores the wallet for a chat identity, replacing any previous one.

        Args:
            chat_id: Chat identity
            wallet_address: Verified wallet address (any casing)

        Returns:
            Updated user
        """
        wallet = normalize_address(wallet_address)
        now = datetime.utcnow()

        with LogContext(chat_id=chat_id, wallet=wallet):
            try:
                doc = await self.users.find_one_and_update(
                    {"chat_id": chat_id},
                    {
                        "$set": {"wallet_address": wallet, "updated_at": now},
                        "$setOnInsert": {"created_at": now},
                    },
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            except PyMongoError as e:
                logger.error(f"Failed to link wallet: {e}", exc_info=True)
                raise PersistenceError("Could not save wallet link") from e

            logger.info("Wallet linked")
            return User(**doc)

    async def record_auth_session(self, session: AuthSession) -> str:
        """
        Appends an auth session audit record.

        Returns:
            Inserted record id
        """
        try:
            result = await self.auth_sessions.insert_one(session.model_dump())
        except PyMongoError as e:
            logger.error(f"Failed to record auth session: {e}", exc_info=True)
            raise PersistenceError("Could not record auth session") from e

        return str(result.inserted_id)

    async def list_auth_sessions(self, chat_id: str, limit: int = 10) -> List[AuthSession]:
        cursor = self.auth_sessions.find({"user_id": chat_id}).sort("created_at", -1).limit(limit)
        try:
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise PersistenceError("Could not load auth sessions") from e

        return [AuthSession(**doc) for doc in docs]

    async def add_membership(self, chat_id: str, group_id: int, wallet_address: str) -> Membership:
        """
        Records that a chat identity is joining a group.

        Unique per (chat_id, group_id); repeating the call refreshes the
        wallet snapshot and join time.
        """
        membership = Membership(
            chat_id=chat_id,
            group_id=group_id,
            wallet_address=normalize_address(wallet_address),
        )

        with LogContext(chat_id=chat_id, group_id=group_id):
            try:
                await self.memberships.update_one(
                    {"chat_id": chat_id, "group_id": group_id},
                    {
                        "$set": {
                            "wallet_address": membership.wallet_address,
                            "joined_at": membership.joined_at,
                        }
                    },
                    upsert=True,
                )
            except PyMongoError as e:
                logger.error(f"Failed to record membership: {e}", exc_info=True)
                raise PersistenceError("Could not record membership") from e

            logger.info("Membership recorded")
            return membership

    async def list_memberships(self, chat_id: str) -> List[Membership]:
        """
        Returns the chat identity's memberships, oldest first.
        """
        try:
            cursor = self.memberships.find({"chat_id": chat_id}).sort("joined_at", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to list memberships: {e}", exc_info=True)
            raise PersistenceError("Could not load memberships") from e

        return [Membership(**doc) for doc in docs]

    async def get_membership(self, chat_id: str, group_id: int) -> Optional[Membership]:
        try:
            doc = await self.memberships.find_one({"chat_id": chat_id, "group_id": group_id})
        except PyMongoError as e:
            raise PersistenceError("Could not load membership") from e

        return Membership(**doc) if doc else None
