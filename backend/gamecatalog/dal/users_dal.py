"""User Data Access Layer -- MongoDB operations for the users collection.

Provides async CRUD for User documents plus the reverse lookup used when a
game is deleted. All ObjectId handling is transparent.
"""

import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from gamecatalog.models.user import User

logger = logging.getLogger("gamecatalog.dal.users")

COLLECTION = "users"


class UserDAL:
    """Data access layer for the users collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db[COLLECTION]

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, user: User) -> User:
        """Insert a new user document and return it with its generated id."""
        doc = user.to_mongo_dict()
        result = await self._collection.insert_one(doc)
        user.id = str(result.inserted_id)
        logger.info("Created user %s (%s)", user.id, user.name)
        return user

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by its MongoDB ``_id``.

        Args:
            user_id: String representation of the ObjectId.

        Returns:
            A User instance, or None if not found or the id is malformed.
        """
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self._collection.find_one({"_id": ObjectId(user_id)})
        if doc is None:
            return None
        doc["_id"] = str(doc["_id"])
        return User(**doc)

    async def list_all(self) -> list[User]:
        cursor = self._collection.find().sort("created_at", 1)
        users: list[User] = []
        async for doc in cursor:
            doc["_id"] = str(doc["_id"])
            users.append(User(**doc))
        return users

    async def find_referencing_game(self, game_id: str) -> list[User]:
        """Find every user holding a play time, rating or comment for a game.

        Uses the ``idx_*_game`` indexes on the embedded arrays.
        """
        cursor = self._collection.find(
            {
                "$or": [
                    {"game_play_times.game_id": game_id},
                    {"game_ratings.game_id": game_id},
                    {"comments.game_id": game_id},
                ]
            }
        )
        users: list[User] = []
        async for doc in cursor:
            doc["_id"] = str(doc["_id"])
            users.append(User(**doc))
        return users

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def save(self, user: User) -> bool:
        """Replace the stored document with the in-memory user.

        Returns:
            True if a document was matched, False if it no longer exists.
        """
        if user.id is None or not ObjectId.is_valid(user.id):
            return False

        result = await self._collection.replace_one(
            {"_id": ObjectId(user.id)},
            user.to_mongo_dict(),
        )
        if result.matched_count == 0:
            logger.warning("Save skipped: user %s no longer exists", user.id)
        return result.matched_count > 0

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, user_id: str) -> bool:
        """Delete a user document by its MongoDB ``_id``.

        Returns:
            True if a document was deleted, False otherwise.
        """
        if not ObjectId.is_valid(user_id):
            return False

        result = await self._collection.delete_one({"_id": ObjectId(user_id)})
        if result.deleted_count > 0:
            logger.info("Deleted user %s", user_id)
        return result.deleted_count > 0

    async def delete_all(self) -> int:
        """Remove every user. Used by the seed script only."""
        result = await self._collection.delete_many({})
        return result.deleted_count
