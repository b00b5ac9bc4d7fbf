"""Game Data Access Layer -- MongoDB operations for the games collection.

Provides async CRUD for Game documents plus the reverse lookup used when a
user is deleted. All ObjectId handling is transparent: callers pass/receive
strings, the DAL converts as needed.

Saves replace the whole document. Two saves (one game, one user) are never
atomic with each other.
"""

import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from gamecatalog.models.game import Game

logger = logging.getLogger("gamecatalog.dal.games")

COLLECTION = "games"


class GameDAL:
    """Data access layer for the games collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db[COLLECTION]

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, game: Game) -> Game:
        """Insert a new game document and return it with its generated id.

        Args:
            game: A Game model instance (id may be None).

        Returns:
            The Game with its ``id`` populated from the inserted ObjectId.
        """
        doc = game.to_mongo_dict()
        result = await self._collection.insert_one(doc)
        game.id = str(result.inserted_id)
        logger.info("Created game %s (%s)", game.id, game.name)
        return game

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, game_id: str) -> Optional[Game]:
        """Find a game by its MongoDB ``_id``.

        Args:
            game_id: String representation of the ObjectId.

        Returns:
            A Game instance, or None if not found or the id is malformed.
        """
        if not ObjectId.is_valid(game_id):
            return None
        doc = await self._collection.find_one({"_id": ObjectId(game_id)})
        if doc is None:
            return None
        doc["_id"] = str(doc["_id"])
        return Game(**doc)

    async def get_name(self, game_id: str) -> Optional[str]:
        """Return only the display name of a game, or None if it is gone.

        Matches the ``GameNameLookup`` signature expected by
        ``UserAggregateUpdater``.
        """
        if not ObjectId.is_valid(game_id):
            return None
        doc = await self._collection.find_one(
            {"_id": ObjectId(game_id)}, {"name": 1}
        )
        if doc is None:
            return None
        return doc.get("name")

    async def list_all(self) -> list[Game]:
        """List all games, oldest first.

        Returns:
            A list of Game instances.
        """
        cursor = self._collection.find().sort("created_at", 1)
        games: list[Game] = []
        async for doc in cursor:
            doc["_id"] = str(doc["_id"])
            games.append(Game(**doc))
        return games

    async def find_referencing_user(self, user_id: str) -> list[Game]:
        """Find every game holding a play time, rating or comment of a user.

        Uses the ``idx_*_user`` indexes on the embedded arrays.

        Args:
            user_id: String id of the user.

        Returns:
            A list of Game instances.
        """
        cursor = self._collection.find(
            {
                "$or": [
                    {"user_play_times.user_id": user_id},
                    {"user_ratings.user_id": user_id},
                    {"comments.user_id": user_id},
                ]
            }
        )
        games: list[Game] = []
        async for doc in cursor:
            doc["_id"] = str(doc["_id"])
            games.append(Game(**doc))
        return games

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def save(self, game: Game) -> bool:
        """Replace the stored document with the in-memory game.

        Args:
            game: A Game previously loaded or created (``id`` set).

        Returns:
            True if a document was matched, False if it no longer exists.
        """
        if game.id is None or not ObjectId.is_valid(game.id):
            return False

        result = await self._collection.replace_one(
            {"_id": ObjectId(game.id)},
            game.to_mongo_dict(),
        )
        if result.matched_count == 0:
            logger.warning("Save skipped: game %s no longer exists", game.id)
        return result.matched_count > 0

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, game_id: str) -> bool:
        """Delete a game document by its MongoDB ``_id``.

        Args:
            game_id: String representation of the ObjectId.

        Returns:
            True if a document was deleted, False otherwise.
        """
        if not ObjectId.is_valid(game_id):
            return False

        result = await self._collection.delete_one({"_id": ObjectId(game_id)})
        if result.deleted_count > 0:
            logger.info("Deleted game %s", game_id)
        return result.deleted_count > 0

    async def delete_all(self) -> int:
        """Remove every game. Used by the seed script only."""
        result = await self._collection.delete_many({})
        return result.deleted_count
