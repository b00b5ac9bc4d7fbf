"""MongoDB database connection management using Motor async driver.

Includes connection lifecycle and the indexes backing the cascade scans
that keep Game and User mirrors consistent on delete.
"""

import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from gamecatalog.config import settings

logger = logging.getLogger("gamecatalog.dal.database")

# Global database client and database instances
_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None


class DatabaseNotInitializedError(RuntimeError):
    """Raised when the database is used before ``connect_to_mongo()`` succeeded."""


async def connect_to_mongo() -> None:
    """Establish connection to MongoDB.

    Called during FastAPI application startup.
    """
    global _client, _database

    _client = AsyncIOMotorClient(
        settings.MONGO_URL,
        serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS,
    )
    _database = _client[settings.DATABASE_NAME]

    # Verify connection by pinging the database
    await _client.admin.command("ping")
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)


async def close_mongo_connection() -> None:
    """Close MongoDB connection.

    Called during FastAPI application shutdown.
    """
    global _client, _database

    if _client:
        _client.close()
        _client = None
        _database = None
        logger.info("Closed MongoDB connection")


def get_database() -> AsyncIOMotorDatabase:
    """Get the MongoDB database instance.

    Returns:
        AsyncIOMotorDatabase: The database instance.

    Raises:
        DatabaseNotInitializedError: If database is not initialized.
    """
    if _database is None:
        raise DatabaseNotInitializedError(
            "Database not initialized. Call connect_to_mongo() first."
        )
    return _database


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the indexes used by listing and cascade queries.

    This is idempotent -- MongoDB silently ignores indexes that already exist.

    Args:
        db: The Motor database instance to create indexes on.
    """
    logger.info("Ensuring indexes for all collections...")

    # --- games: find every game a user has touched (user delete cascade) ---
    games = db.games
    await games.create_index(
        [("user_play_times.user_id", ASCENDING)], name="idx_play_times_user"
    )
    await games.create_index(
        [("user_ratings.user_id", ASCENDING)], name="idx_ratings_user"
    )
    await games.create_index(
        [("comments.user_id", ASCENDING)], name="idx_comments_user"
    )
    await games.create_index(
        [("created_at", DESCENDING)], name="idx_games_created"
    )

    # --- users: find every user that touched a game (game delete cascade) ---
    users = db.users
    await users.create_index(
        [("game_play_times.game_id", ASCENDING)], name="idx_play_times_game"
    )
    await users.create_index(
        [("game_ratings.game_id", ASCENDING)], name="idx_ratings_game"
    )
    await users.create_index(
        [("comments.game_id", ASCENDING)], name="idx_comments_game"
    )

    logger.info("All indexes ensured successfully.")
