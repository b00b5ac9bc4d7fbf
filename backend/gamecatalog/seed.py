#!/usr/bin/env python
"""
Database seed script - replaces all games and users with sample data.

Every play, rating and comment goes through SyncService, so the seeded
documents obey the same mirror and aggregate rules as live traffic.

Usage:
    python -m gamecatalog.seed [--seed N]
"""

import argparse
import asyncio
import logging
import random
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from gamecatalog.config import configure_logging, settings
from gamecatalog.dal.database import close_mongo_connection, connect_to_mongo, ensure_indexes, get_database
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.services.game_service import GameService
from gamecatalog.services.sync_service import SyncService
from gamecatalog.services.user_service import UserService

logger = logging.getLogger("gamecatalog.seed")

SAMPLE_GAMES = [
    {
        "name": "The Witcher 3: Wild Hunt",
        "genres": ["RPG", "Open World", "Action"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co1wyy.jpg",
        "optional_attributes": {
            "releaseDate": "2015-05-19",
            "developer": "CD Projekt RED",
            "platforms": "PC, PlayStation, Xbox, Switch",
        },
    },
    {
        "name": "Red Dead Redemption 2",
        "genres": ["Action", "Adventure", "Open World"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co1q1f.jpg",
        "optional_attributes": {
            "releaseDate": "2018-10-26",
            "developer": "Rockstar Games",
            "platforms": "PC, PlayStation, Xbox",
        },
    },
    {
        "name": "Minecraft",
        "genres": ["Sandbox", "Survival", "Building"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co49x5.jpg",
        "optional_attributes": {
            "releaseDate": "2011-11-18",
            "developer": "Mojang Studios",
            "playerMode": "Single-player, Multiplayer",
        },
    },
    {
        "name": "Grand Theft Auto V",
        "genres": ["Action", "Adventure", "Open World"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co1ivc.jpg",
    },
    {
        "name": "The Legend of Zelda: Breath of the Wild",
        "genres": ["Action", "Adventure", "Open World"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co3p2d.jpg",
    },
    {
        "name": "Fortnite",
        "genres": ["Battle Royale", "Shooter", "Survival"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co2ekt.jpg",
    },
    {
        "name": "FIFA 23",
        "genres": ["Sports", "Simulation"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co4p43.jpg",
    },
    {
        "name": "Call of Duty: Modern Warfare II",
        "genres": ["FPS", "Action", "Shooter"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co4sbw.jpg",
    },
    {
        "name": "Among Us",
        "genres": ["Party", "Social Deduction", "Indie"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co2s7n.jpg",
    },
    {
        "name": "Cyberpunk 2077",
        "genres": ["RPG", "Action", "Open World"],
        "photo_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co4bko.jpg",
        "optional_attributes": {
            "releaseDate": "2020-12-10",
            "developer": "CD Projekt RED",
            "setting": "Dystopian Future",
        },
    },
]

SAMPLE_USERS = [
    "Alex Johnson",
    "Emma Davis",
    "Michael Smith",
    "Olivia Wilson",
    "James Brown",
    "Sophia Miller",
    "William Taylor",
    "Ava Anderson",
    "Benjamin Thomas",
    "Isabella Jackson",
]

# The first ACTIVE_USERS users play the first PLAYED_GAMES games and
# rate/comment on the first REVIEWED_GAMES of those.
ACTIVE_USERS = 3
PLAYED_GAMES = 5
REVIEWED_GAMES = 3


async def seed_database(
    db: AsyncIOMotorDatabase,
    rng: Optional[random.Random] = None,
) -> dict[str, int]:
    """Clear both collections and insert sample games, users and activity.

    Args:
        db: Target database.
        rng: Source of play hours and ratings (seed it for repeatable data).

    Returns:
        Counts of inserted games, users and recorded plays.
    """
    rng = rng or random.Random()
    game_dal = GameDAL(db)
    user_dal = UserDAL(db)

    removed_games = await game_dal.delete_all()
    removed_users = await user_dal.delete_all()
    logger.info("Cleared %d games and %d users", removed_games, removed_users)

    game_service = GameService(game_dal)
    games = [await game_service.create_game(**data) for data in SAMPLE_GAMES]
    logger.info("Inserted %d games", len(games))

    user_service = UserService(user_dal)
    users = [await user_service.create_user(name) for name in SAMPLE_USERS]
    logger.info("Inserted %d users", len(users))

    sync = SyncService(game_dal, user_dal)
    plays = 0
    for user in users[:ACTIVE_USERS]:
        for index, game in enumerate(games[:PLAYED_GAMES]):
            hours = rng.randint(5, 24)
            await sync.record_play(game.id, user.id, hours)
            plays += 1

            if index < REVIEWED_GAMES:
                await sync.rate_game(game.id, user.id, rng.randint(1, 5))
                await sync.comment_on_game(
                    game.id,
                    user.id,
                    f"This is my comment on {game.name}. I spent {hours} hours playing it.",
                )

    logger.info("Seed completed: %d plays recorded", plays)
    return {"games": len(games), "users": len(users), "plays": plays}


async def _main(seed: Optional[int]) -> None:
    await connect_to_mongo()
    try:
        db = get_database()
        await ensure_indexes(db)
        await seed_database(db, random.Random(seed))
    finally:
        await close_mongo_connection()


def main() -> None:
    parser = argparse.ArgumentParser(description="Populate the catalog with sample data.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    configure_logging()
    logger.info("Seeding database %s at %s", settings.DATABASE_NAME, settings.MONGO_URL)
    asyncio.run(_main(args.seed))


if __name__ == "__main__":
    main()
