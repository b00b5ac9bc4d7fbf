"""Game catalog service.

Handles game creation and lookup. Anything that touches user records as
well (play, rate, comment, delete) goes through ``SyncService``.
"""

import logging
from typing import Any, Optional

from fastapi import HTTPException, status

from gamecatalog.config import settings
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.models.game import Game

logger = logging.getLogger("gamecatalog.services.game")


class GameService:
    """Service layer for game CRUD operations."""

    def __init__(self, game_dal: GameDAL) -> None:
        self._game_dal = game_dal

    async def create_game(
        self,
        name: str,
        photo_url: str,
        genres: Optional[list[str]] = None,
        optional_attributes: Optional[dict[str, Any]] = None,
    ) -> Game:
        """Create a new game with zeroed aggregates.

        Args:
            name: Display name (required).
            photo_url: Cover image URL (required).
            genres: Up to ``MAX_GENRES`` genre labels, order preserved.
            optional_attributes: Free-form scalar attributes.

        Returns:
            The created Game.

        Raises:
            HTTPException 400: Missing name/photo URL or too many genres.
        """
        genres = list(genres or [])
        if not name or not name.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Game name is required",
            )
        if not photo_url or not photo_url.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Game photoUrl is required",
            )
        if len(genres) > settings.MAX_GENRES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"genres exceeds the limit of {settings.MAX_GENRES}",
            )

        game = Game(
            name=name.strip(),
            photo_url=photo_url.strip(),
            genres=genres,
            optional_attributes=optional_attributes or {},
        )
        game = await self._game_dal.create(game)
        logger.info("Game created: id=%s name=%s", game.id, game.name)
        return game

    async def list_games(self) -> list[Game]:
        return await self._game_dal.list_all()

    async def get_game(self, game_id: str) -> Game:
        """Get a game by its MongoDB ID.

        Raises:
            HTTPException 404: Game not found.
        """
        game = await self._game_dal.get_by_id(game_id)
        if game is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Game not found",
            )
        return game
