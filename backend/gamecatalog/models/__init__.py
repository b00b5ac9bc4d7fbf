"""Pydantic models for the game catalog."""

from gamecatalog.models.common import CAMEL_CONFIG, PyObjectId
from gamecatalog.models.game import (
    Game,
    GameComment,
    GameResponse,
    UserPlayTime,
    UserRating,
)
from gamecatalog.models.user import (
    GamePlayTime,
    GameRating,
    User,
    UserComment,
    UserResponse,
)

__all__ = [
    # Shared types
    "CAMEL_CONFIG",
    "PyObjectId",
    # Game models
    "Game",
    "GameComment",
    "GameResponse",
    "UserPlayTime",
    "UserRating",
    # User models
    "User",
    "UserComment",
    "UserResponse",
    "GamePlayTime",
    "GameRating",
]
