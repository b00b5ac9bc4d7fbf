"""User domain model.

One document per user in the ``users`` collection. Play time, ratings and
comments are embedded per game and mirror the matching records on each
Game document.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from gamecatalog.models.common import CAMEL_CONFIG, PyObjectId


class GamePlayTime(BaseModel):
    """Cumulative hours this user has played one game."""

    model_config = CAMEL_CONFIG

    game_id: str
    play_time: float = 0


class GameRating(BaseModel):
    model_config = CAMEL_CONFIG

    game_id: str
    rating: int


class UserComment(BaseModel):
    """This user's comment on a game, with the game name captured at comment time."""

    model_config = CAMEL_CONFIG

    game_id: str
    game_name: str
    content: str
    play_time: float = 0


class User(BaseModel):
    """Represents a catalog user stored in the users collection."""

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    name: str = Field(..., min_length=1)
    total_play_time: float = 0
    average_rating: float = 0
    most_played_game_id: Optional[str] = None
    most_played_game_name: Optional[str] = None
    comments: list[UserComment] = Field(default_factory=list)
    game_play_times: list[GamePlayTime] = Field(default_factory=list)
    game_ratings: list[GameRating] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def play_time_entry(self, game_id: str) -> Optional[GamePlayTime]:
        return next((r for r in self.game_play_times if r.game_id == game_id), None)

    def rating_entry(self, game_id: str) -> Optional[GameRating]:
        return next((r for r in self.game_ratings if r.game_id == game_id), None)

    def comment_on(self, game_id: str) -> Optional[UserComment]:
        return next((c for c in self.comments if c.game_id == game_id), None)

    def references_game(self, game_id: str) -> bool:
        """True if any play time, rating or comment points at the game."""
        return (
            self.play_time_entry(game_id) is not None
            or self.rating_entry(game_id) is not None
            or self.comment_on(game_id) is not None
        )

    def sort_comments(self) -> None:
        """Order comments by play time on the commented game, longest first."""
        self.comments.sort(key=lambda c: c.play_time, reverse=True)

    def to_mongo_dict(self) -> dict[str, Any]:
        """Convert model to a MongoDB document body (``_id`` excluded)."""
        return self.model_dump(mode="python", exclude={"id"})


class UserResponse(BaseModel):
    """Response model for User data returned via API."""

    model_config = CAMEL_CONFIG

    id: str = Field(alias="_id")
    name: str
    total_play_time: float
    average_rating: float
    most_played_game_id: Optional[str] = None
    most_played_game_name: Optional[str] = None
    comments: list[UserComment]
    game_play_times: list[GamePlayTime]
    game_ratings: list[GameRating]
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(**user.model_dump())
