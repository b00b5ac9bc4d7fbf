"""Game domain model.

One document per game in the ``games`` collection. Per-user play time,
ratings and comments are embedded and mirror the matching records on
each User document.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from gamecatalog.models.common import CAMEL_CONFIG, PyObjectId

ScalarValue = Union[str, int, float, bool, None]


class UserPlayTime(BaseModel):
    """Cumulative hours one user has played this game."""

    model_config = CAMEL_CONFIG

    user_id: str
    play_time: float = 0


class UserRating(BaseModel):
    """One user's 1-5 rating of this game."""

    model_config = CAMEL_CONFIG

    user_id: str
    rating: int


class GameComment(BaseModel):
    """A user's comment on this game.

    ``play_time`` is a copy of the author's play time, refreshed whenever
    the author records more play, so the list can be ordered without
    reading the users collection.
    """

    model_config = CAMEL_CONFIG

    user_id: str
    user_name: str
    content: str
    play_time: float = 0


class Game(BaseModel):
    """Represents a catalog game stored in the games collection."""

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    name: str = Field(..., min_length=1)
    genres: list[str] = Field(default_factory=list)
    photo_url: str = Field(..., min_length=1)
    play_time: float = 0
    rating: float = 0
    rating_enabled: bool = True
    comments: list[GameComment] = Field(default_factory=list)
    user_play_times: list[UserPlayTime] = Field(default_factory=list)
    user_ratings: list[UserRating] = Field(default_factory=list)
    optional_attributes: dict[str, ScalarValue] = Field(default_factory=dict)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def play_time_entry(self, user_id: str) -> Optional[UserPlayTime]:
        return next((r for r in self.user_play_times if r.user_id == user_id), None)

    def rating_entry(self, user_id: str) -> Optional[UserRating]:
        return next((r for r in self.user_ratings if r.user_id == user_id), None)

    def comment_by(self, user_id: str) -> Optional[GameComment]:
        return next((c for c in self.comments if c.user_id == user_id), None)

    def user_play_time(self, user_id: str) -> float:
        """Hours the given user has recorded on this game (0 if none)."""
        entry = self.play_time_entry(user_id)
        return entry.play_time if entry is not None else 0

    def references_user(self, user_id: str) -> bool:
        """True if any play time, rating or comment belongs to the user."""
        return (
            self.play_time_entry(user_id) is not None
            or self.rating_entry(user_id) is not None
            or self.comment_by(user_id) is not None
        )

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def sort_comments(self) -> None:
        """Order comments by the author's play time, longest first."""
        self.comments.sort(key=lambda c: c.play_time, reverse=True)

    def to_mongo_dict(self) -> dict[str, Any]:
        """Convert model to a MongoDB document body (``_id`` excluded)."""
        return self.model_dump(mode="python", exclude={"id"})


class GameResponse(BaseModel):
    """Response model for Game data returned via API."""

    model_config = CAMEL_CONFIG

    id: str = Field(alias="_id")
    name: str
    genres: list[str]
    photo_url: str
    play_time: float
    rating: float
    rating_enabled: bool
    comments: list[GameComment]
    user_play_times: list[UserPlayTime]
    user_ratings: list[UserRating]
    optional_attributes: dict[str, ScalarValue]
    created_at: Optional[datetime] = None

    @classmethod
    def from_game(cls, game: Game) -> "GameResponse":
        return cls(**game.model_dump())
