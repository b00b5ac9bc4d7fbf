"""Game route handlers.

Endpoints:
    GET    /api/games                       -- List all games.
    POST   /api/games                       -- Create a game.
    GET    /api/games/{game_id}             -- Get one game.
    DELETE /api/games/{game_id}             -- Delete a game and clean up users.
    PATCH  /api/games/{game_id}/rating-status -- Enable/disable rating and comments.
    PATCH  /api/games/{game_id}/play        -- Record play time for a user.
    POST   /api/games/{game_id}/rate        -- Rate a game (1-5).
    POST   /api/games/{game_id}/comment     -- Comment on a game.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Path, status
from pydantic import BaseModel, Field, StrictBool

from gamecatalog.config import settings
from gamecatalog.dal.database import get_database
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.models.common import CAMEL_CONFIG
from gamecatalog.models.game import GameResponse, ScalarValue
from gamecatalog.models.user import UserResponse
from gamecatalog.services.entity_locks import entity_locks
from gamecatalog.services.game_service import GameService
from gamecatalog.services.sync_service import SyncResult, SyncService

logger = logging.getLogger("gamecatalog.routes.games")

router = APIRouter(prefix="/games", tags=["Games"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_game_service() -> GameService:
    """Build a GameService wired to the current database."""
    return GameService(GameDAL(get_database()))


def _get_sync_service() -> SyncService:
    """Build a SyncService wired to the current database."""
    db = get_database()
    locks = entity_locks if settings.SERIALIZE_ENTITY_WRITES else None
    return SyncService(GameDAL(db), UserDAL(db), locks=locks)


# ---------------------------------------------------------------------------
# Pydantic request / response schemas
# ---------------------------------------------------------------------------

class CreateGameRequest(BaseModel):
    """Request body for POST /api/games."""
    model_config = CAMEL_CONFIG

    name: str = Field(..., min_length=1, description="Game display name.")
    photo_url: str = Field(..., min_length=1, description="Cover image URL.")
    genres: list[str] = Field(default_factory=list, description="At most 5 genres.")
    optional_attributes: Optional[dict[str, ScalarValue]] = None


class RatingStatusRequest(BaseModel):
    """Request body for PATCH /api/games/{game_id}/rating-status."""
    enable: StrictBool


class PlayRequest(BaseModel):
    """Request body for PATCH /api/games/{game_id}/play."""
    model_config = CAMEL_CONFIG

    user_id: str
    hours: float = Field(..., allow_inf_nan=False, description="Hours to add, must be > 0.")


class RateRequest(BaseModel):
    """Request body for POST /api/games/{game_id}/rate."""
    model_config = CAMEL_CONFIG

    user_id: str
    rating: int


class CommentRequest(BaseModel):
    """Request body for POST /api/games/{game_id}/comment."""
    model_config = CAMEL_CONFIG

    user_id: str
    content: str


class GameUserResponse(BaseModel):
    """Both documents after a synchronized update."""
    game: GameResponse
    user: UserResponse

    @classmethod
    def from_result(cls, result: SyncResult) -> "GameUserResponse":
        return cls(
            game=GameResponse.from_game(result.game),
            user=UserResponse.from_user(result.user),
        )


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Catalog CRUD
# ---------------------------------------------------------------------------

@router.get("", response_model=list[GameResponse], summary="List all games")
async def list_games() -> list[GameResponse]:
    service = _get_game_service()
    return [GameResponse.from_game(g) for g in await service.list_games()]


@router.post(
    "",
    response_model=GameResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new game",
)
async def create_game(body: CreateGameRequest) -> GameResponse:
    """Create a game. Play time and rating start at zero."""
    service = _get_game_service()
    game = await service.create_game(
        name=body.name,
        photo_url=body.photo_url,
        genres=body.genres,
        optional_attributes=body.optional_attributes,
    )
    return GameResponse.from_game(game)


@router.get("/{game_id}", response_model=GameResponse, summary="Get a game")
async def get_game(game_id: str = Path(...)) -> GameResponse:
    service = _get_game_service()
    return GameResponse.from_game(await service.get_game(game_id))


@router.delete(
    "/{game_id}",
    response_model=MessageResponse,
    summary="Delete a game and its records on every user",
)
async def delete_game(game_id: str = Path(...)) -> MessageResponse:
    """Delete a game. Users that played, rated or commented on it are
    cleaned up and have their averages and most played game recomputed.
    """
    service = _get_sync_service()
    await service.delete_game(game_id)
    return MessageResponse(message="Game deleted")


# ---------------------------------------------------------------------------
# Synchronized game/user actions
# ---------------------------------------------------------------------------

@router.patch(
    "/{game_id}/rating-status",
    response_model=GameResponse,
    summary="Enable or disable rating and comments",
)
async def set_rating_status(
    body: RatingStatusRequest,
    game_id: str = Path(...),
) -> GameResponse:
    service = _get_sync_service()
    game = await service.set_rating_enabled(game_id, body.enable)
    return GameResponse.from_game(game)


@router.patch(
    "/{game_id}/play",
    response_model=GameUserResponse,
    summary="Record play time",
)
async def record_play(
    body: PlayRequest,
    game_id: str = Path(...),
) -> GameUserResponse:
    """Add ``hours`` to the user's cumulative play time on the game."""
    service = _get_sync_service()
    result = await service.record_play(game_id, body.user_id, body.hours)
    return GameUserResponse.from_result(result)


@router.post(
    "/{game_id}/rate",
    response_model=GameUserResponse,
    summary="Rate a game",
)
async def rate_game(
    body: RateRequest,
    game_id: str = Path(...),
) -> GameUserResponse:
    """Rate a game 1-5. Requires at least one hour of play and rating enabled."""
    service = _get_sync_service()
    result = await service.rate_game(game_id, body.user_id, body.rating)
    return GameUserResponse.from_result(result)


@router.post(
    "/{game_id}/comment",
    response_model=GameUserResponse,
    summary="Comment on a game",
)
async def comment_on_game(
    body: CommentRequest,
    game_id: str = Path(...),
) -> GameUserResponse:
    """Comment on a game. A repeat comment replaces the earlier one."""
    service = _get_sync_service()
    result = await service.comment_on_game(game_id, body.user_id, body.content)
    return GameUserResponse.from_result(result)
