"""User route handlers.

Endpoints:
    GET    /api/users            -- List all users.
    GET    /api/users/{user_id}  -- Get one user.
    POST   /api/users            -- Create a user.
    DELETE /api/users/{user_id}  -- Delete a user and clean up games.
"""

import logging

from fastapi import APIRouter, Path, status
from pydantic import BaseModel, Field

from gamecatalog.config import settings
from gamecatalog.dal.database import get_database
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.models.user import UserResponse
from gamecatalog.routes.games import MessageResponse
from gamecatalog.services.entity_locks import entity_locks
from gamecatalog.services.sync_service import SyncService
from gamecatalog.services.user_service import UserService

logger = logging.getLogger("gamecatalog.routes.users")

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user_service() -> UserService:
    """Build a UserService wired to the current database."""
    return UserService(UserDAL(get_database()))


def _get_sync_service() -> SyncService:
    db = get_database()
    locks = entity_locks if settings.SERIALIZE_ENTITY_WRITES else None
    return SyncService(GameDAL(db), UserDAL(db), locks=locks)


class CreateUserRequest(BaseModel):
    """Request body for POST /api/users."""
    name: str = Field(..., min_length=1, description="Display name.")


@router.get("", response_model=list[UserResponse], summary="List all users")
async def list_users() -> list[UserResponse]:
    service = _get_user_service()
    return [UserResponse.from_user(u) for u in await service.list_users()]


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(user_id: str = Path(...)) -> UserResponse:
    service = _get_user_service()
    return UserResponse.from_user(await service.get_user(user_id))


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user",
)
async def create_user(body: CreateUserRequest) -> UserResponse:
    service = _get_user_service()
    return UserResponse.from_user(await service.create_user(body.name))


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user and its records on every game",
)
async def delete_user(user_id: str = Path(...)) -> MessageResponse:
    """Delete a user. Every game the user touched loses the user's play
    time, rating and comment and has its weighted rating recomputed.
    """
    service = _get_sync_service()
    await service.delete_user(user_id)
    return MessageResponse(message="User deleted")
