"""User catalog service: creation and lookup."""

import logging

from fastapi import HTTPException, status

from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.models.user import User

logger = logging.getLogger("gamecatalog.services.user")


class UserService:
    """Service layer for user CRUD operations."""

    def __init__(self, user_dal: UserDAL) -> None:
        self._user_dal = user_dal

    async def create_user(self, name: str) -> User:
        """Create a user with no play history.

        Raises:
            HTTPException 400: Name missing or blank.
        """
        if not name or not name.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User name is required",
            )
        user = await self._user_dal.create(User(name=name.strip()))
        logger.info("User created: id=%s name=%s", user.id, user.name)
        return user

    async def list_users(self) -> list[User]:
        return await self._user_dal.list_all()

    async def get_user(self, user_id: str) -> User:
        user = await self._user_dal.get_by_id(user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user
