"""Data Access Layer -- MongoDB repository classes and connection management."""

from gamecatalog.dal.database import (
    connect_to_mongo,
    close_mongo_connection,
    ensure_indexes,
    get_database,
)
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL

__all__ = [
    # Connection management
    "connect_to_mongo",
    "close_mongo_connection",
    "ensure_indexes",
    "get_database",
    # DAL classes
    "GameDAL",
    "UserDAL",
]
