"""
Pytest configuration and fixtures for the game catalog tests.

This module provides shared fixtures for testing async FastAPI endpoints
and MongoDB interactions using mongomock-motor (no real MongoDB required).
"""

import os

# Keep test runs independent of a developer's .env
os.environ.setdefault("DATABASE_NAME", "game_catalog_test")

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from gamecatalog.dal import database as db_module
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.models.game import Game
from gamecatalog.models.user import User
from gamecatalog.routes import games as games_route_module
from gamecatalog.routes import health as health_route_module
from gamecatalog.routes import users as users_route_module
from gamecatalog.services.entity_locks import EntityLocks
from gamecatalog.services.sync_service import SyncService


@pytest.fixture
def anyio_backend():
    """Specify anyio backend for async tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def mock_db():
    """In-memory MongoDB mock database for unit tests.

    Uses mongomock-motor so no real MongoDB instance is needed.
    The database is ephemeral -- it disappears after each test.
    """
    client = AsyncMongoMockClient()
    db = client["game_catalog_test"]
    yield db
    client.close()


@pytest_asyncio.fixture
async def game_dal(mock_db) -> GameDAL:
    return GameDAL(mock_db)


@pytest_asyncio.fixture
async def user_dal(mock_db) -> UserDAL:
    return UserDAL(mock_db)


@pytest_asyncio.fixture
async def sync_service(game_dal, user_dal) -> SyncService:
    """SyncService with its own lock registry, backed by the mock database."""
    return SyncService(game_dal, user_dal, locks=EntityLocks())


@pytest_asyncio.fixture
async def make_game(game_dal):
    """Factory inserting a game with sensible defaults."""
    async def _make(name: str = "Hades", **fields) -> Game:
        fields.setdefault("photo_url", f"https://img.example/{name.lower()}.jpg")
        return await game_dal.create(Game(name=name, **fields))
    return _make


@pytest_asyncio.fixture
async def make_user(user_dal):
    """Factory inserting a user with no activity."""
    async def _make(name: str = "Ada") -> User:
        return await user_dal.create(User(name=name))
    return _make


@pytest_asyncio.fixture
async def client():
    """Async HTTP client for testing FastAPI endpoints (database not patched).

    Yields:
        AsyncClient: HTTPX async client with the FastAPI app.
    """
    from httpx import ASGITransport, AsyncClient
    from gamecatalog.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def api_client(mock_db, monkeypatch):
    """Async HTTP client with every ``get_database`` reference patched to the mock db."""
    from httpx import ASGITransport, AsyncClient
    from gamecatalog.main import app

    getter = lambda: mock_db
    for module in (db_module, games_route_module, users_route_module, health_route_module):
        monkeypatch.setattr(module, "get_database", getter)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
