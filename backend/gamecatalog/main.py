"""
Game Catalog FastAPI Application Entry Point.

Configures FastAPI, sets up middleware and error handlers, registers routes
and manages the MongoDB connection lifecycle.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.routing import Match

from gamecatalog.config import configure_logging, settings
from gamecatalog.dal.database import connect_to_mongo, close_mongo_connection, ensure_indexes, get_database
from gamecatalog.errors import register_exception_handlers
from gamecatalog.middleware.request_logging import log_requests
from gamecatalog.routes.health import router as health_router
from gamecatalog.routes.games import router as games_router
from gamecatalog.routes.users import router as users_router

logger = logging.getLogger("gamecatalog.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Handles startup and shutdown events for MongoDB connection.
    """
    configure_logging()
    try:
        await connect_to_mongo()
        db = get_database()
        await ensure_indexes(db)
        logger.info("Game Catalog v%s started with database connection", settings.APP_VERSION)
    except Exception as e:
        # Start anyway so health checks can report the degraded state
        logger.warning(
            "Failed to connect to MongoDB during startup: %s. "
            "Application will start but database operations will fail until connection is established.",
            str(e)
        )
        logger.info("Game Catalog v%s started WITHOUT database connection", settings.APP_VERSION)

    yield

    await close_mongo_connection()
    logger.info("Game Catalog shutdown complete")


app = FastAPI(
    title="Game Catalog API",
    description="Games, users, play time, ratings and comments - REST API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=600,  # Cache preflight requests for 10 minutes
)
app.middleware("http")(log_requests)

register_exception_handlers(app)

# Register routers
app.include_router(health_router)  # Health endpoint at root level
app.include_router(health_router, prefix="/api")
app.include_router(games_router, prefix="/api")
app.include_router(users_router, prefix="/api")


@app.api_route(
    "/api/{full_path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def api_not_found(request: Request, full_path: str) -> JSONResponse:
    """Catch-all for unknown API paths. Registered after every API router.

    A path some router serves under another method gets 405, not 404.
    """
    allowed: set[str] = set()
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.PARTIAL:
            allowed.update(getattr(route, "methods", None) or ())
    if allowed:
        logger.info("Method not allowed: %s /api/%s", request.method, full_path)
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"message": "Method Not Allowed"},
            headers={"Allow": ", ".join(sorted(allowed))},
        )

    logger.info("API endpoint not found: /api/%s", full_path)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": "API endpoint not found"},
    )


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Game Catalog API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gamecatalog.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
