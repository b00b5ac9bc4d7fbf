"""Application configuration using Pydantic BaseSettings."""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("gamecatalog.config")

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # MongoDB Configuration
    MONGO_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "game_catalog"
    MONGO_TIMEOUT_MS: int = 5000

    # CORS Configuration
    # Comma-separated list of allowed origins, or "*" for all origins
    CORS_ORIGINS: str = "*"

    # Application Metadata
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Catalog rules
    SERIALIZE_ENTITY_WRITES: bool = True
    MIN_REVIEW_PLAY_HOURS: float = 1
    MAX_GENRES: int = 5

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        """Normalise LOG_LEVEL and reject names the logging module does not know."""
        level = str(v or "INFO").upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @property
    def cors_origins(self) -> list[str]:
        """Return list of allowed CORS origins.

        An empty value or "*" allows every origin, which is what the
        bundled single-page UI expects when served from another host.
        """
        if not self.CORS_ORIGINS or self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API process and the seed script."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=_LOG_FORMAT,
    )


# Global settings instance
settings = Settings()
