from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Inventory Insights API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Redis cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL: int = 300

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Session tokens
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_SECONDS: int = 3600
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_COOKIE_SECURE: bool = False

    # CORS
    CORS_DEFAULT_ORIGIN: str = "https://stockly-inventory.vercel.app"
    CORS_ALLOWED_ORIGINS: List[str] = [
        "https://stockly-inventory.vercel.app",
        "http://localhost:3000",
    ]


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
