"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Gallery Exhibition API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./gallery.db"
    DATABASE_URL_SYNC: str = "sqlite:///./gallery.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    SQLITE_BUSY_TIMEOUT_MS: int = 3000
    SEED_INITIAL_DATA: bool = True

    # Serialized writes
    LOCK_TIMEOUT_MS: int = 3000
    WRITE_RETRY_ATTEMPTS: int = 3
    WRITE_RETRY_BASE_DELAY: float = 0.05  # seconds, doubled per attempt
    WRITE_RETRY_MAX_DELAY: float = 1.0

    # Domain limits
    MAX_LOCATION_DIMENSION: int = 1000

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
