"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Secret used when JWT_SECRET is not configured; rejected in production
DEFAULT_JWT_SECRET = "dev_secret"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    APP_NAME: str = "TaskHive"
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    CORS_ORIGINS: list[str] = []

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres@localhost:5432/saas_db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 5

    # Authentication
    JWT_SECRET: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Tenant defaults applied at registration
    DEFAULT_PLAN: Literal["free", "pro", "enterprise"] = "pro"
    DEFAULT_MAX_USERS: int = 5
    DEFAULT_MAX_PROJECTS: int = 3

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite (tests, local runs)."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
