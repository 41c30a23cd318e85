"""Runtime configuration for GymDesk, read from the environment or a local .env file."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "GymDesk"
    API_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Store
    DATABASE_URL: str = "sqlite:///./gymdesk.db"

    # Auth
    SECRET_KEY: str = "CHANGE_ME"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    # Privileged key for the one-time setup endpoints; never sent to clients.
    SERVICE_ROLE_KEY: str = "test-service-role-key"

    # Scheduling
    STUDIO_TIMEZONE: str = "UTC"
    CONFLICT_CHECK_POLICY: Literal["fail_open", "fail_closed"] = "fail_open"

    QUERY_CACHE_TTL_SECONDS: int = 300

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings instance."""
    return Settings()
