"""
Configuration module for environment variables.
"""
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(
        default="sqlite:///./taskboard.db",
        description="SQLAlchemy connection URL"
    )

    # Authentication
    secret_key: str = Field(default="CHANGE_THIS_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        description="Lifetime of an issued token (7 days)"
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # HTTP
    api_prefix: str = Field(
        default="",
        description="Optional prefix for all routers, e.g. /api"
    )
    cors_origins: List[str] = Field(default=["*"])

    # Client
    api_base_url: str = Field(default="http://localhost:8000")
    client_state_path: str = Field(
        default="~/.taskboard/state.json",
        description="Where the command-line client keeps its token and sections"
    )
    reconcile_delay_seconds: float = Field(
        default=2.0,
        description="Delay before the board refetches after a failed move"
    )

    # Application Settings
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Convenience function for direct access
settings = get_settings()
