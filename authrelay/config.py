"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to ``create_app``; instances are frozen.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "authrelay"
    port: int = 3001

    # Session
    session_secret: str

    @field_validator("session_secret")
    @classmethod
    def validate_session_secret(cls, v: str) -> str:
        """Refuse to sign session cookies with a blank secret."""
        if not v.strip():
            raise ValueError("SESSION_SECRET must not be empty")
        return v

    # Public URLs
    backend_url: str = "http://localhost:3001"
    frontend_url: str = "http://localhost:3000"

    @field_validator("backend_url", "frontend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""

    # Used by the search front-end, only reported here
    rapidapi_key: str = ""

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def github_callback_url(self) -> str:
        return f"{self.backend_url}/auth/github/callback"

    @property
    def google_callback_url(self) -> str:
        return f"{self.backend_url}/auth/google/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
