"""
Configuration management for hitome.

Uses Pydantic settings for environment variable support.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from datetime import timedelta


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "hitome API"
    APP_VERSION: str = "0.3.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/hitome.db"

    # Sessions
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_TTL_DAYS: int = 30
    COOKIE_SECURE: bool = True

    # Administrators (LINE user IDs) who may work in the unassigned inbox and manage
    # global danger words
    ADMIN_LINE_USER_IDS: List[str] = Field(default_factory=list)

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # LINE Messaging API (environment-level tenant used when no store matches)
    LINE_CHANNEL_ID: Optional[str] = None
    LINE_CHANNEL_SECRET: Optional[str] = None
    LINE_CHANNEL_ACCESS_TOKEN: Optional[str] = None

    # LINE Login
    LINE_LOGIN_CHANNEL_ID: Optional[str] = None
    LINE_LOGIN_CHANNEL_SECRET: Optional[str] = None

    # Upstream APIs
    LINE_API_BASE: str = "https://api.line.me"
    LINE_AUTH_BASE: str = "https://access.line.me"
    GOOGLE_API_BASE: str = "https://mybusiness.googleapis.com"
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for outbound LINE/Google API calls"
    )

    # Google review notifications
    GOOGLE_WEBHOOK_TOKEN: Optional[str] = Field(
        default=None,
        description="Shared token expected in ?token= on the Google review webhook"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def line_configured(self) -> bool:
        """Whether the environment-level LINE channel can verify and reply."""
        return bool(self.LINE_CHANNEL_SECRET and self.LINE_CHANNEL_ACCESS_TOKEN)

    @property
    def line_login_configured(self) -> bool:
        return bool(self.LINE_LOGIN_CHANNEL_ID and self.LINE_LOGIN_CHANNEL_SECRET)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(days=self.SESSION_TTL_DAYS)


# Global settings instance
settings = Settings()
