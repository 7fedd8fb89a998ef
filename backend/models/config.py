import os
import sys
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `SECRET_KEY` and the
    SMTP credentials can be provided from `backend/.env`. **SECRET_KEY remains
    required** and must be set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI (so tests
    that validate missing secrets continue to fail fast).
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/globalstudyshare.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )
    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public frontend URL, also trusted as a redirect origin",
    )
    DEFAULT_LANDING_PATH: str = Field(
        default="/",
        description="Where clients denied an administrative view are sent "
        "when no trustworthy referrer is available",
    )

    # Initial super-admin (used by init_db.py)
    ADMIN_EMAIL: str = Field(
        ...,  # Required, no default
        description="Super-admin email - must be set via ADMIN_EMAIL environment variable",
    )
    ADMIN_PASSWORD: str = Field(
        ...,  # Required, no default
        description="Super-admin password - must be set via ADMIN_PASSWORD environment variable",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    # Safety: avoid creating DB schema automatically unless explicitly enabled.
    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    SMTP_HOST: str = Field(
        default="smtp.gmail.com",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USER: str = Field(
        default="",
        validation_alias=AliasChoices("SMTP_USER", "EMAIL_USER"),
        description="SMTP username (EMAIL_USER is accepted as well)",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASSWORD"),
        description="SMTP password or app password (EMAIL_PASSWORD is accepted as well)",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="",
        description="From email address; falls back to SMTP_USER when empty",
    )
    SMTP_FROM_NAME: str = Field(
        default="Global Study Share",
        description="From display name",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )
    EMAIL_SEND_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Upper bound for a single outbound send (connect + dialogue)",
    )

    # Welcome mail dispatch
    MAIL_DISPATCH_WORKERS: int = Field(
        default=2,
        description="Worker threads sending welcome emails",
    )
    MAIL_DISPATCH_MAX_PENDING: int = Field(
        default=100,
        description="Maximum queued or in-flight welcome emails before new jobs fail fast",
    )
    MAIL_FAILURE_HISTORY: int = Field(
        default=200,
        description="Number of recent dispatch failures kept in memory",
    )

    PROJECT_NAME: str = Field(
        default="Global Study Share",
        description="Project name for emails and branding",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def sender_address(self) -> str:
        """Address mail is sent from."""
        return self.SMTP_FROM_EMAIL or self.SMTP_USER

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
        populate_by_name=True,
    )


# Instantiating Settings() will raise pydantic.ValidationError if SECRET_KEY isn't set.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
