"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
)

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    API_PREFIX: str = "/api"
    # Read the client IP from CF-Connecting-IP / X-Forwarded-For. Enable only behind a trusted proxy.
    TRUST_PROXY_HEADERS: bool = False

    # SQLite for local dev (same engine family as the edge database); PostgreSQL in prod
    DATABASE_URL: str = "sqlite:///./cloudcore.db"
    # Create missing tables on startup. Use alembic instead in prod.
    DB_AUTO_CREATE: bool = True

    # HMAC key for bearer tokens; read-only after startup
    JWT_SECRET: SecretStr = SecretStr(DEFAULT_JWT_SECRET)

    # Account seeded by `python -m cloudcore.scripts.seed_admin`
    BOOTSTRAP_ADMIN_EMAIL: str = "lamado@cloudcorenow.com"

    # Application monitoring ring buffers
    MONITORING_LOG_BUFFER_SIZE: int = 1000
    MONITORING_METRIC_BUFFER_SIZE: int = 200

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite or PostgreSQL URL "
                "(e.g. sqlite:///./cloudcore.db or postgresql+psycopg2://...)"
            )
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("BOOTSTRAP_ADMIN_EMAIL")
    @classmethod
    def validate_bootstrap_admin_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("BOOTSTRAP_ADMIN_EMAIL must be an email address")
        return v

    @field_validator("MONITORING_LOG_BUFFER_SIZE", "MONITORING_METRIC_BUFFER_SIZE")
    @classmethod
    def validate_buffer_size(cls, v: int) -> int:
        if v < 1 or v > 100_000:
            raise ValueError("Monitoring buffer sizes must be between 1 and 100000")
        return v

    @model_validator(mode="after")
    def validate_prod_secret(self) -> "Settings":
        if self.APP_ENV == "prod" and self.JWT_SECRET.get_secret_value() == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be changed from the default when APP_ENV=prod")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
