"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKTRACK_ prefix
(and an optional .env file for local development).

Learn: Settings are built ONCE by get_settings() and handed to
create_app(), which hangs them (and everything derived from them:
engine, token service) off app.state. Business logic never reads
the environment itself — it receives what it needs via its constructor.
"""

from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All app configuration. Set via TASKTRACK_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./tasktrack.db"
    auto_create_schema: bool = True

    # Redis (rate limiting only; empty disables it)
    redis_url: str = ""

    # Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 7
    bcrypt_rounds: int = 10

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5001

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]
    cors_origin_regex: Optional[str] = None

    # Rate limiting: N requests per window per client IP
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 900  # 15 minutes

    model_config = SettingsConfigDict(
        env_prefix="TASKTRACK_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_production_settings(self):
        """A signing secret is mandatory outside development."""
        if self.environment != "development" and not self.jwt_secret:
            raise ValueError(
                "TASKTRACK_JWT_SECRET must be set in non-development "
                "environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings (once)."""
    return Settings()
