"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match current behavior

Collaborators:
  - api/main.py: reads settings for the DB pool and startup logging
  - identity/sessions.py: session secret, TTL and cookie name
  - api/lottery_routes.py: cron secret, lottery time zone and run hour
  - crosscutting/cors.py: allowed origins

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Missing secrets are NOT startup errors: each call site answers 500 with an
    operator-facing message, so a half-configured deploy still serves the rest
  - Singleton via lru_cache for performance
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        database_url: PostgreSQL connection string (optional until first DB access)
        api_session_secret: HMAC secret for session tokens
        session_ttl_seconds: Session lifetime (default: 10 hours)
        session_cookie_name: Cookie carrying the session token
        cron_secret: Bearer secret for the scheduled lottery trigger
        allowed_origins: Comma-separated CORS origins
        lottery_time_zone: Fixed zone for date/hour gating (default: Asia/Seoul)
        lottery_run_hour: Hour of day the scheduled lottery runs (default: 9)
        login_rate_limit_max: Login attempts per window (default: 20)
        login_rate_limit_window_seconds: Login window (default: 15 minutes)
        rate_limit_sweep_threshold: Tracked keys before sweeping expired windows
        redis_url: Shared fixed-window store for multi-instance deploys (optional)
        metrics_require_auth: Require an admin session for /metrics
    """

    # Environment
    app_env: str = "development"
    log_level: str = "INFO"
    log_json: bool = True

    # Database
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Sessions
    api_session_secret: str = ""
    session_ttl_seconds: int = 10 * 60 * 60
    session_cookie_name: str = "spaced_session"

    # Scheduled lottery
    cron_secret: str = ""
    lottery_time_zone: str = "Asia/Seoul"
    lottery_run_hour: int = 9

    # CORS
    allowed_origins: str = ""

    # Rate limiting
    login_rate_limit_max: int = 20
    login_rate_limit_window_seconds: int = 15 * 60
    rate_limit_sweep_threshold: int = 2000
    redis_url: str = ""

    # Observability
    metrics_require_auth: bool = False

    @field_validator("lottery_time_zone")
    @classmethod
    def time_zone_must_exist(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {v}") from exc
        return v

    @field_validator("lottery_run_hour")
    @classmethod
    def run_hour_in_range(cls, v: int) -> int:
        if v < 0 or v > 23:
            raise ValueError("lottery_run_hour must be between 0 and 23")
        return v

    @field_validator(
        "session_ttl_seconds",
        "login_rate_limit_max",
        "login_rate_limit_window_seconds",
        "rate_limit_sweep_threshold",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        secret = (self.api_session_secret or "").strip()
        if secret and (secret in insecure_secrets or len(secret) < 32):
            raise ValueError(
                "API_SESSION_SECRET must be a strong value of at least 32 characters in production"
            )
        return self

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in {"test", "testing", "ci"}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
