"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): one instance per process
    - Simulated payouts are only allowed outside production AND in simulated mode

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://remit:remit@db:5432/remit"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Runtime mode
    app_env: str = "sandbox"
    payouts_mode: str = "simulated"

    # Quotes
    quote_ttl_seconds: int = 30
    min_send_amount: float = 1.0
    default_fee_fixed: float = 1.0
    default_fee_pct: float = 2.9
    default_fx_margin_pct: float = 1.5

    # Market rates
    rate_provider: str = "mock"
    rate_provider_url: str = "http://rates:8080/v1/rate"
    rate_provider_timeout_seconds: float = 5.0
    rate_cache_ttl_seconds: int = 30

    # Transfers
    reference_prefix: str = "FX"
    reference_length: int = 6
    reference_max_attempts: int = 6
    receipt_base_url: str = "http://localhost:3000"

    # Rate limits (requests per window, per caller)
    rate_limit_window_ms: int = 60_000
    quote_rate_limit: int = 60
    recommendation_rate_limit: int = 60
    transfer_create_rate_limit: int = 10
    transfer_update_rate_limit: int = 30

    # Notifications
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_from: str = "Remit <no-reply@remit.local>"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def simulated_payouts(self) -> bool:
        return self.payouts_mode.lower() != "live"

    @property
    def allow_simulated_payouts(self) -> bool:
        return not self.is_production and self.simulated_payouts

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


@lru_cache
def get_settings() -> Settings:
    return Settings()
