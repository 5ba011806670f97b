import os
from functools import lru_cache
from pathlib import Path

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "Safe Ledger API"
    database_url: str = Field(
        default="sqlite:///./safe_ledger.db",
        description="Database connection string",
    )
    cors_origins: list[AnyHttpUrl] = []
    log_level: str = "INFO"
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    business_timezone: str = Field(default="UTC", description="IANA zone the business day is measured in")
    business_day_cutoff_hour: int = Field(
        default=0,
        ge=0,
        le=23,
        description="Local hour at which one business day ends and the next begins",
    )

    store_retry_attempts: int = Field(default=1, ge=0, description="Retries for transient store reads")
    store_retry_backoff_seconds: float = Field(default=0.2, ge=0)

    audit_page_size: int = Field(default=100, ge=1)
    audit_max_page_size: int = Field(default=500, ge=1)
    audit_default_window_days: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(env_prefix="SAFE_LEDGER_", extra="ignore")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[AnyHttpUrl]) -> list[AnyHttpUrl]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin]
        return value

    @property
    def env_file_path(self) -> Path:
        env_specific = BASE_DIR / f".env.{self.env}"
        return env_specific if env_specific.exists() else BASE_DIR / ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("SAFE_LEDGER_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None


settings = get_settings()
