"""
Application configuration using pydantic-settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "menu-insights"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Hosted Postgres (the menu SaaS database)
    database_url: str = ""

    # Redis (shared cache + Celery broker)
    redis_url: str = ""

    # Service key for owner-facing endpoints
    admin_api_key: str = ""

    # Timezone used for hourly / daily / weekly bucketing
    default_timezone: str = "America/Chicago"

    # Analytics pipeline
    cache_backend: Literal["memory", "redis"] = "memory"
    analytics_cache_ttl_seconds: int = 300  # 5 minutes
    insights_cache_ttl_seconds: int = 1800  # 30 minutes
    memory_cache_maxsize: int = 512
    default_lookback_days: int = 30
    industry_sample_limit: int = 1000

    # Connection pool; one request holds up to eight sessions at once
    db_pool_size: int = 10
    db_max_overflow: int = 10

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
