"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from goq.constants import DEFAULT_BUFFER_SIZE, DEFAULT_QUEUE_NAME


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis connection (timeouts in seconds)
    redis_addr: str = "localhost:6379"
    redis_password: str | None = None
    redis_db: int = 0
    redis_max_retries: int = 0
    redis_dial_timeout: float | None = 5.0
    redis_read_timeout: float | None = None
    redis_write_timeout: float | None = None
    redis_pool_size: int = 10
    redis_pool_timeout: float | None = None
    redis_idle_timeout: float | None = None

    # Queue Configuration
    queue_name: str = DEFAULT_QUEUE_NAME
    queue_concurrency: int = 4
    queue_buffer_size: int = DEFAULT_BUFFER_SIZE
    queue_pop_timeout_seconds: int = 0

    # Dispatcher error backoff
    dispatcher_backoff_initial_seconds: float = 0.1
    dispatcher_backoff_max_seconds: float = 5.0
    dispatcher_backoff_multiplier: float = 2.0
    dispatcher_failure_threshold: int = 10
    dispatcher_cooldown_seconds: float = 30.0

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Observability
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "goq"
    log_level: str = "INFO"
    log_format: str = "json"  # json or console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
