"""
Application configuration using Pydantic settings.
"""
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage Backend
    storage_backend: Literal["local", "remote"] = Field(
        default="local",
        description="Where the farm snapshot is persisted (local files or remote row-store)"
    )
    local_data_dir: str = Field(
        default="./data",
        description="Directory holding one JSON file per record collection"
    )

    # Remote Row-Store Configuration
    remote_base_url: str = Field(
        default="",
        description="Base URL of the remote row-store (PostgREST compatible)"
    )
    remote_api_key: str = Field(
        default="",
        description="API key for the remote row-store"
    )
    remote_table: str = Field(
        default="registros",
        description="Table holding the snapshot row"
    )
    remote_row_id: int = Field(
        default=1,
        description="Fixed identifier of the snapshot row"
    )
    remote_content_column: str = Field(
        default="conteudo",
        description="JSON column holding the serialized snapshot"
    )

    # Insight Generator Configuration
    insight_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Base URL for the text-generation API"
    )
    insight_api_key: str = Field(
        default="",
        description="API key for the text-generation API"
    )
    insight_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used to write farm insights"
    )
    insight_context_limit: int = Field(
        default=10,
        description="Number of recent activities and harvests sent as context"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=1,
        description="Maximum number of attempts for outbound calls (1 disables retrying)"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for outbound HTTP calls"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=10,
        description="Maximum insight requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Farm Ledger",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
