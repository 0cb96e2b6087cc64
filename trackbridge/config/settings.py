"""Configuration management using Pydantic Settings.

Settings are loaded from environment variables and an optional ``.env`` file.

The configuration is organized into logical groups:
- DatabaseConfig: Database connection settings
- LoggingConfig: Logging levels and log file
- CredentialsConfig: Apple Music and Spotify credentials
- CatalogConfig: Target catalog (Apple Music) API behaviour
- PipelineConfig: Batch reconciliation pipeline tuning
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///data/trackbridge.db"
    echo: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("trackbridge.log")
    real_time_debug: bool = True


class CredentialsConfig(BaseModel):
    """API credentials."""

    # Apple Music catalog API (JWT signed with a MusicKit key)
    apple_music_developer_token: str = ""

    # Spotify client (source catalog)
    spotify_client_id: str = ""
    spotify_client_secret: str = ""


class CatalogConfig(BaseModel):
    """Target catalog API configuration."""

    base_url: str = "https://api.music.apple.com/v1"
    default_storefront: str = "us"
    search_limit: int = 5
    artwork_size: int = 600
    request_timeout: float = 10.0
    retry_count: int = 3
    retry_base_delay: float = 0.5
    retry_max_delay: float = 30.0


class PipelineConfig(BaseModel):
    """Reconciliation pipeline configuration."""

    batch_size: int = 10
    rate_limit_delay_ms: int = 100
    rate_limiter: Literal["fixed", "token_bucket"] = "fixed"
    token_bucket_rate: float = 10.0  # tokens per second
    token_bucket_capacity: int = 5
    worker_count: int = 4


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: DATABASE_URL, CONSOLE_LOG_LEVEL, APPLE_MUSIC_DEVELOPER_TOKEN
    - Nested: DATABASE__URL, LOGGING__CONSOLE_LEVEL, PIPELINE__BATCH_SIZE
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    catalog: CatalogConfig = CatalogConfig()
    pipeline: PipelineConfig = PipelineConfig()

    data_dir: Path = Path("data")

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Map flat environment variables (DATABASE_URL) onto nested groups."""
        if not isinstance(data, dict):
            return data

        mappings = {
            "database": {
                "database_url": "url",
                "database_echo": "echo",
            },
            "logging": {
                "console_log_level": "console_level",
                "file_log_level": "file_level",
                "log_file": "log_file",
                "log_real_time_debug": "real_time_debug",
            },
            "credentials": {
                "apple_music_developer_token": "apple_music_developer_token",
                "spotify_client_id": "spotify_client_id",
                "spotify_client_secret": "spotify_client_secret",
            },
        }

        # Flat names are not settings fields, so read them from the process env too
        environ = {key.lower(): value for key, value in os.environ.items()}

        transformed: dict[str, dict[str, Any]] = {}
        for group, mapping in mappings.items():
            for env_key, field_key in mapping.items():
                if env_key in data:
                    transformed.setdefault(group, {})[field_key] = data.pop(env_key)
                elif env_key in environ:
                    transformed.setdefault(group, {})[field_key] = environ[env_key]

        for group, values in transformed.items():
            existing = data.get(group)
            if isinstance(existing, dict):
                data[group] = {**values, **existing}
            elif existing is None:
                data[group] = values

        return data


# Singleton instance for application use
settings = Settings()


# =============================================================================
# FLAT KEY ACCESS
# =============================================================================

_KEY_MAP = {
    "DATABASE_URL": lambda: settings.database.url,
    "DATABASE_ECHO": lambda: settings.database.echo,
    "CONSOLE_LOG_LEVEL": lambda: settings.logging.console_level,
    "FILE_LOG_LEVEL": lambda: settings.logging.file_level,
    "LOG_FILE": lambda: settings.logging.log_file,
    "DATA_DIR": lambda: settings.data_dir,
    "APPLE_MUSIC_DEVELOPER_TOKEN": lambda: settings.credentials.apple_music_developer_token,
    "SPOTIFY_CLIENT_ID": lambda: settings.credentials.spotify_client_id,
    "SPOTIFY_CLIENT_SECRET": lambda: settings.credentials.spotify_client_secret,
    "CATALOG_BASE_URL": lambda: settings.catalog.base_url,
    "CATALOG_DEFAULT_STOREFRONT": lambda: settings.catalog.default_storefront,
    "CATALOG_SEARCH_LIMIT": lambda: settings.catalog.search_limit,
    "CATALOG_ARTWORK_SIZE": lambda: settings.catalog.artwork_size,
    "CATALOG_REQUEST_TIMEOUT": lambda: settings.catalog.request_timeout,
    "CATALOG_RETRY_COUNT": lambda: settings.catalog.retry_count,
    "CATALOG_RETRY_BASE_DELAY": lambda: settings.catalog.retry_base_delay,
    "CATALOG_RETRY_MAX_DELAY": lambda: settings.catalog.retry_max_delay,
    "PIPELINE_BATCH_SIZE": lambda: settings.pipeline.batch_size,
    "PIPELINE_RATE_LIMIT_DELAY_MS": lambda: settings.pipeline.rate_limit_delay_ms,
    "PIPELINE_RATE_LIMITER": lambda: settings.pipeline.rate_limiter,
    "PIPELINE_TOKEN_BUCKET_RATE": lambda: settings.pipeline.token_bucket_rate,
    "PIPELINE_TOKEN_BUCKET_CAPACITY": lambda: settings.pipeline.token_bucket_capacity,
    "PIPELINE_WORKER_COUNT": lambda: settings.pipeline.worker_count,
}


def get_config(key: str, default=None):
    """Get configuration value by flat key with optional default.

    Example:
        >>> batch_size = get_config("PIPELINE_BATCH_SIZE", 10)
        >>> db_url = get_config("DATABASE_URL")
    """
    if key in _KEY_MAP:
        return _KEY_MAP[key]()

    return default
