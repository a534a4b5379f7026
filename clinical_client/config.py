"""
Client configuration.

Settings are read from environment variables prefixed with
``CLINICAL_CLIENT_`` or from a local ``.env`` file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the clinical API client."""

    model_config = SettingsConfigDict(
        env_prefix="CLINICAL_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend
    api_base_url: str = "http://localhost:3000/api"
    request_timeout: float = 30.0
    health_timeout: float = 3.0

    # Token handling
    token_leeway_seconds: int = 30
    proactive_refresh: bool = True

    # Credential storage
    storage_backend: Literal["memory", "file", "redis"] = "memory"
    storage_prefix: str = "auth_"
    storage_path: str = ".clinical_client/credentials.json"
    redis_url: str = "redis://localhost:6379/0"

    # Uploads
    max_upload_mb: int = 10

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def max_upload_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
