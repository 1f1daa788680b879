"""Pydantic Settings for the EVA API service.

All environment variables use the EVA_ prefix.
Example: EVA_PORT=8000, EVA_DEFAULT_LOCALE=en, EVA_PRODUCTION=true
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

_DEFAULT_POLICIES_PATH = str(Path(__file__).with_name("role_policies.yaml"))


class EvaSettings(BaseSettings):
    """EVA API configuration validated from environment variables."""

    # Service
    app_name: str = "EVA"
    api_url: str = "http://localhost:8000/api"
    port: int = 8000
    log_level: str = "INFO"
    production: bool = False  # Hide exception text in 500 envelopes
    service_key: str | None = None  # X-Service-Key; auth is skipped when unset

    # Envelope
    api_version: str = "2.0"
    default_locale: str = "es"

    # Permissions
    permission_cache_ttl_seconds: int = Field(default=300, ge=0)  # 5 minutes
    permission_cache_max_entries: int = Field(default=10000, ge=1)
    role_policies_path: str = _DEFAULT_POLICIES_PATH

    # Notifications
    notification_auto_dismiss_ms: int = Field(default=5000, ge=0)

    # Pagination
    default_per_page: int = Field(default=15, ge=1)
    max_per_page: int = Field(default=100, ge=1)

    # Exports
    max_export_jobs: int = Field(default=100, ge=1)  # Oldest async export job is evicted beyond this

    model_config = {"env_prefix": "EVA_"}
