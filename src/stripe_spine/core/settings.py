"""
Process-wide settings for stripe-spine.

Values come from ``STRIPE_SPINE_*`` environment variables or a ``.env``
file and act as defaults; per-table options handed over by the host
(``api_url``, ``api_key``, ``api_key_id``, ``page_size``) override them.

Examples:
    >>> import os
    >>> os.environ["STRIPE_SPINE_PAGE_SIZE"] = "25"
    >>> clear_settings_cache()
    >>> get_settings().page_size
    25

Tags:
    configuration, settings, pydantic, environment
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.stripe.com/v1/"

# Maximum page size the Stripe list endpoints accept
MAX_PAGE_SIZE = 100


class StripeSpineSettings(BaseSettings):
    """Settings shared by every wrapper instance in the process."""

    model_config = SettingsConfigDict(
        env_prefix="STRIPE_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── API ──────────────────────────────────────────────────────
    api_url: str = Field(default=DEFAULT_API_URL)
    api_key: SecretStr | None = Field(default=None)
    api_key_id: str | None = Field(default=None, description="Secret reference for the API key")
    page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    # ── Transport ────────────────────────────────────────────────
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_max: float = Field(default=8.0, ge=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")


_settings: StripeSpineSettings | None = None


def get_settings(*, _force_reload: bool = False) -> StripeSpineSettings:
    """Load, validate, and cache the settings."""
    global _settings
    if _settings is None or _force_reload:
        _settings = StripeSpineSettings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    global _settings
    _settings = None


__all__ = [
    "DEFAULT_API_URL",
    "MAX_PAGE_SIZE",
    "StripeSpineSettings",
    "get_settings",
    "clear_settings_cache",
]
