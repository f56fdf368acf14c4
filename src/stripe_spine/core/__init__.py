"""stripe_spine.core -- ambient primitives shared by the wrapper and the CLI.

Architecture::

    errors.py      Structured error hierarchy (FdwError, ConfigError, RequestError)
    settings.py    STRIPE_SPINE_* settings (pydantic-settings)
    secrets.py     Secret references: env, file and in-memory backends
    logging.py     structlog configuration
    retry.py       ExponentialBackoff policy for the transport
"""

from stripe_spine.core.errors import (
    ConfigError,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    FdwError,
    InvalidConfigError,
    MissingConfigError,
    RequestError,
    UnsupportedFieldTypeError,
    UnsupportedResourceError,
)
from stripe_spine.core.logging import configure_logging, get_logger
from stripe_spine.core.retry import ExponentialBackoff
from stripe_spine.core.secrets import SecretsResolver, SecretValue, get_resolver, set_resolver
from stripe_spine.core.settings import StripeSpineSettings, clear_settings_cache, get_settings

__all__ = [
    "ConfigError",
    "DecodeError",
    "ErrorCategory",
    "ErrorContext",
    "FdwError",
    "InvalidConfigError",
    "MissingConfigError",
    "RequestError",
    "UnsupportedFieldTypeError",
    "UnsupportedResourceError",
    "configure_logging",
    "get_logger",
    "ExponentialBackoff",
    "SecretsResolver",
    "SecretValue",
    "get_resolver",
    "set_resolver",
    "StripeSpineSettings",
    "clear_settings_cache",
    "get_settings",
]
