"""
Immutable per-wrapper configuration.

Built once from the host's server options layered over process settings,
then handed to every scan and mutation of that wrapper.

Recognized options:
    api_url      Override the API root (default https://api.stripe.com/v1/)
    api_key      Literal credential
    api_key_id   Secret reference resolved through the secrets resolver
    page_size    Page size for list calls, 1..100 (default 100)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from stripe_spine.core.errors import InvalidConfigError, MissingConfigError
from stripe_spine.core.retry import ExponentialBackoff
from stripe_spine.core.secrets import (
    MissingSecretError,
    SecretResolutionError,
    SecretsResolver,
    SecretValue,
    get_resolver,
)
from stripe_spine.core.settings import MAX_PAGE_SIZE, StripeSpineSettings, get_settings

OPT_API_URL = "api_url"
OPT_API_KEY = "api_key"
OPT_API_KEY_ID = "api_key_id"
OPT_PAGE_SIZE = "page_size"
OPT_OBJECT = "object"
OPT_ROWID_COLUMN = "rowid_column"


def require_option(options: Mapping[str, str], key: str) -> str:
    """Return a non-empty option value or raise MissingConfigError."""
    value = options.get(key)
    if not value:
        raise MissingConfigError(key)
    return value


def parse_page_size(raw: object) -> int:
    try:
        page_size = int(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise InvalidConfigError(OPT_PAGE_SIZE, raw) from None
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InvalidConfigError(
            OPT_PAGE_SIZE, raw, f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {raw!r}"
        )
    return page_size


def resolve_api_key(
    options: Mapping[str, str],
    settings: StripeSpineSettings,
    resolver: SecretsResolver,
) -> SecretValue:
    """
    Find the bearer credential.

    A literal ``api_key`` (options, then settings) wins over any
    ``api_key_id`` reference; options win over settings.

    Raises:
        MissingConfigError: No credential configured, or the reference did
            not resolve
        InvalidConfigError: Malformed secret reference
    """
    literal = options.get(OPT_API_KEY)
    if not literal and settings.api_key is not None:
        literal = settings.api_key.get_secret_value()
    if literal:
        return SecretValue(literal)

    reference = options.get(OPT_API_KEY_ID) or settings.api_key_id
    if not reference:
        raise MissingConfigError(
            OPT_API_KEY_ID, "Missing required option: api_key or api_key_id"
        )

    try:
        return SecretValue(resolver.resolve_reference(reference))
    except MissingSecretError as e:
        raise MissingConfigError(
            OPT_API_KEY_ID, f"API key secret not found: {reference}", cause=e
        ) from e
    except SecretResolutionError as e:
        raise InvalidConfigError(OPT_API_KEY_ID, reference, str(e), cause=e) from e


@dataclass(frozen=True)
class FdwConfig:
    """Resolved configuration shared by a wrapper's scans and mutations."""

    base_url: str
    api_key: SecretValue
    page_size: int = MAX_PAGE_SIZE
    timeout: float = 30.0
    backoff: ExponentialBackoff = ExponentialBackoff()

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, str],
        *,
        settings: StripeSpineSettings | None = None,
        resolver: SecretsResolver | None = None,
    ) -> FdwConfig:
        settings = settings or get_settings()
        resolver = resolver or get_resolver()

        base_url = options.get(OPT_API_URL) or settings.api_url
        if not base_url.endswith("/"):
            base_url += "/"

        page_size = parse_page_size(options.get(OPT_PAGE_SIZE, settings.page_size))

        return cls(
            base_url=base_url,
            api_key=resolve_api_key(options, settings, resolver),
            page_size=page_size,
            timeout=settings.timeout,
            backoff=ExponentialBackoff(
                max_retries=settings.max_retries,
                base_delay=settings.backoff_base,
                max_delay=settings.backoff_max,
            ),
        )


__all__ = [
    "OPT_API_URL",
    "OPT_API_KEY",
    "OPT_API_KEY_ID",
    "OPT_PAGE_SIZE",
    "OPT_OBJECT",
    "OPT_ROWID_COLUMN",
    "require_option",
    "parse_page_size",
    "resolve_api_key",
    "FdwConfig",
]
