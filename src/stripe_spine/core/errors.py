"""
Structured error types for stripe-spine.

Every failure the adapter surfaces to its host is an ``FdwError`` subclass
carrying a category, a retryable flag, structured context (resource, URL,
HTTP status) and the chained underlying exception.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                        FdwError                            │
        │        (category, retryable, context, cause)               │
        ├───────────────────────────────────────────────────────────┤
        │                                                            │
        │  ConfigError              RequestError     DecodeError     │
        │  (CONFIG)                 (NETWORK)        (PARSE)         │
        │     │                                                      │
        │  MissingConfigError       UnsupportedFieldTypeError        │
        │  InvalidConfigError       (VALIDATION)                     │
        │  UnsupportedResourceError                                  │
        └───────────────────────────────────────────────────────────┘

Propagation:
    - Configuration, request and decode errors abort the whole scan or
      mutation and propagate to the caller.
    - Errors scoped to a single cell (a JSON value of the wrong type) are
      never raised; the cell is left empty.
    - Nothing here is retried by the engine itself. ``retryable`` only tells
      the host whether re-issuing the statement may help.

Usage:
    from stripe_spine.core.errors import RequestError

    raise RequestError("request failed: 502 Bad Gateway").with_context(
        resource="customers", url=url, http_status=502
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Statuses a transient-failure policy may retry
RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    NETWORK = "NETWORK"           # Connection failure, non-success status
    PARSE = "PARSE"               # Malformed JSON body
    VALIDATION = "VALIDATION"     # Row cannot be encoded
    CONFIG = "CONFIG"             # Missing option, unknown resource kind
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        resource: Resource kind being scanned or mutated (e.g. "customers")
        operation: Engine operation ("scan", "insert", "update", "delete")
        url: Request URL, without credentials
        http_status: HTTP status code if a response was received
        column: Column name for cell-level errors
        metadata: Additional key-value pairs
    """

    resource: str | None = None
    operation: str | None = None
    url: str | None = None
    http_status: int | None = None
    column: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["resource", "operation", "url", "http_status", "column"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FdwError(Exception):
    """
    Base exception for all adapter errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.

    Examples:
        >>> error = FdwError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(resource="charges").context.resource
        'charges'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FdwError:
        """
        Add context to this error (fluent API).

        Unknown keys land in ``context.metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(FdwError):
    """
    Configuration error.

    Raised before any network call; never retryable.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """A required option is missing."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Missing required option: {key}", **kwargs)


class InvalidConfigError(ConfigError):
    """An option value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for option {key}: {value!r}", **kwargs)


class UnsupportedResourceError(ConfigError):
    """The requested resource kind has no registered schema."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"'{resource}' object is not implemented")
        self.context.resource = resource


# =============================================================================
# REQUEST / RESPONSE ERRORS
# =============================================================================


class RequestError(FdwError):
    """
    The upstream call failed: connection error or non-success status.

    ``retryable`` is derived from the HTTP status when one is known.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        url: str | None = None,
        **kwargs: Any,
    ):
        if "retryable" not in kwargs and http_status is not None:
            kwargs["retryable"] = http_status in RETRYABLE_STATUSES
        super().__init__(message, **kwargs)
        self.http_status = http_status
        if http_status is not None:
            self.context.http_status = http_status
        if url is not None:
            self.context.url = url


class DecodeError(FdwError):
    """A response body could not be parsed into records."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


class UnsupportedFieldTypeError(FdwError):
    """A row cell has a type that cannot be sent upstream."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, column: str, value: Any):
        self.column = column
        self.value = value
        super().__init__(f"field type {type(value).__name__} not supported")
        self.context.column = column


__all__ = [
    "RETRYABLE_STATUSES",
    "ErrorCategory",
    "ErrorContext",
    "FdwError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "UnsupportedResourceError",
    "RequestError",
    "DecodeError",
    "UnsupportedFieldTypeError",
]
