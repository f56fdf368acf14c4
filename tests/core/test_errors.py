"""Tests for stripe_spine.core.errors module."""

import pytest

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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        """Create context with no fields set."""
        ctx = ErrorContext()
        assert ctx.resource is None
        assert ctx.http_status is None
        assert ctx.metadata == {}

    def test_to_dict_skips_none(self):
        """to_dict only includes populated fields."""
        ctx = ErrorContext(resource="charges", http_status=502)
        assert ctx.to_dict() == {"resource": "charges", "http_status": 502}

    def test_to_dict_merges_metadata(self):
        """Metadata keys are flattened into the dict."""
        ctx = ErrorContext(operation="scan", metadata={"page": 3})
        assert ctx.to_dict() == {"operation": "scan", "page": 3}


class TestFdwError:
    """Test the base error."""

    def test_defaults(self):
        """Base error is INTERNAL and not retryable."""
        error = FdwError("boom")
        assert str(error) == "boom"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False

    def test_override_category_and_retryable(self):
        """Per-instance overrides win over class defaults."""
        error = FdwError("boom", category=ErrorCategory.NETWORK, retryable=True)
        assert error.category == ErrorCategory.NETWORK
        assert error.retryable is True

    def test_cause_is_chained(self):
        """The cause becomes __cause__."""
        cause = ValueError("inner")
        error = FdwError("outer", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_with_context_known_and_unknown_keys(self):
        """Known keys set fields, unknown keys go to metadata."""
        error = FdwError("boom").with_context(resource="customers", page=2)
        assert error.context.resource == "customers"
        assert error.context.metadata == {"page": 2}

    def test_to_dict(self):
        """to_dict carries type, category and context."""
        error = DecodeError("bad json", cause=ValueError("x")).with_context(resource="charges")
        d = error.to_dict()
        assert d["error_type"] == "DecodeError"
        assert d["category"] == "PARSE"
        assert d["context"] == {"resource": "charges"}
        assert d["cause"] == "x"

    def test_repr(self):
        assert repr(ConfigError("nope")) == "ConfigError('nope', category=CONFIG)"


class TestConfigErrors:
    """Configuration errors."""

    def test_missing_config_default_message(self):
        """Default message names the option."""
        error = MissingConfigError("object")
        assert error.key == "object"
        assert str(error) == "Missing required option: object"
        assert isinstance(error, ConfigError)
        assert error.category == ErrorCategory.CONFIG

    def test_invalid_config(self):
        error = InvalidConfigError("page_size", "abc")
        assert error.value == "abc"
        assert "page_size" in str(error)

    def test_unsupported_resource(self):
        """Unknown resource kinds are configuration errors."""
        error = UnsupportedResourceError("refunds")
        assert str(error) == "'refunds' object is not implemented"
        assert error.context.resource == "refunds"
        assert isinstance(error, ConfigError)
        assert error.retryable is False


class TestRequestError:
    """Request errors derive retryability from the HTTP status."""

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_transient_statuses_retryable(self, status):
        assert RequestError("request failed", http_status=status).retryable is True

    @pytest.mark.parametrize("status", [400, 401, 402, 404])
    def test_client_statuses_not_retryable(self, status):
        assert RequestError("request failed", http_status=status).retryable is False

    def test_status_and_url_in_context(self):
        error = RequestError("request failed", http_status=404, url="https://api.test/v1/x")
        assert error.http_status == 404
        assert error.context.http_status == 404
        assert error.context.url == "https://api.test/v1/x"
        assert error.category == ErrorCategory.NETWORK

    def test_explicit_retryable_wins(self):
        assert RequestError("request failed", http_status=400, retryable=True).retryable is True


class TestUnsupportedFieldTypeError:
    def test_message_and_column(self):
        error = UnsupportedFieldTypeError("created", 1.5)
        assert str(error) == "field type float not supported"
        assert error.context.column == "created"
        assert error.category == ErrorCategory.VALIDATION
