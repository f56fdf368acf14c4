"""Tests for StripeSpineSettings and the settings cache."""

import pytest
from pydantic import ValidationError

from stripe_spine.core.settings import (
    DEFAULT_API_URL,
    MAX_PAGE_SIZE,
    StripeSpineSettings,
    clear_settings_cache,
    get_settings,
)


class TestDefaults:
    def test_defaults(self):
        """Defaults target the public API with the maximum page size."""
        s = StripeSpineSettings(_env_file=None)
        assert s.api_url == DEFAULT_API_URL
        assert s.page_size == MAX_PAGE_SIZE == 100
        assert s.api_key is None
        assert s.api_key_id is None
        assert s.timeout == 30.0
        assert s.max_retries == 3


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        """STRIPE_SPINE_* variables populate fields."""
        monkeypatch.setenv("STRIPE_SPINE_PAGE_SIZE", "25")
        monkeypatch.setenv("STRIPE_SPINE_API_KEY", "sk_env")
        s = StripeSpineSettings(_env_file=None)
        assert s.page_size == 25
        assert s.api_key.get_secret_value() == "sk_env"

    def test_api_key_not_in_repr(self, monkeypatch):
        monkeypatch.setenv("STRIPE_SPINE_API_KEY", "sk_env_secret")
        assert "sk_env_secret" not in repr(StripeSpineSettings(_env_file=None))

    @pytest.mark.parametrize("value", ["0", "101"])
    def test_page_size_bounds(self, monkeypatch, value):
        monkeypatch.setenv("STRIPE_SPINE_PAGE_SIZE", value)
        with pytest.raises(ValidationError):
            StripeSpineSettings(_env_file=None)


class TestCache:
    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("STRIPE_SPINE_TIMEOUT", "5")
        assert get_settings().timeout == first.timeout
        clear_settings_cache()
        assert get_settings().timeout == 5.0

    def test_force_reload(self):
        first = get_settings()
        assert get_settings(_force_reload=True) is not first
