"""
Shared pytest fixtures for stripe-spine tests.

This module provides:
- Process-state cleanup (settings cache, secrets resolver, STRIPE_SPINE_* env)
- ``FakeStripe``: an ``httpx.MockTransport``-backed fake of the API that
  replays queued responses and records every request
- Factories for wrappers wired to the fake

Usage:
    def test_something(fake_stripe, make_fdw):
        fake_stripe.queue(json=list_page([{"id": "cus_1"}]))
        fdw = make_fdw()
"""

from __future__ import annotations

import os
from typing import Any, Callable
from urllib.parse import parse_qsl

import httpx
import pytest

from stripe_spine.core.secrets import set_resolver
from stripe_spine.core.settings import StripeSpineSettings, clear_settings_cache
from stripe_spine.fdw.wrapper import StripeFdw

API_URL = "https://api.test/v1/"
API_KEY = "sk_test_123"


def list_page(records: list[dict[str, Any]], has_more: bool = False) -> dict[str, Any]:
    """A Stripe list envelope."""
    return {"object": "list", "url": "/v1/x", "data": records, "has_more": has_more}


class FakeStripe:
    """Replays queued responses in order and records the requests it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[Callable[[httpx.Request], httpx.Response]] = []
        self.transport = httpx.MockTransport(self._handle)

    def queue(
        self,
        *,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> FakeStripe:
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text, headers=headers)
            return httpx.Response(status, json=json if json is not None else {}, headers=headers)

        self._responses.append(respond)
        return self

    def queue_error(self, exc: Exception) -> FakeStripe:
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._responses.append(respond)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        return self._responses.pop(0)(request)

    # ── inspection helpers ────────────────────────────────────────

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def params(self, index: int = -1) -> list[tuple[str, str]]:
        return list(self.requests[index].url.params.multi_items())

    def form(self, index: int = -1) -> list[tuple[str, str]]:
        return parse_qsl(self.requests[index].content.decode(), keep_blank_values=True)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture(autouse=True)
def clean_process_state(monkeypatch):
    """Isolate tests from the environment and from each other."""
    for key in list(os.environ):
        if key.startswith("STRIPE_SPINE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    set_resolver(None)
    yield
    clear_settings_cache()
    set_resolver(None)


@pytest.fixture
def settings() -> StripeSpineSettings:
    """Settings with retries disabled and no .env file."""
    return StripeSpineSettings(_env_file=None, api_url=API_URL, max_retries=0)


@pytest.fixture
def fake_stripe() -> FakeStripe:
    return FakeStripe()


@pytest.fixture
def make_fdw(fake_stripe, settings):
    """Factory for wrappers talking to ``fake_stripe``."""
    created: list[StripeFdw] = []

    def factory(**options: str) -> StripeFdw:
        opts = {"api_key": API_KEY}
        opts.update(options)
        fdw = StripeFdw(opts, settings=settings, transport=fake_stripe.transport)
        created.append(fdw)
        return fdw

    yield factory
    for fdw in created:
        fdw.close()
