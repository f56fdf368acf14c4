"""
HTTP transport for the Stripe API.

Wraps an ``httpx.AsyncClient`` carrying the bearer credential, and drives
it from synchronous callers through a private event loop
(``BlockingRuntime``), so scans and mutations block until their request
completes.

Transient failures (connection errors, 408/429/5xx) are retried here with
bounded exponential backoff, honouring a numeric ``Retry-After``. Callers
see only the final outcome: a ``TransportResponse`` (whatever its status)
or a ``RequestError`` when the connection never succeeded.

Usage:
    transport = StripeTransport(SecretValue("sk_test_..."))
    resp = transport.get("https://api.stripe.com/v1/customers", [("limit", "10")])
    resp.raise_for_status()
    transport.close()
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence, TypeVar
from urllib.parse import urlencode

import httpx

from stripe_spine.core.errors import RETRYABLE_STATUSES, RequestError
from stripe_spine.core.logging import get_logger
from stripe_spine.core.retry import ExponentialBackoff
from stripe_spine.core.secrets import SecretValue

log = get_logger(__name__)

T = TypeVar("T")

USER_AGENT = "stripe-spine/0.1"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class TransportResponse:
    """Final response of a (possibly retried) request."""

    status: int
    url: str
    text: str
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self) -> TransportResponse:
        """Raise RequestError unless the status is 2xx."""
        if not self.is_success:
            reason = f" {self.reason}" if self.reason else ""
            raise RequestError(
                f"request failed: HTTP {self.status}{reason} for url '{self.url}'",
                http_status=self.status,
                url=self.url,
            )
        return self


class BlockingRuntime:
    """Private event loop that runs coroutines to completion for sync callers."""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()

    def block_on(self, awaitable: Awaitable[T]) -> T:
        return self._loop.run_until_complete(awaitable)

    @property
    def closed(self) -> bool:
        return self._loop.is_closed()

    def close(self) -> None:
        if not self._loop.is_closed():
            self._loop.close()


def _retry_after_seconds(headers: httpx.Headers) -> float | None:
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


class StripeTransport:
    """
    Authenticated, retrying HTTP client with a synchronous interface.

    Args:
        api_key: Bearer credential
        timeout: Per-request timeout in seconds
        backoff: Retry policy for transient failures
        transport: Optional httpx transport (``httpx.MockTransport`` in tests)
        runtime: Event loop bridge; one is created when omitted
    """

    def __init__(
        self,
        api_key: SecretValue | str,
        *,
        timeout: float = 30.0,
        backoff: ExponentialBackoff | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        runtime: BlockingRuntime | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        key = api_key.get_secret() if isinstance(api_key, SecretValue) else api_key
        self._backoff = backoff or ExponentialBackoff()
        self._runtime = runtime or BlockingRuntime()
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {key}",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    # ── sync interface ───────────────────────────────────────────

    def get(self, url: str, params: Sequence[tuple[str, str]] | None = None) -> TransportResponse:
        return self._runtime.block_on(self._send("GET", url, params=params))

    def post_form(self, url: str, form: Sequence[tuple[str, str]]) -> TransportResponse:
        return self._runtime.block_on(
            self._send(
                "POST",
                url,
                content=urlencode(list(form)).encode("utf-8"),
                headers={
                    "Content-Type": FORM_CONTENT_TYPE,
                    # One key per logical write, reused by every retry of it
                    "Idempotency-Key": str(uuid.uuid4()),
                },
            )
        )

    def delete(self, url: str) -> TransportResponse:
        return self._runtime.block_on(self._send("DELETE", url))

    def close(self) -> None:
        if self._runtime.closed:
            return
        self._runtime.block_on(self._client.aclose())
        self._runtime.close()

    def __enter__(self) -> StripeTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── async core ───────────────────────────────────────────────

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Sequence[tuple[str, str]] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        attempt = 0
        while True:
            try:
                resp = await self._client.request(
                    method,
                    url,
                    params=list(params) if params else None,
                    content=content,
                    headers=headers,
                )
            except httpx.TransportError as e:
                if not self._backoff.should_retry(attempt):
                    raise RequestError(
                        f"request failed: {e.__class__.__name__}: {e}",
                        url=url,
                        retryable=True,
                        cause=e,
                    ) from e
                delay = self._backoff.next_delay(attempt)
                log.warning(
                    "request_retry",
                    method=method,
                    url=url,
                    attempt=attempt + 1,
                    delay=round(delay, 3),
                    error=str(e),
                )
                await self._sleep(delay)
                attempt += 1
                continue

            if resp.status_code in RETRYABLE_STATUSES and self._backoff.should_retry(attempt):
                delay = self._backoff.next_delay(attempt, _retry_after_seconds(resp.headers))
                log.warning(
                    "request_retry",
                    method=method,
                    url=url,
                    attempt=attempt + 1,
                    delay=round(delay, 3),
                    http_status=resp.status_code,
                )
                await self._sleep(delay)
                attempt += 1
                continue

            return TransportResponse(
                status=resp.status_code,
                url=str(resp.request.url),
                text=resp.text,
                reason=resp.reason_phrase,
                headers=dict(resp.headers),
            )


__all__ = [
    "USER_AGENT",
    "TransportResponse",
    "BlockingRuntime",
    "StripeTransport",
]
