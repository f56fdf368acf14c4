"""
Host-facing foreign data wrapper.

``StripeFdw`` is what a query engine instantiates once per foreign server.
It resolves configuration (options, settings, secrets), opens one
transport, and delegates the scan and modify callbacks to the engines.

Example:
    >>> fdw = StripeFdw({"api_key_id": "secret:env:STRIPE_API_KEY"})
    >>> fdw.begin_scan([Qual("email", "=", "ada@example.com")],
    ...                ["id", "email", "attrs"], options={"object": "customers"})
    >>> while (row := fdw.iter_scan()) is not None:
    ...     print(row["id"])
    >>> fdw.end_scan()
    >>> fdw.close()
"""

from __future__ import annotations

from typing import Iterator, Mapping, Sequence

import httpx

from stripe_spine.core.logging import get_logger
from stripe_spine.core.secrets import SecretsResolver
from stripe_spine.core.settings import StripeSpineSettings
from stripe_spine.fdw.config import FdwConfig
from stripe_spine.fdw.modify import MutationDispatcher
from stripe_spine.fdw.scan import ScanEngine
from stripe_spine.fdw.transport import StripeTransport
from stripe_spine.fdw.types import Limit, Qual, Row, Sort

log = get_logger(__name__)


class StripeFdw:
    """
    One wrapper instance: one config, one transport, one scan, one mutation.

    Args:
        options: Server-level options (``api_url``, ``api_key``,
            ``api_key_id``, ``page_size``)
        settings: Process settings; defaults to ``get_settings()``
        resolver: Secrets resolver; defaults to ``get_resolver()``
        transport: Optional httpx transport, used by tests to fake the API

    Raises:
        MissingConfigError: No credential configured
        InvalidConfigError: Bad ``page_size`` or malformed secret reference
    """

    def __init__(
        self,
        options: Mapping[str, str],
        *,
        settings: StripeSpineSettings | None = None,
        resolver: SecretsResolver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = FdwConfig.from_options(options, settings=settings, resolver=resolver)
        self._transport = StripeTransport(
            self.config.api_key,
            timeout=self.config.timeout,
            backoff=self.config.backoff,
            transport=transport,
        )
        self._scan = ScanEngine(self.config, self._transport)
        self._modify = MutationDispatcher(self.config, self._transport)
        log.debug("fdw_created", api_url=self.config.base_url, page_size=self.config.page_size)

    # ── scan ─────────────────────────────────────────────────────

    def begin_scan(
        self,
        quals: Sequence[Qual],
        columns: Sequence[str],
        sorts: Sequence[Sort] = (),
        limit: Limit | None = None,
        options: Mapping[str, str] | None = None,
    ) -> None:
        self._scan.begin_scan(quals, columns, sorts, limit, options)

    def iter_scan(self) -> Row | None:
        return self._scan.iter_scan()

    def re_scan(self) -> None:
        self._scan.re_scan()

    def end_scan(self) -> None:
        self._scan.end_scan()

    def scan(
        self,
        resource: str,
        columns: Sequence[str],
        quals: Sequence[Qual] = (),
        limit: Limit | None = None,
    ) -> Iterator[Row]:
        """Run a whole scan and yield its rows."""
        self.begin_scan(quals, columns, limit=limit, options={"object": resource})
        try:
            yield from self._scan
        finally:
            self.end_scan()

    # ── modify ───────────────────────────────────────────────────

    def begin_modify(self, options: Mapping[str, str]) -> None:
        self._modify.begin_modify(options)

    def insert(self, row: Row) -> str | None:
        return self._modify.insert(row)

    def update(self, rowid: str, row: Row) -> str | None:
        return self._modify.update(rowid, row)

    def delete(self, rowid: str) -> str | None:
        return self._modify.delete(rowid)

    def end_modify(self) -> None:
        self._modify.end_modify()

    # ── lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> StripeFdw:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["StripeFdw"]
