"""
Scan engine: drives the paginated fetch loop for one foreign-table scan.

Lifecycle::

    begin_scan(quals, columns, sorts, limit, options)
        │  validate options, compute page budget
        ▼
    ┌──────────── page loop (sequential) ─────────────┐
    │ build request (pushdown + limit/starting_after) │
    │ GET ── failure ──▶ RequestError, nothing kept   │
    │ decode page                                     │
    │ empty page ─────────────────────────▶ stop      │
    │ buffer rows                                     │
    │ has_more is not True ───────────────▶ stop      │
    │ cursor = id of last record                      │
    └─────────────────────────────────────────────────┘
        ▼
    iter_scan()  → one row at a time, FIFO, until None
    end_scan()   → buffer discarded

Pages are fetched strictly one after another: each request carries the
cursor taken from the previous page.

Quals that cannot be pushed down are dropped when building the request, so
the host must re-check every qual against the rows it receives.
"""

from __future__ import annotations

import math
import sys
from collections import deque
from typing import Iterator, Mapping, Sequence

from stripe_spine.core.errors import FdwError
from stripe_spine.core.logging import get_logger
from stripe_spine.fdw.codec import decode_page
from stripe_spine.fdw.config import (
    OPT_OBJECT,
    OPT_PAGE_SIZE,
    FdwConfig,
    parse_page_size,
    require_option,
)
from stripe_spine.fdw.pushdown import build_request
from stripe_spine.fdw.registry import ResourceSchema, get_schema
from stripe_spine.fdw.transport import StripeTransport
from stripe_spine.fdw.types import Limit, Qual, Row, Sort

log = get_logger(__name__)

UNBOUNDED = sys.maxsize


def page_budget(limit: Limit | None, page_size: int) -> int:
    """
    Maximum number of pages a scan may fetch.

    No limit means unbounded; otherwise enough pages to cover
    ``offset + count`` rows.
    """
    if limit is None:
        return UNBOUNDED
    return math.ceil((limit.offset + limit.count) / page_size)


class ScanEngine:
    """Begin/iterate/end state machine for scans over one wrapper's config."""

    def __init__(self, config: FdwConfig, transport: StripeTransport):
        self._config = config
        self._transport = transport
        self._result: deque[Row] | None = None
        self._last_args: tuple | None = None
        self.pages_fetched = 0

    def _page_size(self, options: Mapping[str, str]) -> int:
        raw = options.get(OPT_PAGE_SIZE)
        if raw is None:
            return self._config.page_size
        # Table options may lower the page size, never raise it
        return min(parse_page_size(raw), self._config.page_size)

    def begin_scan(
        self,
        quals: Sequence[Qual],
        columns: Sequence[str],
        sorts: Sequence[Sort] = (),
        limit: Limit | None = None,
        options: Mapping[str, str] | None = None,
    ) -> None:
        """
        Fetch every page the scan needs and buffer the decoded rows.

        Raises:
            MissingConfigError: ``object`` option absent
            UnsupportedResourceError: ``object`` names an unknown resource
            RequestError: A page request failed; no rows are kept
            DecodeError: A page body was not valid JSON; no rows are kept
        """
        options = options or {}
        self._result = None
        self._last_args = (tuple(quals), tuple(columns), tuple(sorts), limit, dict(options))
        self.pages_fetched = 0

        schema = get_schema(require_option(options, OPT_OBJECT))
        page_size = self._page_size(options)

        if limit is not None and limit.count == 0:
            log.debug("scan_skipped", resource=schema.name, reason="limit 0")
            self._result = deque()
            return

        budget = page_budget(limit, page_size)
        log.debug(
            "scan_started",
            resource=schema.name,
            columns=list(columns),
            page_size=page_size,
            page_budget=None if budget == UNBOUNDED else budget,
        )

        try:
            rows = self._fetch_pages(schema, quals, columns, page_size, budget)
        except FdwError as e:
            e.with_context(resource=schema.name, operation="scan")
            log.error("scan_failed", resource=schema.name, pages=self.pages_fetched, **e.to_dict())
            raise

        self._result = deque(rows)
        log.info("scan_finished", resource=schema.name, rows=len(rows), pages=self.pages_fetched)

    def _fetch_pages(
        self,
        schema: ResourceSchema,
        quals: Sequence[Qual],
        columns: Sequence[str],
        page_size: int,
        budget: int,
    ) -> list[Row]:
        result: list[Row] = []
        cursor: str | None = None
        page = 0

        while page < budget:
            plan = build_request(self._config.base_url, schema, quals, page_size, cursor)
            resp = self._transport.get(plan.url, plan.params).raise_for_status()
            self.pages_fetched += 1

            decoded = decode_page(resp.text, schema, columns)
            log.debug(
                "scan_page",
                resource=schema.name,
                page=page,
                rows=len(decoded),
                has_more=decoded.has_more,
            )
            if not decoded.rows:
                break
            result.extend(decoded.rows)

            if plan.single_object or decoded.has_more is not True:
                break
            if decoded.cursor is None:
                # Without an id on the last record the next page cannot be addressed
                break
            cursor = decoded.cursor
            page += 1

        return result

    def iter_scan(self) -> Row | None:
        """Hand out the next buffered row, or None when exhausted."""
        if self._result:
            return self._result.popleft()
        return None

    def __iter__(self) -> Iterator[Row]:
        while (row := self.iter_scan()) is not None:
            yield row

    def re_scan(self) -> None:
        """Restart the current scan from its first page."""
        if self._last_args is None:
            return
        quals, columns, sorts, limit, options = self._last_args
        self.begin_scan(quals, columns, sorts, limit, options)

    def end_scan(self) -> None:
        """Discard all buffered rows."""
        self._result = None
        self._last_args = None


__all__ = ["UNBOUNDED", "page_budget", "ScanEngine"]
