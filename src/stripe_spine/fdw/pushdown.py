"""
Predicate pushdown: turn host quals into a request against the API.

Only non-disjunctive equality quals on a resource's pushdown fields are
translated; every other qual is dropped without error. Dropping a qual only
widens the result set, so the host MUST re-apply all of its quals to the
rows it receives.

For lookup-capable resources a lone ``id = '<id>'`` qual becomes a direct
``GET /{resource}/{id}``, bypassing pagination.

Examples:
    >>> schema = get_schema("customers")
    >>> plan = build_request(
    ...     "https://api.stripe.com/v1/", schema,
    ...     [Qual("email", "=", "a@b.co")], page_size=100, cursor=None,
    ... )
    >>> plan.url, plan.params
    ('https://api.stripe.com/v1/customers', [('email', 'a@b.co'), ('limit', '100')])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence
from urllib.parse import quote, urlencode

from stripe_spine.fdw.registry import ResourceSchema
from stripe_spine.fdw.types import Qual

ID_FIELD = "id"
PAGE_SIZE_PARAM = "limit"
CURSOR_PARAM = "starting_after"


@dataclass(frozen=True)
class RequestPlan:
    """A GET request ready to hand to the transport."""

    url: str
    params: list[tuple[str, str]] = field(default_factory=list)
    single_object: bool = False

    @property
    def full_url(self) -> str:
        if not self.params:
            return self.url
        return f"{self.url}?{urlencode(self.params)}"


def resource_url(base_url: str, resource: str) -> str:
    """Join the API root and a resource path, tolerating a missing trailing slash."""
    return f"{base_url.rstrip('/')}/{resource}"


def object_url(base_url: str, resource: str, object_id: str) -> str:
    """URL of a single object: ``{base}/{resource}/{id}``."""
    return f"{resource_url(base_url, resource)}/{quote(object_id, safe='')}"


def _render_value(value: object) -> str | None:
    # bool is an int subclass; keep it ahead of any numeric handling
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return None


def pushdown_single_id(url: str, quals: Sequence[Qual]) -> str | None:
    """Return ``{url}/{id}`` when quals are exactly one string ``id = ...``."""
    if len(quals) != 1:
        return None
    qual = quals[0]
    if qual.field == ID_FIELD and qual.is_pushable_equality and isinstance(qual.value, str):
        return f"{url}/{quote(qual.value, safe='')}"
    return None


def pushdown_quals(
    params: list[tuple[str, str]],
    quals: Sequence[Qual],
    fields: Sequence[str],
) -> list[tuple[str, str]]:
    """
    Append eligible quals to ``params`` as ``(field, value)`` pairs.

    Quals that are not equality, are disjunctive, target other fields, or
    carry a value that is neither bool nor string are skipped. Existing
    params are never removed.
    """
    for qual in quals:
        if qual.field not in fields or not qual.is_pushable_equality:
            continue
        rendered = _render_value(qual.value)
        if rendered is not None:
            params.append((qual.field, rendered))
    return params


def build_request(
    base_url: str,
    schema: ResourceSchema,
    quals: Sequence[Qual],
    page_size: int,
    cursor: str | None,
) -> RequestPlan:
    """
    Build the GET request for one page of a scan.

    Order of precedence: direct id lookup (lookup-capable kinds only), then
    generic pushdown, then pagination params (paginated kinds only).
    """
    url = resource_url(base_url, schema.name)

    if schema.direct_lookup:
        single_url = pushdown_single_id(url, quals)
        if single_url is not None:
            return RequestPlan(url=single_url, single_object=True)

    params: list[tuple[str, str]] = []
    pushdown_quals(params, quals, schema.pushdown_fields)

    if schema.paginated:
        params.append((PAGE_SIZE_PARAM, str(page_size)))
        if cursor is not None:
            params.append((CURSOR_PARAM, cursor))

    return RequestPlan(url=url, params=params)


__all__ = [
    "ID_FIELD",
    "PAGE_SIZE_PARAM",
    "CURSOR_PARAM",
    "RequestPlan",
    "resource_url",
    "object_url",
    "pushdown_single_id",
    "pushdown_quals",
    "build_request",
]
