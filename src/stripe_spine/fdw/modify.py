"""
Mutation dispatcher: INSERT / UPDATE / DELETE against a resource.

Each mutation is one request:

    insert(row)          POST   {base}/{resource}         form body
    update(rowid, row)   POST   {base}/{resource}/{rowid} form body
    delete(rowid)        DELETE {base}/{resource}/{rowid}

The response is parsed only for the ``id`` of the affected object, which
is logged and returned as confirmation.
"""

from __future__ import annotations

from typing import Mapping

from stripe_spine.core.errors import FdwError
from stripe_spine.core.logging import get_logger
from stripe_spine.fdw.codec import encode_row, extract_id, form_encode
from stripe_spine.fdw.config import OPT_OBJECT, OPT_ROWID_COLUMN, FdwConfig, require_option
from stripe_spine.fdw.pushdown import object_url, resource_url
from stripe_spine.fdw.registry import ResourceSchema, get_schema
from stripe_spine.fdw.transport import StripeTransport, TransportResponse
from stripe_spine.fdw.types import Row

log = get_logger(__name__)


def _require_rowid(rowid: object) -> str:
    if not isinstance(rowid, str):
        raise TypeError(f"rowid must be a string, got {type(rowid).__name__}")
    return rowid


class MutationDispatcher:
    """Translate row mutations into single API calls."""

    def __init__(self, config: FdwConfig, transport: StripeTransport):
        self._config = config
        self._transport = transport
        self._schema: ResourceSchema | None = None
        self.rowid_column: str | None = None

    @property
    def schema(self) -> ResourceSchema:
        if self._schema is None:
            raise RuntimeError("begin_modify() has not been called")
        return self._schema

    def begin_modify(self, options: Mapping[str, str]) -> None:
        """
        Validate the mutation target.

        Raises:
            MissingConfigError: ``object`` or ``rowid_column`` absent
            UnsupportedResourceError: Unknown ``object``
        """
        resource = require_option(options, OPT_OBJECT)
        rowid_column = require_option(options, OPT_ROWID_COLUMN)
        self._schema = get_schema(resource)
        self.rowid_column = rowid_column

    def insert(self, row: Row) -> str | None:
        """Create an object from ``row`` and return its id."""
        schema = self.schema
        url = resource_url(self._config.base_url, schema.name)
        form = form_encode(encode_row(row))
        return self._confirm("insert", "inserted", lambda: self._transport.post_form(url, form))

    def update(self, rowid: str, row: Row) -> str | None:
        """Apply the populated cells of ``row`` to object ``rowid``."""
        rowid = _require_rowid(rowid)
        schema = self.schema
        url = object_url(self._config.base_url, schema.name, rowid)
        form = form_encode(encode_row(row))
        return self._confirm("update", "updated", lambda: self._transport.post_form(url, form))

    def delete(self, rowid: str) -> str | None:
        """Delete object ``rowid``."""
        rowid = _require_rowid(rowid)
        schema = self.schema
        url = object_url(self._config.base_url, schema.name, rowid)
        return self._confirm("delete", "deleted", lambda: self._transport.delete(url))

    def _confirm(self, operation: str, event: str, send) -> str | None:
        schema = self.schema
        try:
            resp: TransportResponse = send().raise_for_status()
            object_id = extract_id(resp.text)
        except FdwError as e:
            e.with_context(resource=schema.name, operation=operation)
            log.error(f"{operation}_failed", resource=schema.name, **e.to_dict())
            raise

        log.info(event, resource=schema.name, id=object_id)
        return object_id

    def end_modify(self) -> None:
        self._schema = None
        self.rowid_column = None


__all__ = ["MutationDispatcher"]
