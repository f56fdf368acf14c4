"""stripe_spine.fdw -- the foreign data wrapper itself.

Read path::

    quals/columns/limit ─▶ pushdown.build_request ─▶ transport.get
        ─▶ codec.decode_page ─▶ ScanEngine buffer ─▶ iter_scan()

Write path::

    Row ─▶ codec.encode_row ─▶ codec.form_encode ─▶ transport.post_form/delete
        ─▶ codec.extract_id
"""

from stripe_spine.fdw.config import FdwConfig
from stripe_spine.fdw.modify import MutationDispatcher
from stripe_spine.fdw.registry import (
    RESOURCE_SCHEMAS,
    ColumnType,
    ResourceKind,
    ResourceSchema,
    get_schema,
    list_schemas,
)
from stripe_spine.fdw.scan import ScanEngine
from stripe_spine.fdw.transport import StripeTransport
from stripe_spine.fdw.types import ATTRS_COLUMN, JsonDocument, Limit, Qual, Row, Sort
from stripe_spine.fdw.wrapper import StripeFdw

__all__ = [
    "FdwConfig",
    "MutationDispatcher",
    "RESOURCE_SCHEMAS",
    "ColumnType",
    "ResourceKind",
    "ResourceSchema",
    "get_schema",
    "list_schemas",
    "ScanEngine",
    "StripeTransport",
    "ATTRS_COLUMN",
    "JsonDocument",
    "Limit",
    "Qual",
    "Row",
    "Sort",
    "StripeFdw",
]
