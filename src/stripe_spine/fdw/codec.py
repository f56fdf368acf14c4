"""
Row codec: JSON response bodies to rows, and rows to request bodies.

Decoding is schema-driven. A value that is absent or of the wrong JSON type
leaves its cell empty; it never fails the row. A body that is not valid
JSON fails the whole page with ``DecodeError``.

Encoding maps scalar cells directly and merges the keys of the ``attrs``
document into the body, so extra attributes reach the API as first-class
fields. Typed columns win over ``attrs`` keys of the same name.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from stripe_spine.core.errors import DecodeError, UnsupportedFieldTypeError
from stripe_spine.fdw.registry import ColumnType, Envelope, ResourceSchema
from stripe_spine.fdw.types import ATTRS_COLUMN, Cell, JsonDocument, Row

# Envelope discriminator and the value marking a paginated collection
DISCRIMINATOR_KEY = "object"
LIST_DISCRIMINATOR = "list"
HAS_MORE_KEY = "has_more"
ID_KEY = "id"

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@dataclass
class DecodedPage:
    """Rows decoded from one response, plus the pagination state it implies."""

    rows: list[Row] = field(default_factory=list)
    cursor: str | None = None
    has_more: bool | None = None

    def __len__(self) -> int:
        return len(self.rows)


# =============================================================================
# DECODE
# =============================================================================


def coerce_value(value: Any, col_type: ColumnType) -> Cell | None:
    """
    Coerce one JSON value to a column type.

    Returns None for absent, mistyped, or out-of-range values.
    """
    if value is None:
        return None

    if col_type is ColumnType.BOOL:
        return value if isinstance(value, bool) else None

    if col_type is ColumnType.STRING:
        return value if isinstance(value, str) else None

    # Remaining types are integral; JSON true/false must not pass as 1/0
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if not _I64_MIN <= value <= _I64_MAX:
        return None

    if col_type is ColumnType.I64:
        return value

    if col_type is ColumnType.TIMESTAMP:
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    return None


def parse_json(body: str | bytes) -> Any:
    """Parse a response body, raising DecodeError on malformed JSON."""
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"response is not valid JSON: {e}", cause=e) from e


def extract_records(value: Any, schema: ResourceSchema) -> list[dict[str, Any]]:
    """
    Pull the record list out of a parsed body.

    A ``{"object": "list"}`` envelope yields its data array, an object
    envelope its records array, and any other object is a single record.
    """
    if not isinstance(value, dict):
        raise DecodeError(f"expected a JSON object, got {type(value).__name__}").with_context(
            resource=schema.name
        )

    if value.get(DISCRIMINATOR_KEY) == LIST_DISCRIMINATOR:
        records = value.get(schema.records_key)
        if not isinstance(records, list):
            raise DecodeError(
                f"list envelope has no '{schema.records_key}' array"
            ).with_context(resource=schema.name)
        return [r for r in records if isinstance(r, dict)]

    if schema.envelope is Envelope.OBJECT and isinstance(value.get(schema.records_key), list):
        return [r for r in value[schema.records_key] if isinstance(r, dict)]

    return [value]


def record_to_row(record: dict[str, Any], schema: ResourceSchema, columns: Sequence[str]) -> Row:
    """Build a row holding only the requested columns."""
    row = Row()
    for column in columns:
        col_type = schema.column_type(column)
        if col_type is not None:
            row.push(column, coerce_value(record.get(column), col_type))

    if ATTRS_COLUMN in columns:
        row.push(ATTRS_COLUMN, JsonDocument(copy.deepcopy(record)))

    return row


def decode_page(body: str | bytes, schema: ResourceSchema, columns: Sequence[str]) -> DecodedPage:
    """
    Decode one response body into rows.

    The next cursor is the ``id`` of the last record; ``has_more`` is read
    from the envelope and is None when absent (callers treat that as stop).
    """
    value = parse_json(body)
    records = extract_records(value, schema)

    rows = [record_to_row(record, schema, columns) for record in records]

    cursor = None
    if records:
        last_id = records[-1].get(ID_KEY)
        if isinstance(last_id, str):
            cursor = last_id

    has_more = value.get(HAS_MORE_KEY)
    if not isinstance(has_more, bool):
        has_more = None

    return DecodedPage(rows=rows, cursor=cursor, has_more=has_more)


def extract_id(body: str | bytes) -> str | None:
    """Read the ``id`` of a single-object response (create/update/delete)."""
    value = parse_json(body)
    if isinstance(value, dict) and isinstance(value.get(ID_KEY), str):
        return value[ID_KEY]
    return None


# =============================================================================
# ENCODE
# =============================================================================


def encode_row(row: Row) -> dict[str, Any]:
    """
    Serialize a row into a request body.

    Raises:
        UnsupportedFieldTypeError: For any populated cell that is not a
            bool, int, str or JSON document. Nothing must be sent then.
    """
    body: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    for column, cell in row.items():
        if cell is None:
            continue
        if isinstance(cell, (bool, int, str)):
            body[column] = cell
        elif isinstance(cell, JsonDocument):
            if column == ATTRS_COLUMN:
                extra = cell.value
        else:
            raise UnsupportedFieldTypeError(column, cell)

    for key, value in extra.items():
        body.setdefault(key, value)

    return body


def _flatten(prefix: str, value: Any, out: list[tuple[str, str]]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _flatten(f"{prefix}[{key}]", item, out)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}[{index}]", item, out)
    elif isinstance(value, bool):
        out.append((prefix, "true" if value else "false"))
    elif value is None:
        # Stripe unsets a field when it is sent empty
        out.append((prefix, ""))
    else:
        out.append((prefix, str(value)))


def form_encode(body: dict[str, Any]) -> list[tuple[str, str]]:
    """
    Flatten a body into form pairs using Stripe's bracket notation.

    Example:
        >>> form_encode({"name": "Ada", "metadata": {"tier": "gold"}})
        [('name', 'Ada'), ('metadata[tier]', 'gold')]
    """
    out: list[tuple[str, str]] = []
    for key, value in body.items():
        _flatten(key, value, out)
    return out


__all__ = [
    "DecodedPage",
    "coerce_value",
    "parse_json",
    "extract_records",
    "record_to_row",
    "decode_page",
    "extract_id",
    "encode_row",
    "form_encode",
]
