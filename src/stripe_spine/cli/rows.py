"""
CLI: ``stripe-spine scan|insert|update|delete``: row operations.

Each command builds one wrapper, runs one operation and closes it.
"""

from __future__ import annotations

import typer

from stripe_spine.cli import utils
from stripe_spine.cli.utils import (
    cell_to_json,
    console,
    handle_errors,
    output_rows,
    parse_attrs,
    parse_pairs,
    parse_where,
)
from stripe_spine.fdw.config import OPT_OBJECT, OPT_ROWID_COLUMN
from stripe_spine.fdw.pushdown import ID_FIELD
from stripe_spine.fdw.registry import ResourceSchema, get_schema
from stripe_spine.fdw.types import ATTRS_COLUMN, JsonDocument, Limit, Qual, Row

# Shared connection options
ApiKeyOpt = typer.Option(None, "--api-key", help="Stripe secret key (prefer STRIPE_SPINE_API_KEY).")
ApiKeyIdOpt = typer.Option(None, "--api-key-id", help="Secret reference, e.g. secret:env:STRIPE_API_KEY.")
ApiUrlOpt = typer.Option(None, "--api-url", help="Override the API root.")


def _build_row(values: list[str], attrs: str | None) -> Row:
    row = Row.from_dict(parse_pairs(values, "--set"))
    extra = parse_attrs(attrs)
    if extra is not None:
        row.push(ATTRS_COLUMN, JsonDocument(extra))
    return row


def _modify_options(resource: str) -> dict[str, str]:
    return {OPT_OBJECT: resource, OPT_ROWID_COLUMN: "id"}


def scan(
    resource: str = typer.Argument(..., help="Resource kind, e.g. customers"),
    columns: list[str] = typer.Option(None, "--column", "-c", help="Column to fetch (repeatable)."),
    where: list[str] = typer.Option(None, "--where", "-w", help="Equality filter field=value (repeatable)."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0),
    offset: int = typer.Option(0, "--offset", min=0),
    page_size: int | None = typer.Option(None, "--page-size", min=1, max=100),
    api_key: str | None = ApiKeyOpt,
    api_key_id: str | None = ApiKeyIdOpt,
    api_url: str | None = ApiUrlOpt,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Scan a resource and print its rows."""
    with handle_errors():
        schema = get_schema(resource)
        cols = list(columns) if columns else schema.field_names
        quals = parse_where(where or [])

        # Filters on columns that are not fetched are checked against attrs
        fetch = list(cols)
        if any(q.field not in fetch for q in quals) and ATTRS_COLUMN not in fetch:
            fetch.append(ATTRS_COLUMN)

        # The row budget only holds when every filter reaches the API
        scan_limit = None
        if limit is not None and _fully_pushed(schema, quals):
            scan_limit = Limit(count=limit, offset=offset)

        options = utils.server_options(api_key, api_key_id, api_url, page_size)
        with utils.make_fdw(options) as fdw:
            rows = list(fdw.scan(schema.name, fetch, quals, scan_limit))

    # Pushdown only narrows the request; filters and offset are applied here
    rows = [r for r in rows if all(_matches(r, q.field, q.value) for q in quals)]
    rows = rows[offset:]
    if limit is not None:
        rows = rows[:limit]

    output_rows(rows, cols, as_json=json_out, title=schema.name)


def _fully_pushed(schema: ResourceSchema, quals: list[Qual]) -> bool:
    if schema.direct_lookup and len(quals) == 1 and quals[0].field == ID_FIELD:
        return True
    return all(q.field in schema.pushdown_fields for q in quals)


def _matches(row: Row, field: str, expected: str) -> bool:
    if field in row:
        value = row[field]
    else:
        attrs = row.get(ATTRS_COLUMN)
        if not isinstance(attrs, JsonDocument):
            return True
        value = attrs.value.get(field)
    # Timestamps compare in the ISO-8601 form the output uses
    value = cell_to_json(value)
    if isinstance(value, bool):
        return str(value).lower() == expected.lower()
    return value is not None and str(value) == expected


def insert(
    resource: str = typer.Argument(..., help="Resource kind"),
    values: list[str] = typer.Option(None, "--set", "-s", help="Field value key=value (repeatable)."),
    attrs: str | None = typer.Option(None, "--attrs", help="Extra fields as a JSON object."),
    api_key: str | None = ApiKeyOpt,
    api_key_id: str | None = ApiKeyIdOpt,
    api_url: str | None = ApiUrlOpt,
) -> None:
    """Create an object and print its id."""
    row = _build_row(values or [], attrs)
    with handle_errors():
        with utils.make_fdw(utils.server_options(api_key, api_key_id, api_url)) as fdw:
            fdw.begin_modify(_modify_options(resource))
            object_id = fdw.insert(row)
            fdw.end_modify()
    console.print(f"[green]✓[/green] Inserted {object_id}")


def update(
    resource: str = typer.Argument(..., help="Resource kind"),
    object_id: str = typer.Argument(..., help="Object id"),
    values: list[str] = typer.Option(None, "--set", "-s", help="Field value key=value (repeatable)."),
    attrs: str | None = typer.Option(None, "--attrs", help="Extra fields as a JSON object."),
    api_key: str | None = ApiKeyOpt,
    api_key_id: str | None = ApiKeyIdOpt,
    api_url: str | None = ApiUrlOpt,
) -> None:
    """Update an object and print its id."""
    row = _build_row(values or [], attrs)
    with handle_errors():
        with utils.make_fdw(utils.server_options(api_key, api_key_id, api_url)) as fdw:
            fdw.begin_modify(_modify_options(resource))
            confirmed = fdw.update(object_id, row)
            fdw.end_modify()
    console.print(f"[green]✓[/green] Updated {confirmed}")


def delete(
    resource: str = typer.Argument(..., help="Resource kind"),
    object_id: str = typer.Argument(..., help="Object id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    api_key: str | None = ApiKeyOpt,
    api_key_id: str | None = ApiKeyIdOpt,
    api_url: str | None = ApiUrlOpt,
) -> None:
    """Delete an object."""
    if not force:
        if not typer.confirm(f"Delete {resource} {object_id}?"):
            console.print("[dim]Aborted.[/dim]")
            raise typer.Exit(code=0)

    with handle_errors():
        with utils.make_fdw(utils.server_options(api_key, api_key_id, api_url)) as fdw:
            fdw.begin_modify(_modify_options(resource))
            confirmed = fdw.delete(object_id)
            fdw.end_modify()
    console.print(f"[green]✓[/green] Deleted {confirmed}")
