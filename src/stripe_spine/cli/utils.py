"""
CLI utility helpers: wrapper construction, argument parsing, output.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stripe_spine.core.errors import FdwError
from stripe_spine.fdw.config import OPT_API_KEY, OPT_API_KEY_ID, OPT_API_URL, OPT_PAGE_SIZE
from stripe_spine.fdw.types import JsonDocument, Qual, Row
from stripe_spine.fdw.wrapper import StripeFdw

console = Console()
err_console = Console(stderr=True)


# ── Wrapper helper ───────────────────────────────────────────────────────


def server_options(
    api_key: str | None = None,
    api_key_id: str | None = None,
    api_url: str | None = None,
    page_size: int | None = None,
) -> dict[str, str]:
    """Collect the options given on the command line; settings fill the rest."""
    options: dict[str, str] = {}
    if api_key:
        options[OPT_API_KEY] = api_key
    if api_key_id:
        options[OPT_API_KEY_ID] = api_key_id
    if api_url:
        options[OPT_API_URL] = api_url
    if page_size is not None:
        options[OPT_PAGE_SIZE] = str(page_size)
    return options


def make_fdw(options: dict[str, str]) -> StripeFdw:
    """Build a wrapper from command-line options layered over settings."""
    return StripeFdw(options)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Render adapter errors as ``Error (CATEGORY): message`` and exit 1."""
    try:
        yield
    except FdwError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(e.message)}")
        raise typer.Exit(code=1) from e


# ── Argument parsing ─────────────────────────────────────────────────────


def parse_pairs(pairs: Sequence[str], flag: str) -> dict[str, str]:
    """Parse repeated ``key=value`` arguments."""
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint=flag)
        result[key.strip()] = value
    return result


def parse_where(pairs: Sequence[str]) -> list[Qual]:
    """Turn ``--where field=value`` arguments into equality quals."""
    return [Qual(field, "=", value) for field, value in parse_pairs(pairs, "--where").items()]


def parse_attrs(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"invalid JSON: {e}", param_hint="--attrs") from e
    if not isinstance(value, dict):
        raise typer.BadParameter("must be a JSON object", param_hint="--attrs")
    return value


# ── Output helpers ───────────────────────────────────────────────────────


def cell_to_json(cell: Any) -> Any:
    """Convert a cell to a JSON-serializable value."""
    if isinstance(cell, JsonDocument):
        return cell.value
    if isinstance(cell, datetime):
        return cell.isoformat()
    return cell


def output_rows(rows: list[Row], columns: Sequence[str], *, as_json: bool = False, title: str = "") -> None:
    """Render scanned rows as a Rich table or JSON array."""
    if as_json:
        payload = [{col: cell_to_json(row.get(col)) for col in columns} for row in rows]
        console.print_json(json.dumps(payload, default=str))
        return

    if not rows:
        console.print("[dim]No rows.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        cells = []
        for col in columns:
            value = cell_to_json(row.get(col))
            if value is None:
                cells.append("")
            elif isinstance(value, dict):
                cells.append(escape(json.dumps(value)))
            else:
                cells.append(escape(str(value)))
        table.add_row(*cells)
    console.print(table)
    console.print(f"\n[dim]{len(rows)} row(s)[/dim]")
