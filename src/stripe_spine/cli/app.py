"""
Root Typer application for the stripe-spine CLI.

Row commands (``scan``, ``insert``, ``update``, ``delete``) live in
``stripe_spine.cli.rows``; this module wires them up next to ``resources``.
"""

from __future__ import annotations

import os

import typer
from rich.table import Table
from typer import Typer

from stripe_spine import __version__
from stripe_spine.cli import rows
from stripe_spine.cli.utils import console
from stripe_spine.core.logging import configure_logging
from stripe_spine.fdw.registry import list_schemas

app = Typer(
    name="stripe-spine",
    help="stripe-spine: Stripe collections as relational rows.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("stripe-spine")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"stripe-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and pages."),
) -> None:
    """stripe-spine CLI: scan and mutate Stripe resources."""
    # Warnings only unless -v
    level = "DEBUG" if verbose else os.environ.get("STRIPE_SPINE_LOG_LEVEL", "WARNING")
    configure_logging(level=level.upper(), force=True)


@app.command("resources")
def resources() -> None:
    """List supported resource kinds and their pushdown fields."""
    table = Table(title="Resources", show_lines=False, pad_edge=False)
    table.add_column("resource")
    table.add_column("columns", overflow="fold")
    table.add_column("pushdown", overflow="fold")
    table.add_column("id lookup")
    for schema in list_schemas():
        table.add_row(
            schema.name,
            ", ".join(schema.field_names),
            ", ".join(schema.pushdown_fields) or "-",
            "yes" if schema.direct_lookup else "no",
        )
    console.print(table)


# ── Row commands ─────────────────────────────────────────────────────────

app.command("scan")(rows.scan)
app.command("insert")(rows.insert)
app.command("update")(rows.update)
app.command("delete")(rows.delete)
