"""
Root Typer application for the docspine CLI.

Diagnostic commands for index selection: see which indices a time range
resolves to, with or without grouping, before a query goes out.
"""

from __future__ import annotations

import json
import math
import sys
from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from docspine.core.errors import DocSpineError
from docspine.core.logging import configure_logging
from docspine.core.settings import get_settings
from docspine.indexing.granularity import Granularity
from docspine.indexing.periods import Moment, partition, period_index_name, reference_timezone
from docspine.indexing.selectors import select_indices

app = typer.Typer(
    name="docspine",
    help="docspine: entity identity and time-partitioned index selection.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("docspine")
        except PackageNotFoundError:
            v = "0.3.0"
        typer.echo(f"docspine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """docspine CLI: inspect index selection for time ranges."""
    settings = get_settings()
    # stdout carries command output only
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service="docspine-cli",
        stream=sys.stderr,
        cache_loggers=False,
    )


def _parse_moment(value: str) -> Moment:
    """Epoch seconds or an ISO-8601 timestamp."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if math.isfinite(seconds):
            return seconds
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"expected epoch seconds or ISO-8601, got {value!r}") from exc


def _fail(error: DocSpineError) -> None:
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


@app.command("select")
def select(
    prefix: str = typer.Argument(..., help="Index name prefix, e.g. logs_"),
    start: str = typer.Argument(..., help="Range start (epoch seconds or ISO-8601)"),
    end: str = typer.Argument(..., help="Range end, inclusive (epoch seconds or ISO-8601)"),
    granularity: str = typer.Option("daily", "--granularity", "-g", help="daily, monthly or yearly"),
    no_group: bool = typer.Option(False, "--no-group", help="Disable YYYY.* / YYYY.MM.* grouping"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Wildcard fallback threshold"),
    no_limit: bool = typer.Option(False, "--no-limit", help="Never fall back to prefix*"),
    utc_offset: int | None = typer.Option(
        None, "--utc-offset", min=-12, max=14, help="Boundary offset in hours"
    ),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Print the index selector for a time range."""
    settings = get_settings()
    offset = settings.utc_offset_hours if utc_offset is None else utc_offset
    try:
        selector = select_indices(
            prefix,
            _parse_moment(start),
            _parse_moment(end),
            granularity,
            enable_group_select=settings.enable_group_select and not no_group,
            max_tokens=None if no_limit else (max_tokens or settings.max_selector_tokens),
            tz=reference_timezone(offset),
        )
    except DocSpineError as exc:
        _fail(exc)
        return

    if json_out:
        console.print_json(json.dumps({"tokens": list(selector.tokens), "wildcard": selector.is_wildcard}))
        return
    typer.echo(str(selector))


@app.command("partition")
def partition_command(
    start: str = typer.Argument(..., help="Range start (epoch seconds or ISO-8601)"),
    end: str = typer.Argument(..., help="Range end, inclusive (epoch seconds or ISO-8601)"),
    granularity: str = typer.Option("daily", "--granularity", "-g"),
    utc_offset: int | None = typer.Option(
        None, "--utc-offset", min=-12, max=14, help="Boundary offset in hours"
    ),
) -> None:
    """List the period buckets a range touches, without grouping."""
    settings = get_settings()
    tz = reference_timezone(settings.utc_offset_hours if utc_offset is None else utc_offset)
    try:
        buckets = partition(_parse_moment(start), _parse_moment(end), granularity, tz=tz)
    except DocSpineError as exc:
        _fail(exc)
        return

    table = Table(title=f"{len(buckets)} bucket(s)")
    table.add_column("label")
    table.add_column("start")
    table.add_column("end")
    for bucket in buckets:
        table.add_row(bucket.label, bucket.start.isoformat(), bucket.end.isoformat())
    console.print(table)


@app.command("index-name")
def index_name(
    prefix: str = typer.Argument(...),
    timestamp: str = typer.Argument(..., help="Epoch seconds or ISO-8601"),
    granularity: str = typer.Option("daily", "--granularity", "-g"),
    utc_offset: int | None = typer.Option(
        None, "--utc-offset", min=-12, max=14, help="Boundary offset in hours"
    ),
) -> None:
    """Print the index a document with this timestamp is written to."""
    settings = get_settings()
    tz = reference_timezone(settings.utc_offset_hours if utc_offset is None else utc_offset)
    try:
        name = period_index_name(prefix, _parse_moment(timestamp), Granularity.parse(granularity), tz=tz)
    except DocSpineError as exc:
        _fail(exc)
        return
    typer.echo(name)
