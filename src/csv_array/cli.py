"""CLI entrypoint for :mod:`csv_array`."""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer

from csv_array import __version__
from csv_array.array import CsvArray
from csv_array.errors import CsvArrayError
from csv_array.factory import open_array
from csv_array.reporting import LOG_FORMATS, Reporter, build_reporting
from csv_array.settings import Settings

app = typer.Typer(add_completion=False, help="Read and edit delimited text files row by row.")


@dataclass
class CliState:
    settings: Settings
    reporter: Reporter | None = None


def _validate_log_format(log_format: str | None) -> str | None:
    if log_format is None:
        return None
    value = log_format.strip().lower()
    if value not in LOG_FORMATS:
        raise typer.BadParameter("--log-format must be 'text' or 'ndjson'.", param_hint="--log-format")
    return value


@contextmanager
def _opened(ctx: typer.Context, file: Path) -> Iterator[CsvArray]:
    state: CliState = ctx.obj
    settings = state.settings
    try:
        with open_array(
            file,
            separator=settings.separator,
            write_back=settings.write_back,
            line_store_options={"encoding": settings.encoding, "create": False},
        ) as array:
            yield array
    except (CsvArrayError, IndexError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    separator: Optional[str] = typer.Option(None, "--separator", "-s", help="Field separator character."),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="Log output format: text or ndjson."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level name or number."),
) -> None:
    """Global options shared by every command."""
    try:
        settings = Settings.load(
            separator=separator,
            log_format=_validate_log_format(log_format),
            log_level=log_level,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    reporter = build_reporting(settings.log_format, level=settings.log_level)
    ctx.obj = CliState(settings=settings, reporter=reporter)
    ctx.call_on_close(reporter.close)


@app.command("length")
def length_command(ctx: typer.Context, file: Path = typer.Argument(..., help="Backing file.")) -> None:
    """Print the number of rows."""
    with _opened(ctx, file) as array:
        typer.echo(str(len(array)))


@app.command("show")
def show_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    start: int = typer.Option(0, "--start", min=0, help="First row to print."),
    limit: Optional[int] = typer.Option(None, "--limit", min=0, help="Maximum rows to print."),
) -> None:
    """Print rows as JSON arrays, one per line."""
    with _opened(ctx, file) as array:
        stop = None if limit is None else start + limit
        for record in array.records(start, stop):
            typer.echo(json.dumps(record, ensure_ascii=False))


@app.command("get")
def get_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    row: int = typer.Argument(..., help="Row index (negative counts from the end)."),
    col: Optional[int] = typer.Argument(None, help="Optional field index."),
) -> None:
    """Print one row, or one field of it."""
    with _opened(ctx, file) as array:
        handle = array[row]
        if col is None:
            typer.echo(json.dumps(handle.to_list(), ensure_ascii=False))
        else:
            typer.echo(handle[col])


@app.command("set")
def set_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    row: int = typer.Argument(..., help="Row index."),
    col: int = typer.Argument(..., help="Field index."),
    value: str = typer.Argument(..., help="New field value."),
) -> None:
    """Replace one field; the row is padded when ``col`` is past its end."""
    with _opened(ctx, file) as array:
        with array[row] as handle:
            if col >= len(handle):
                handle.resize(col + 1)
            handle[col] = value


@app.command("append")
def append_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    fields: Optional[list[str]] = typer.Argument(None, help="Fields of the new row."),
) -> None:
    """Append one row."""
    with _opened(ctx, file) as array:
        typer.echo(str(array.push(list(fields or []))))


@app.command("insert")
def insert_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    row: int = typer.Argument(..., help="Position of the new row."),
    fields: Optional[list[str]] = typer.Argument(None, help="Fields of the new row."),
) -> None:
    """Insert one row before ``row``."""
    with _opened(ctx, file) as array:
        array.insert(row, list(fields or []))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Backing file."),
    row: int = typer.Argument(..., help="First row to delete."),
    count: int = typer.Option(1, "--count", "-n", min=0, help="Number of rows to delete."),
) -> None:
    """Delete rows and print them as JSON arrays."""
    with _opened(ctx, file) as array:
        if not array.exists(row):
            raise IndexError(f"row index {row} out of range")
        for record in array.remove_range(row, count):
            typer.echo(json.dumps(record, ensure_ascii=False))


@app.command("version")
def version_command() -> None:
    """Print the package version."""
    typer.echo(__version__)


__all__ = ["app"]
