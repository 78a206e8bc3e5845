"""CLI entrypoint for :mod:`csv_b64_decoder`.

- `run`     - decode base64 integer columns of a CSV file into `<stem>_opts.csv`.
- `version` - print the package version.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from csv_b64_decoder import __version__
from csv_b64_decoder.decoder import CsvBase64Decoder
from csv_b64_decoder.exceptions import CsvDecoderError
from csv_b64_decoder.logging import create_run_logger_context
from csv_b64_decoder.models import DecodeReport, DecoderOptions
from csv_b64_decoder.settings import Settings

USAGE = "Usage: csv-b64-decoder run <CSV_FILE> <COLUMN_1> [COLUMN_2 ...]"


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


class OutputFormat(str, Enum):
    """Supported stdout summary formats."""

    text = "text"
    json = "json"


class DecodePolicy(str, Enum):
    keep = "keep"
    fail = "fail"


app = typer.Typer(
    help=(
        "Decode base64-encoded integer columns of a CSV file.\n\n"
        "```bash\n"
        "csv-b64-decoder run data.csv encoded_id encoded_value\n"
        "```\n\n"
        "Writes `data_opts.csv` next to the input."
    ),
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


def resolve_log_level(log_level: Optional[str], default_level: int) -> int:
    """Resolve a string log level to a logging level constant."""
    if not log_level:
        return default_level

    resolved = logging.getLevelNamesMapping().get(str(log_level).upper())
    if isinstance(resolved, int):
        return resolved

    raise typer.BadParameter(f"Invalid log level: {log_level}", param_hint="--log-level")


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    debug: bool,
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Compute effective log format/level.

    Precedence: --quiet > --debug > --log-level > settings.
    """
    effective_format = log_format.value if log_format else settings.log_format
    base_level = resolve_log_level(log_level, settings.log_level)

    if quiet:
        effective_level = logging.WARNING
    elif debug:
        effective_level = logging.DEBUG
    else:
        effective_level = base_level

    return effective_format, effective_level


def _report_payload(report: DecodeReport) -> dict:
    return {
        "output_file": str(report.output_path),
        "processed_columns": report.processed_columns,
        "processed_rows": report.processed_rows,
        "missing_columns": report.missing_columns,
        "decoded_cells": report.decoded_count,
        "warnings": [
            {"row": warning.row_number, "column": warning.column, "reason": warning.reason}
            for warning in report.warnings
        ],
    }


def _print_text_summary(report: DecodeReport) -> None:
    typer.echo(f"Output: {report.output_path}")
    typer.echo(f"Processed columns: {', '.join(report.processed_columns)}")
    typer.echo(f"Processed rows: {report.processed_rows}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit.",
    ),
) -> None:
    """Decode base64-encoded integer columns of a CSV file."""


@app.command("run")
def run_command(
    input_file: Optional[Path] = typer.Argument(None, help="CSV file to decode.", show_default=False),
    columns: Optional[List[str]] = typer.Argument(None, help="Header names of the columns to decode.", show_default=False),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Text encoding (default: settings, utf-8)."),
    on_decode_error: Optional[DecodePolicy] = typer.Option(
        None,
        "--on-decode-error",
        case_sensitive=False,
        help="keep: leave undecodable cells unchanged; fail: abort the run.",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.text,
        "--format",
        case_sensitive=False,
        help="stdout summary format.",
    ),
    log_format: Optional[LogFormat] = typer.Option(None, "--log-format", case_sensitive=False, help="Log output format."),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        case_sensitive=False,
        help="Log level (debug, info, warning, error, critical).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", help="Reduce logging to warnings and errors."),
) -> None:
    """Decode COLUMNS of INPUT_FILE and write `<stem>_opts.csv` beside it."""

    if input_file is None or not columns:
        typer.echo(USAGE, err=True)
        raise typer.Exit(code=1)

    try:
        settings = Settings()
        effective_format, effective_level = resolve_logging(
            log_format=log_format,
            log_level=log_level,
            debug=debug,
            quiet=quiet,
            settings=settings,
        )
        options = DecoderOptions(
            file_path=input_file,
            column_names=list(columns),
            encoding=encoding or settings.encoding,
            output_suffix=settings.output_suffix,
            on_decode_error=on_decode_error.value if on_decode_error else settings.on_decode_error,
        )
    except (ValidationError, typer.BadParameter) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    with create_run_logger_context(log_format=effective_format, log_level=effective_level) as log_ctx:
        try:
            report = CsvBase64Decoder(options, logger=log_ctx.logger).process()
        except CsvDecoderError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1)

    if format == OutputFormat.json:
        typer.echo(json.dumps(_report_payload(report)))
    else:
        _print_text_summary(report)


@app.command("version")
def version_command() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entrypoint used by console scripts and `python -m csv_b64_decoder`."""
    app()


__all__ = ["app", "main"]
