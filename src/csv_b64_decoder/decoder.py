from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from csv_b64_decoder import csv_io
from csv_b64_decoder.codec import decode_cell
from csv_b64_decoder.exceptions import (
    CellDecodeError,
    CsvDecoderError,
    EmptyInputError,
    NoColumnsFoundError,
    ProcessingError,
)
from csv_b64_decoder.logging import RunLogger, create_run_logger_context
from csv_b64_decoder.models import (
    CellDecoded,
    CellOutcome,
    DecodeReport,
    DecoderOptions,
    Stage,
)
from csv_b64_decoder.paths import derive_output_path
from csv_b64_decoder.settings import Settings


def resolve_columns(header: Sequence[str], column_names: Sequence[str]) -> tuple[dict[int, str], list[str]]:
    """Map requested names to header positions.

    Returns the selection (position -> name, request order) and the names that
    were not found. A name present several times in the header resolves to its
    first position.
    """

    selection: dict[int, str] = {}
    missing: list[str] = []
    for name in column_names:
        try:
            index = list(header).index(name)
        except ValueError:
            missing.append(name)
            continue
        selection.setdefault(index, name)
    return selection, missing


def transform_rows(
    rows: Sequence[Sequence[str]],
    selection: Mapping[int, str],
    *,
    on_decode_error: str = "keep",
    logger: RunLogger | None = None,
) -> tuple[list[list[str]], list[CellOutcome]]:
    """Decode the selected cells of every data row.

    ``rows[0]`` is the header and is copied unchanged. Empty or absent cells are
    skipped silently; undecodable cells are kept as-is (``keep``) or raise
    :class:`CellDecodeError` (``fail``).
    """

    output: list[list[str]] = [list(rows[0])]
    outcomes: list[CellOutcome] = []

    for i in range(1, len(rows)):
        row = rows[i]
        new_row = list(row)
        row_number = i + 1  # 1-indexed, counting the header

        for index, column in selection.items():
            if index >= len(row) or not row[index]:
                continue

            outcome = decode_cell(row[index], row_number=row_number, column=column)
            outcomes.append(outcome)

            if isinstance(outcome, CellDecoded):
                new_row[index] = str(outcome.value)
                continue

            if on_decode_error == "fail":
                raise CellDecodeError(
                    f'Row {row_number}, column "{column}": {outcome.reason}',
                    row_number=row_number,
                    column=column,
                )
            if logger is not None:
                logger.event(
                    "cell.decode_failed",
                    message=f'Row {row_number}, column "{column}" could not be decoded; keeping original value',
                    level=logging.WARNING,
                    data={"row": row_number, "column": column, "reason": outcome.reason},
                )

        output.append(new_row)

    return output, outcomes


class CsvBase64Decoder:
    """Decode base64-encoded integer columns of one CSV file."""

    def __init__(
        self,
        options: DecoderOptions | Mapping[str, Any],
        *,
        logger: RunLogger | None = None,
        settings: Settings | None = None,
    ) -> None:
        if not isinstance(options, DecoderOptions):
            options = DecoderOptions.model_validate(dict(options))
        self.options = options
        self.logger = logger
        self.settings = settings

    @property
    def output_path(self) -> Path:
        return derive_output_path(self.options.file_path, suffix=self.options.output_suffix)

    def process(self) -> DecodeReport:
        """Run the whole read → decode → write cycle.

        Fatal failures are re-raised as :class:`ProcessingError`; nothing is
        written unless every stage before writing succeeded.
        """

        if self.logger is not None:
            return self._run(self.logger)

        if self.settings is None:
            log_ctx = create_run_logger_context()
        else:
            log_ctx = create_run_logger_context(log_format=self.settings.log_format, log_level=self.settings.log_level)
        with log_ctx:
            return self._run(log_ctx.logger)

    def _run(self, logger: RunLogger) -> DecodeReport:
        opts = self.options
        path = Path(opts.file_path)
        stage: Stage | None = None

        def _enter(next_stage: Stage) -> None:
            nonlocal stage
            stage = next_stage
            logger.event("stage.started", level=logging.DEBUG, data={"stage": next_stage.value})

        logger.event(
            "run.started",
            message="Run started",
            data={"input_file": str(path), "column_names": list(opts.column_names), "encoding": opts.encoding},
        )

        try:
            _enter(Stage.VALIDATING)
            csv_io.ensure_input_file(path)

            _enter(Stage.READING)
            text = csv_io.read_text(path, encoding=opts.encoding)

            _enter(Stage.PARSING)
            rows = csv_io.parse_rows(text)
            if not rows:
                raise EmptyInputError("CSV file is empty")

            _enter(Stage.RESOLVING_COLUMNS)
            selection, missing = resolve_columns(rows[0], opts.column_names)
            for name in missing:
                logger.event(
                    "columns.missing",
                    message=f'Column "{name}" not found',
                    level=logging.WARNING,
                    data={"column": name},
                )
            if not selection:
                raise NoColumnsFoundError("None of the requested columns were found")
            logger.event(
                "columns.resolved",
                level=logging.DEBUG,
                data={"columns": {name: index for index, name in selection.items()}},
            )

            _enter(Stage.TRANSFORMING)
            output_rows, outcomes = transform_rows(
                rows,
                selection,
                on_decode_error=opts.on_decode_error,
                logger=logger,
            )

            _enter(Stage.WRITING)
            output_path = self.output_path
            csv_io.write_rows(output_path, output_rows, encoding=opts.encoding)
        except CsvDecoderError as exc:
            stage_name = stage.value if stage is not None else None
            logger.event(
                "run.failed",
                message="Run failed",
                level=logging.ERROR,
                data={"input_file": str(path), "stage": stage_name, "error": str(exc)},
                exc=exc,
            )
            raise ProcessingError(f"CSV processing error: {exc}", stage=stage_name) from exc

        report = DecodeReport(
            output_path=output_path,
            processed_columns=list(selection.values()),
            processed_rows=len(output_rows) - 1,
            missing_columns=missing,
            outcomes=outcomes,
        )
        logger.event(
            "run.completed",
            message=f"Wrote {report.output_path}",
            data={
                "output_file": str(report.output_path),
                "processed_columns": report.processed_columns,
                "processed_rows": report.processed_rows,
                "decoded_cells": report.decoded_count,
                "warnings": len(report.warnings),
            },
        )
        return report


def decode(
    file_path: str | Path,
    column_names: Sequence[str],
    *,
    encoding: str = "utf-8",
    logger: RunLogger | None = None,
) -> DecodeReport:
    """Convenience wrapper: build a :class:`CsvBase64Decoder` with default options and run it."""

    options = DecoderOptions(file_path=Path(file_path), column_names=list(column_names), encoding=encoding)
    return CsvBase64Decoder(options, logger=logger).process()


__all__ = ["CsvBase64Decoder", "decode", "resolve_columns", "transform_rows"]
