from __future__ import annotations

import codecs
import csv
import io
import sys
from pathlib import Path
from typing import Iterable

from csv_b64_decoder.exceptions import FileAccessError, MalformedCsvError

# Cells are only bounded by available memory.
_FIELD_SIZE_LIMIT = min(sys.maxsize, 2**31 - 1)


def _read_encoding(encoding: str) -> str:
    # Strip a leading BOM when reading UTF-8 input.
    return "utf-8-sig" if codecs.lookup(encoding).name == "utf-8" else encoding


def ensure_input_file(path: Path) -> None:
    if not path.exists():
        raise FileAccessError(f"Source file not found: {path}")
    if not path.is_file():
        raise FileAccessError(f"Source path is not a file: {path}")


def read_text(path: Path, *, encoding: str = "utf-8") -> str:
    """Read the whole file as text."""

    try:
        with path.open("r", encoding=_read_encoding(encoding), newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileAccessError(f"Could not read `{path}`: {exc}") from exc


def parse_rows(text: str) -> list[list[str]]:
    """Parse CSV text into rows; blank lines are skipped, stray quotes are rejected."""

    csv.field_size_limit(_FIELD_SIZE_LIMIT)
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        return [row for row in reader if row]
    except csv.Error as exc:
        raise MalformedCsvError(f"Could not parse CSV at line {reader.line_num}: {exc}") from exc


def read_rows(path: Path, *, encoding: str = "utf-8") -> list[list[str]]:
    ensure_input_file(path)
    return parse_rows(read_text(path, encoding=encoding))


def render_rows(rows: Iterable[list[str]]) -> str:
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def write_rows(path: Path, rows: Iterable[list[str]], *, encoding: str = "utf-8") -> None:
    """Serialize ``rows`` fully, then replace ``path`` in a single write."""

    content = render_rows(rows)
    try:
        with path.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)
    except (OSError, UnicodeEncodeError) as exc:
        raise FileAccessError(f"Could not write `{path}`: {exc}") from exc


__all__ = [
    "ensure_input_file",
    "parse_rows",
    "read_rows",
    "read_text",
    "render_rows",
    "write_rows",
]
