"""Cell codec: base64 text to integer.

Decoding mirrors the browser ``atob`` + ``parseInt(text, 10)`` pair that the
CSV files in the wild were produced against:

- base64 is "forgiving": ASCII whitespace is ignored and padding is optional.
- integer parsing reads a leading signed run of digits and ignores the rest.
"""

from __future__ import annotations

import base64
import binascii
import re

from csv_b64_decoder.models import CellDecoded, CellOutcome, CellUnchanged

_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]+")
_BASE64_ALPHABET = re.compile(r"[A-Za-z0-9+/]*")
_INT_PREFIX = re.compile(r"[+-]?[0-9]+")
# parseInt whitespace within the Latin-1 range.
_JS_WHITESPACE = "\t\n\v\f\r \xa0"


class CellDecodeFailure(ValueError):
    """A cell could not be turned into an integer."""


def b64decode_forgiving(text: str) -> bytes:
    """Decode base64 the way ``atob`` does; raise ``ValueError`` when it would throw."""

    data = _ASCII_WHITESPACE.sub("", text)
    if len(data) % 4 == 0:
        if data.endswith("=="):
            data = data[:-2]
        elif data.endswith("="):
            data = data[:-1]
    if len(data) % 4 == 1:
        raise ValueError("invalid base64 length")
    if not _BASE64_ALPHABET.fullmatch(data):
        raise ValueError("invalid base64 character")

    padded = data + "=" * (-len(data) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except binascii.Error as exc:  # pragma: no cover - rejected above
        raise ValueError(str(exc)) from exc


def parse_int_prefix(text: str) -> int | None:
    """Parse a base-10 integer prefix; ``None`` where ``parseInt`` yields NaN."""

    match = _INT_PREFIX.match(text.lstrip(_JS_WHITESPACE))
    if match is None:
        return None
    return int(match.group(0))


def decode_base64_int(text: str) -> int:
    """Decode a trimmed base64 cell into an integer."""

    try:
        raw = b64decode_forgiving(text.strip())
    except ValueError as exc:
        raise CellDecodeFailure(f"base64 decode error: {exc}") from exc

    # atob yields one character per byte.
    decoded = raw.decode("latin-1")
    value = parse_int_prefix(decoded)
    if value is None:
        raise CellDecodeFailure(f"decoded text is not an integer: {decoded[:40]!r}")
    return value


def decode_cell(text: str, *, row_number: int, column: str) -> CellOutcome:
    try:
        value = decode_base64_int(text)
    except CellDecodeFailure as exc:
        return CellUnchanged(row_number=row_number, column=column, original=text, reason=str(exc))
    return CellDecoded(row_number=row_number, column=column, original=text, value=value)


__all__ = [
    "CellDecodeFailure",
    "b64decode_forgiving",
    "decode_base64_int",
    "decode_cell",
    "parse_int_prefix",
]
