from __future__ import annotations

import base64

import pytest

from csv_b64_decoder.codec import (
    CellDecodeFailure,
    b64decode_forgiving,
    decode_base64_int,
    decode_cell,
    parse_int_prefix,
)
from csv_b64_decoder.models import CellDecoded, CellUnchanged


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("latin-1")).decode("ascii")


@pytest.mark.parametrize("value", [0, 7, 100, -42, 2**31, -(2**63), 10**40])
def test_decode_base64_int_round_trips_integers(value: int) -> None:
    assert decode_base64_int(_b64(str(value))) == value


def test_decode_base64_int_trims_cell_whitespace() -> None:
    assert decode_base64_int("  MTAw \t") == 100


def test_forgiving_base64_accepts_missing_padding_and_inner_whitespace() -> None:
    assert b64decode_forgiving("MTI") == b"12"
    assert b64decode_forgiving("MT I=") == b"12"
    assert b64decode_forgiving("aGVsbG8") == b"hello"


@pytest.mark.parametrize("text", ["a", "abcde", "ab!c", "a===", "ab=c"])
def test_forgiving_base64_rejects_invalid_input(text: str) -> None:
    with pytest.raises(ValueError):
        b64decode_forgiving(text)


def test_parse_int_prefix_follows_parse_int() -> None:
    assert parse_int_prefix("  12abc") == 12
    assert parse_int_prefix("+5") == 5
    assert parse_int_prefix("-0") == 0
    assert parse_int_prefix("007") == 7
    assert parse_int_prefix("3.9") == 3
    assert parse_int_prefix("abc") is None
    assert parse_int_prefix("") is None
    assert parse_int_prefix("-") is None


def test_parse_int_prefix_skips_only_js_whitespace() -> None:
    assert parse_int_prefix("\xa05") == 5
    assert parse_int_prefix("\v\f5") == 5
    assert parse_int_prefix("\x1c5") is None
    assert parse_int_prefix("\x1f5") is None
    assert parse_int_prefix("\x855") is None


@pytest.mark.parametrize("cell", ["HDU=", "hTU="])
def test_decode_base64_int_rejects_control_separators(cell: str) -> None:
    with pytest.raises(CellDecodeFailure, match="not an integer"):
        decode_base64_int(cell)


def test_decode_base64_int_rejects_non_numeric_text() -> None:
    with pytest.raises(CellDecodeFailure, match="not an integer"):
        decode_base64_int("aGVsbG8=")


def test_decode_base64_int_rejects_bad_base64() -> None:
    with pytest.raises(CellDecodeFailure, match="base64"):
        decode_base64_int("%%%")


def test_decode_cell_returns_tagged_outcomes() -> None:
    ok = decode_cell("MTAw", row_number=2, column="val")
    assert ok == CellDecoded(row_number=2, column="val", original="MTAw", value=100)

    bad = decode_cell("aGVsbG8=", row_number=3, column="val")
    assert isinstance(bad, CellUnchanged)
    assert bad.original == "aGVsbG8="
    assert bad.row_number == 3
