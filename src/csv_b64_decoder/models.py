"""Run-level types for the decoder.

- ``DecoderOptions`` is caller input, validated at construction.
- ``CellDecoded`` / ``CellUnchanged`` are the tagged outcome of one cell.
- ``DecodeReport`` is what :meth:`CsvBase64Decoder.process` returns.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Stage(str, Enum):
    """Working stages of a run, entered in declaration order.

    The idle, done and failed states are implied: a run is idle until
    ``process()`` is called, done when it returns a report, and failed when it
    raises. ``ProcessingError.stage`` names the stage that was active at the
    time of failure.
    """

    VALIDATING = "validating"
    READING = "reading"
    PARSING = "parsing"
    RESOLVING_COLUMNS = "resolving_columns"
    TRANSFORMING = "transforming"
    WRITING = "writing"


class DecoderOptions(BaseModel):
    """Inputs and options for a single decoder run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_path: Path
    column_names: list[str] = Field(min_length=1)
    encoding: str = "utf-8"
    output_suffix: str = Field(default="_opts", min_length=1)
    on_decode_error: Literal["keep", "fail"] = "keep"

    @field_validator("encoding")
    @classmethod
    def _ensure_known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {v}") from exc
        return v


@dataclass(frozen=True)
class CellDecoded:
    row_number: int
    column: str
    original: str
    value: int


@dataclass(frozen=True)
class CellUnchanged:
    """An undecodable cell that was kept as-is."""

    row_number: int
    column: str
    original: str
    reason: str


CellOutcome = Union[CellDecoded, CellUnchanged]


@dataclass(frozen=True)
class DecodeReport:
    """Outcome summary for a run."""

    output_path: Path
    processed_columns: list[str]
    processed_rows: int
    missing_columns: list[str] = field(default_factory=list)
    outcomes: list[CellOutcome] = field(default_factory=list)

    @property
    def decoded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, CellDecoded))

    @property
    def warnings(self) -> list[CellUnchanged]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, CellUnchanged)]


__all__ = [
    "CellDecoded",
    "CellOutcome",
    "CellUnchanged",
    "DecodeReport",
    "DecoderOptions",
    "Stage",
]
