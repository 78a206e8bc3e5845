"""Decoder error hierarchy."""

from __future__ import annotations


class CsvDecoderError(Exception):
    """Base class for decoder-specific exceptions."""


class FileAccessError(CsvDecoderError):
    """Raised when the input cannot be found or read, or the output cannot be written."""


class EmptyInputError(CsvDecoderError):
    """Raised when the parsed document has no rows."""


class MalformedCsvError(CsvDecoderError):
    """Raised when the input text cannot be parsed as CSV."""


class NoColumnsFoundError(CsvDecoderError):
    """Raised when none of the requested columns exist in the header row."""


class CellDecodeError(CsvDecoderError):
    """Raised for an undecodable cell when the failure policy is ``fail``."""

    def __init__(self, message: str, *, row_number: int, column: str) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.column = column


class ProcessingError(CsvDecoderError):
    """Wraps any fatal failure surfaced by :meth:`CsvBase64Decoder.process`."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


__all__ = [
    "CsvDecoderError",
    "FileAccessError",
    "EmptyInputError",
    "MalformedCsvError",
    "NoColumnsFoundError",
    "CellDecodeError",
    "ProcessingError",
]
