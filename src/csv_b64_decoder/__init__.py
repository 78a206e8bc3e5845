"""Public API for :mod:`csv_b64_decoder`."""

from importlib import metadata
from pathlib import Path
from typing import TYPE_CHECKING
import tomllib

if TYPE_CHECKING:
    from csv_b64_decoder.decoder import CsvBase64Decoder, decode
    from csv_b64_decoder.exceptions import (
        CellDecodeError,
        CsvDecoderError,
        EmptyInputError,
        FileAccessError,
        MalformedCsvError,
        NoColumnsFoundError,
        ProcessingError,
    )
    from csv_b64_decoder.models import CellDecoded, CellUnchanged, DecodeReport, DecoderOptions
    from csv_b64_decoder.settings import Settings


def _pyproject_version() -> str | None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        parsed = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        version = parsed.get("project", {}).get("version")
        if isinstance(version, str) and version:
            return version
    except (FileNotFoundError, OSError, tomllib.TOMLDecodeError):
        return None
    return None


def _resolve_version() -> str:
    # Prefer the local pyproject when running from a source checkout/editable install.
    version = _pyproject_version()
    if version is not None:
        return version

    try:
        return metadata.version("csv-b64-decoder")
    except metadata.PackageNotFoundError:  # pragma: no cover
        return "unknown"


__version__ = _resolve_version()

_EXPORTS = {
    "CsvBase64Decoder": ("csv_b64_decoder.decoder", "CsvBase64Decoder"),
    "decode": ("csv_b64_decoder.decoder", "decode"),
    "DecoderOptions": ("csv_b64_decoder.models", "DecoderOptions"),
    "DecodeReport": ("csv_b64_decoder.models", "DecodeReport"),
    "CellDecoded": ("csv_b64_decoder.models", "CellDecoded"),
    "CellUnchanged": ("csv_b64_decoder.models", "CellUnchanged"),
    "Settings": ("csv_b64_decoder.settings", "Settings"),
    "CsvDecoderError": ("csv_b64_decoder.exceptions", "CsvDecoderError"),
    "FileAccessError": ("csv_b64_decoder.exceptions", "FileAccessError"),
    "EmptyInputError": ("csv_b64_decoder.exceptions", "EmptyInputError"),
    "MalformedCsvError": ("csv_b64_decoder.exceptions", "MalformedCsvError"),
    "CellDecodeError": ("csv_b64_decoder.exceptions", "CellDecodeError"),
    "NoColumnsFoundError": ("csv_b64_decoder.exceptions", "NoColumnsFoundError"),
    "ProcessingError": ("csv_b64_decoder.exceptions", "ProcessingError"),
}


def __getattr__(name: str):
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = __import__(module_name, fromlist=[attr_name])
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))


__all__ = [
    "CellDecodeError",
    "CellDecoded",
    "CellUnchanged",
    "CsvBase64Decoder",
    "CsvDecoderError",
    "DecodeReport",
    "DecoderOptions",
    "EmptyInputError",
    "FileAccessError",
    "MalformedCsvError",
    "NoColumnsFoundError",
    "ProcessingError",
    "Settings",
    "decode",
    "__version__",
]
