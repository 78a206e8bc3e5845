"""Output path planning."""
from __future__ import annotations

from pathlib import Path

DEFAULT_OUTPUT_SUFFIX = "_opts"


def derive_output_path(input_path: Path, *, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> Path:
    """Return ``<input_dir>/<input_stem><suffix>.csv``.

    Only an exact trailing ``.csv`` is stripped, so ``data.txt`` becomes
    ``data.txt_opts.csv``.
    """

    input_path = Path(input_path)
    name = input_path.name
    if name.endswith(".csv") and name != ".csv":
        name = name[: -len(".csv")]
    return input_path.parent / f"{name}{suffix}.csv"


__all__ = ["DEFAULT_OUTPUT_SUFFIX", "derive_output_path"]
