"""Settings for csv_b64_decoder using pydantic-settings.

Loaded from (in precedence order):
init kwargs > env vars > .env file > settings.toml > defaults.
"""
from __future__ import annotations

import codecs
import logging
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from ``settings.toml`` if present.

    Accepts either top-level keys or a nested ``[csv_b64_decoder]`` table.
    """

    path = Path("settings.toml")
    if not path.exists():
        return {}

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}

    nested = data.get("csv_b64_decoder")
    if isinstance(nested, dict):
        return nested
    return data


class Settings(BaseSettings):
    """Runtime defaults for the decoder CLI.

    Override via init kwargs, environment variables (``CSV_B64_DECODER_*``),
    a ``.env`` file, or an optional ``settings.toml``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CSV_B64_DECODER_",
        env_file=".env",
        extra="ignore",
    )

    encoding: str = Field(default="utf-8", description="Text encoding used to read and write CSV files.")
    output_suffix: str = Field(
        default="_opts",
        description="Appended to the input stem to build the output file name.",
    )
    on_decode_error: Literal["keep", "fail"] = Field(
        default="keep",
        description="'keep' leaves undecodable cells unchanged with a warning; 'fail' aborts the run.",
    )

    # Logging
    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.INFO)

    @field_validator("encoding")
    @classmethod
    def _ensure_known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {v}") from exc
        return v

    @field_validator("output_suffix")
    @classmethod
    def _ensure_suffix_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("output_suffix must be non-empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_level_name(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip().isdigit():
            resolved = logging.getLevelNamesMapping().get(v.strip().upper())
            if resolved is None:
                raise ValueError(f"Invalid log level: {v}")
            return resolved
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):  # type: ignore[override]
        toml_source = lambda: _toml_settings_source()
        # Precedence: init > env vars > .env > TOML > defaults
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            toml_source,
            file_secret_settings,
        )


__all__ = ["Settings"]
