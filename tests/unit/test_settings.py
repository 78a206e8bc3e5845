from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from csv_b64_decoder.settings import Settings


def test_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.encoding == "utf-8"
    assert settings.output_suffix == "_opts"
    assert settings.on_decode_error == "keep"
    assert settings.log_format == "text"
    assert settings.log_level == logging.INFO


def test_env_overrides_toml(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "settings.toml").write_text(
        '[csv_b64_decoder]\noutput_suffix = "_toml"\non_decode_error = "fail"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("CSV_B64_DECODER_OUTPUT_SUFFIX", "_env")
    monkeypatch.setenv("CSV_B64_DECODER_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.output_suffix == "_env"
    assert settings.on_decode_error == "fail"
    assert settings.log_level == logging.DEBUG


def test_invalid_values_are_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        Settings(encoding="nope-8")
    with pytest.raises(ValidationError):
        Settings(output_suffix="")
    with pytest.raises(ValidationError):
        Settings(log_level="loud")
