from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from csv_b64_decoder.cli import app

runner = CliRunner()


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "data.csv"
    path.write_text(content, encoding="utf-8", newline="")
    return path


def test_run_command_happy_path(tmp_path: Path) -> None:
    source = _write(tmp_path, "id,val\n1,MTAw\n")

    result = runner.invoke(app, ["run", str(source), "val"])

    assert result.exit_code == 0
    assert f"Output: {tmp_path / 'data_opts.csv'}" in result.stdout
    assert "Processed columns: val" in result.stdout
    assert "Processed rows: 1" in result.stdout
    assert (tmp_path / "data_opts.csv").read_text(encoding="utf-8") == "id,val\n1,100\n"


def test_run_command_json_summary(tmp_path: Path) -> None:
    source = _write(tmp_path, "a,b\n1,aGVsbG8=\n")

    result = runner.invoke(app, ["run", str(source), "b", "missing", "--format", "json", "--quiet", "--log-format", "ndjson"])

    assert result.exit_code == 0
    summary_line = next(line for line in result.stdout.splitlines() if line.startswith('{"output_file"'))
    payload = json.loads(summary_line)
    assert payload["processed_columns"] == ["b"]
    assert payload["missing_columns"] == ["missing"]
    assert payload["processed_rows"] == 1
    assert payload["warnings"][0]["row"] == 2


def test_run_command_requires_path_and_column(tmp_path: Path) -> None:
    source = _write(tmp_path, "id,val\n1,MTAw\n")

    for args in (["run"], ["run", str(source)]):
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "Usage: csv-b64-decoder run" in result.output

    assert not (tmp_path / "data_opts.csv").exists()


def test_run_command_reports_processing_errors(tmp_path: Path) -> None:
    source = _write(tmp_path, "id,val\n1,MTAw\n")

    result = runner.invoke(app, ["run", str(source), "nope"])

    assert result.exit_code == 1
    assert "Error: CSV processing error: None of the requested columns were found" in result.output
    assert not (tmp_path / "data_opts.csv").exists()


def test_run_command_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", str(tmp_path / "missing.csv"), "val"])

    assert result.exit_code == 1
    assert "Source file not found" in result.output


def test_run_command_fail_policy(tmp_path: Path) -> None:
    source = _write(tmp_path, "id,val\n1,aGVsbG8=\n")

    result = runner.invoke(app, ["run", str(source), "val", "--on-decode-error", "fail"])

    assert result.exit_code == 1
    assert 'Row 2, column "val"' in result.output


def test_run_command_rejects_bad_options(tmp_path: Path) -> None:
    source = _write(tmp_path, "id,val\n1,MTAw\n")

    result = runner.invoke(app, ["run", str(source), "val", "--encoding", "nope-8"])
    assert result.exit_code == 1
    assert "Unknown encoding" in result.output

    result = runner.invoke(app, ["run", str(source), "val", "--log-level", "loud"])
    assert result.exit_code == 1
    assert "Invalid log level" in result.output


def test_run_command_reads_settings_from_env(tmp_path: Path, monkeypatch) -> None:
    source = _write(tmp_path, "id,val\n1,MTAw\n")
    monkeypatch.setenv("CSV_B64_DECODER_OUTPUT_SUFFIX", "_decoded")

    result = runner.invoke(app, ["run", str(source), "val"])

    assert result.exit_code == 0
    assert (tmp_path / "data_decoded.csv").exists()
