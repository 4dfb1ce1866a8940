from __future__ import annotations

import json
from pathlib import Path

import pytest

from pdftool.cli.main import main

from conftest import page_count


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "pdf-tool.yaml"
    path.write_text(f"temp_dir: {tmp_path / 'scratch'}\nlog_level: error\n", encoding="utf-8")
    return path


def _save(tmp_path: Path, name: str, data: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


def test_merge_command(tmp_path: Path, config_file: Path, pdf_factory) -> None:
    first = _save(tmp_path, "a.pdf", pdf_factory(2))
    second = _save(tmp_path, "b.pdf", pdf_factory(3))
    output = tmp_path / "out" / "merged.pdf"

    exit_code = main(["--config", str(config_file), "merge", str(first), str(second), str(output)])

    assert exit_code == 0
    assert page_count(output.read_bytes()) == 5


def test_split_command_writes_numbered_files(tmp_path: Path, config_file: Path, sample_pdf: bytes) -> None:
    source = _save(tmp_path, "report.pdf", sample_pdf)
    output_dir = tmp_path / "parts"

    assert main(["--config", str(config_file), "split", str(source), str(output_dir), "--pages", "1-2,3-5"]) == 0

    assert sorted(path.name for path in output_dir.iterdir()) == ["report_1.pdf", "report_2.pdf"]


def test_metadata_command_prints_json(
    tmp_path: Path, config_file: Path, sample_pdf: bytes, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _save(tmp_path, "doc.pdf", sample_pdf)

    assert main(["--config", str(config_file), "metadata", str(source)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["title"] == "Sample"
    assert payload["page_count"] == 5


def test_invalid_input_reports_error_code(
    tmp_path: Path, config_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _save(tmp_path, "image.gif", b"GIF89a")

    assert main(["--config", str(config_file), "text", str(source)]) == 1

    assert "INVALID_FORMAT" in capsys.readouterr().err


def test_missing_file_is_reported(tmp_path: Path, config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(config_file), "metadata", str(tmp_path / "absent.pdf")]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_invalid_config_file_fails(tmp_path: Path, sample_pdf: bytes, capsys: pytest.CaptureFixture[str]) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("max_pages: -5\n", encoding="utf-8")
    source = _save(tmp_path, "doc.pdf", sample_pdf)

    assert main(["--config", str(bad), "metadata", str(source)]) == 1
    assert "INVALID_CONFIG" in capsys.readouterr().err


def test_compress_command_reports_savings(
    tmp_path: Path, config_file: Path, compressible_pdf: bytes, capsys: pytest.CaptureFixture[str], monkeypatch
) -> None:
    monkeypatch.setattr("pdftool.tools.compressor.compress.detect_backend", lambda: None)
    source = _save(tmp_path, "big.pdf", compressible_pdf)
    output = tmp_path / "small.pdf"

    assert main(["--config", str(config_file), "compress", str(source), str(output), "--level", "2"]) == 0

    line = capsys.readouterr().out.strip()
    assert " -> " in line and "saved" in line
    assert page_count(output.read_bytes()) == 4


def test_serve_builds_the_app_from_the_given_config(tmp_path: Path, config_file: Path, monkeypatch) -> None:
    served: dict = {}

    def fake_run(app, **kwargs):
        served["app"] = app
        served.update(kwargs)

    monkeypatch.setattr("pdftool.cli.commands.serve.uvicorn.run", fake_run)

    assert main(["--config", str(config_file), "serve", "--port", "9001"]) == 0

    assert served["port"] == 9001
    assert served["app"].state.config.temp_dir == tmp_path / "scratch"
    assert served["log_level"] == "error"
