from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from pdftool.exceptions import CompressionError
from pdftool.tools.compressor import compress, optimizers
from pdftool.tools.compressor.optimizers import Backend, build_qpdf_command, run_backend


def test_qpdf_command_is_lossless(tmp_path: Path) -> None:
    command = build_qpdf_command("/usr/bin/qpdf", tmp_path / "in.pdf", tmp_path / "out.pdf")

    assert command[0] == "/usr/bin/qpdf"
    assert command[-2:] == [str(tmp_path / "in.pdf"), str(tmp_path / "out.pdf")]
    assert "--object-streams=generate" in command
    assert not any("image" in option for option in command)


@pytest.mark.parametrize(("returncode", "fails"), [(0, False), (3, False), (2, True)])
def test_run_backend_exit_status(tmp_path: Path, monkeypatch, returncode: int, fails: bool) -> None:
    def fake_run(command, capture_output, check, timeout):
        return subprocess.CompletedProcess(command, returncode, b"", b"damaged xref")

    monkeypatch.setattr(optimizers.subprocess, "run", fake_run)
    backend = Backend("qpdf", "qpdf")

    if fails:
        with pytest.raises(CompressionError, match="status 2"):
            run_backend(backend, tmp_path / "in.pdf", tmp_path / "out.pdf")
    else:
        run_backend(backend, tmp_path / "in.pdf", tmp_path / "out.pdf")


def test_level_three_keeps_smaller_backend_output(engine, compressible_pdf: bytes, monkeypatch) -> None:
    calls: list[Path] = []

    def fake_backend(backend, source, output, timeout=None):
        calls.append(source)
        shutil.copyfile(source, output)

    monkeypatch.setattr(compress, "detect_backend", lambda: Backend("qpdf", "qpdf"))
    monkeypatch.setattr(compress, "run_backend", fake_backend)

    result = engine.compress(compressible_pdf, 3)

    assert len(calls) == 1
    assert result.page_count == 4
    assert result.compressed_size < result.original_size
    assert engine.scratch.residue() == []
