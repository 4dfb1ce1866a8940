"""External qpdf backend used by the highest compression level."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ...core.utils import get_logger
from ...exceptions import CompressionError

LOGGER = get_logger("pdftool.compress")

QPDF_EXECUTABLES = ("qpdf",)


@dataclass(frozen=True)
class Backend:
    """An optimization backend and its resolved executable."""

    name: str
    executable: str


def detect_backend() -> Backend | None:
    for candidate in QPDF_EXECUTABLES:
        executable = shutil.which(candidate)
        if executable:
            return Backend("qpdf", executable)
    return None


def build_qpdf_command(executable: str, source: Path, output: Path) -> list[str]:
    """Lossless rewrite: object streams, recompressed flate, unreferenced objects dropped."""

    return [
        executable,
        "--object-streams=generate",
        "--stream-data=compress",
        "--recompress-flate",
        "--compression-level=9",
        "--remove-unreferenced-resources=yes",
        str(source),
        str(output),
    ]


def run_backend(backend: Backend, source: Path, output: Path, timeout: float | None = None) -> None:
    command = build_qpdf_command(backend.executable, source, output)
    LOGGER.info("Running %s backend for compression", backend.name)
    try:
        completed = subprocess.run(command, capture_output=True, check=False, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise CompressionError(f"{backend.name} failed to run: {exc}", operation="compress") from exc
    # qpdf exits with 3 when it succeeded with warnings.
    if completed.returncode not in (0, 3):
        stderr = completed.stderr.decode("utf-8", "replace").strip()
        raise CompressionError(
            f"{backend.name} exited with status {completed.returncode}: {stderr}",
            operation="compress",
        )
