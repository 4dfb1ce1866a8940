"""Utilities shared by pdftool modules."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "pdftool"


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``pdftool`` hierarchy.

    Handlers are attached once to the hierarchy root by
    :func:`pdftool.telemetry.configure_logging`.
    """

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def resolve_path(path: str | Path | None) -> Path:
    if path is None:
        raise ValueError("Path must not be None")
    return Path(path).expanduser().resolve()


def human_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            break
    return f"{value:.1f} {unit}"
