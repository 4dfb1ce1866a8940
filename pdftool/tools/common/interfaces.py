"""Core interfaces and context objects shared by pdftool tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pypdf import PdfReader

from ...config import Config
from ...core.cancellation import CancellationToken
from ...core.utils import get_logger
from ...exceptions import PdfToolError, TransformError


@dataclass
class ToolContext:
    """Holds the execution state for one tool invocation.

    Tools only ever see scratch paths; reading uploads and writing results
    back is the engine's job.
    """

    settings: Config
    token: CancellationToken = field(default_factory=CancellationToken.none)
    input_path: Path | None = None
    output_path: Path | None = None
    inputs: list[Path] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    resources: dict[str, Any] = field(default_factory=dict)

    def require_input(self) -> Path:
        if self.input_path is None:
            raise ValueError("Tool requires an input_path")
        return self.input_path

    def require_output(self) -> Path:
        if self.output_path is None:
            raise ValueError("Tool requires an output_path")
        return self.output_path


class BaseTool:
    """Base class for all pluggable pdftool tools.

    Subclasses implement :meth:`execute`. :meth:`run` wraps any library
    failure into the tool's ``error_class`` so callers see a categorized
    error naming the operation, with the original exception chained.
    """

    name: str
    error_class: type[PdfToolError] = TransformError

    def __init__(self, context: ToolContext) -> None:
        self.context = context
        self.logger: logging.Logger = get_logger(f"pdftool.tools.{self.name}")

    def run(self) -> Any:
        try:
            return self.execute()
        except PdfToolError as exc:
            if exc.operation is None:
                exc.operation = self.name
            raise
        except Exception as exc:
            raise self.error_class(str(exc) or type(exc).__name__, operation=self.name) from exc

    def execute(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError

    def checkpoint(self, stage: str) -> None:
        self.context.token.check(f"{self.name} {stage}")

    def open_reader(self, path: Path) -> PdfReader:
        """Open *path*, trying the empty password on encrypted documents."""

        reader = PdfReader(str(path))
        if reader.is_encrypted:
            self.logger.debug("Attempting to decrypt encrypted PDF %s", path.name)
            if not reader.decrypt(""):
                raise self.error_class(
                    f"Unable to decrypt encrypted PDF: {path.name}", operation=self.name
                )
        return reader


def document_info(reader: PdfReader) -> dict[str, str]:
    """Return the info dictionary as plain strings, skipping empty entries."""

    info = reader.metadata
    if not info:
        return {}
    values: dict[str, str] = {}
    for key in list(info.keys()):
        value = info[key]
        if isinstance(key, str) and value is not None:
            values[key] = str(value)
    return values
