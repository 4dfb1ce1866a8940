"""Per-operation scratch files and directories under a shared temp root.

Every resource gets a ``uuid4`` token in its name so concurrent operations
never collide, and every acquisition is a context manager so removal runs on
success, error and cancellation alike. Removal failures are logged and never
raised.
"""

from __future__ import annotations

import logging
import shutil
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..exceptions import ScratchAllocationError
from .utils import get_logger

LOGGER = get_logger("pdftool.scratch")


def unique_name(name_pattern: str) -> str:
    """Replace ``*`` in *name_pattern* with a random token.

    Patterns without ``*`` get the token appended before the suffix, so
    ``"output.pdf"`` becomes ``"output-<token>.pdf"``.
    """

    token = uuid.uuid4().hex
    if "*" in name_pattern:
        return name_pattern.replace("*", token, 1)
    path = Path(name_pattern)
    return f"{path.stem}-{token}{path.suffix}"


def _create_exclusive(path: Path, data: bytes | None) -> None:
    with path.open("xb") as handle:
        if data:
            handle.write(data)


@dataclass(frozen=True)
class ScratchFile:
    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class ScratchDirectory:
    path: Path

    def file(self, name_pattern: str) -> Path:
        """Reserve a uniquely named, empty file inside this directory."""

        destination = self.path / unique_name(name_pattern)
        _create_exclusive(destination, None)
        return destination

    def write(self, data: bytes, name_pattern: str) -> Path:
        destination = self.path / unique_name(name_pattern)
        _create_exclusive(destination, data)
        return destination

    def files(self) -> list[Path]:
        return sorted(child for child in self.path.iterdir() if child.is_file())


class ScratchSpace:
    """Hands out scoped scratch resources rooted at one directory."""

    def __init__(self, root: str | Path, logger: logging.Logger | None = None) -> None:
        self.root = Path(root)
        self.logger = logger or LOGGER

    def _ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ScratchAllocationError(
                f"Cannot create temp directory {self.root}: {exc.strerror or exc}"
            ) from exc

    @contextmanager
    def acquire_file(self, data: bytes | None = None, name_pattern: str = "*.pdf") -> Iterator[ScratchFile]:
        """Write *data* to a fresh scratch file and remove it on exit.

        With ``data=None`` the file is created empty, reserving the name for
        an output written later by a tool.
        """

        self._ensure_root()
        path = self.root / unique_name(name_pattern)
        try:
            _create_exclusive(path, data)
        except FileExistsError as exc:
            # The existing file belongs to another holder.
            raise ScratchAllocationError(f"Scratch name collision on {path.name}") from exc
        except OSError as exc:
            self._remove_file(path)
            raise ScratchAllocationError(f"Cannot create scratch file {path.name}: {exc}") from exc
        self.logger.debug("Acquired scratch file %s", path)
        try:
            yield ScratchFile(path)
        finally:
            self._remove_file(path)

    @contextmanager
    def acquire_directory(self, name_pattern: str = "work-*") -> Iterator[ScratchDirectory]:
        self._ensure_root()
        path = self.root / unique_name(name_pattern)
        try:
            path.mkdir()
        except OSError as exc:
            raise ScratchAllocationError(f"Cannot create scratch directory {path.name}: {exc}") from exc
        self.logger.debug("Acquired scratch directory %s", path)
        try:
            yield ScratchDirectory(path)
        finally:
            self._remove_directory(path)

    def residue(self) -> list[Path]:
        """List everything currently left under the root."""

        if not self.root.exists():
            return []
        return sorted(self.root.iterdir())

    def is_writable(self) -> bool:
        try:
            with self.acquire_file(b"", "ready-*"):
                return True
        except ScratchAllocationError:
            return False

    def _remove_file(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            self.logger.warning("Failed to remove scratch file %s: %s", path, exc)

    def _remove_directory(self, path: Path) -> None:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            self.logger.warning("Failed to remove scratch directory %s: %s", path, exc)


__all__ = ["ScratchFile", "ScratchDirectory", "ScratchSpace", "unique_name"]
