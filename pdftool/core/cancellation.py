"""Deadline and cancellation signal passed into every operation."""

from __future__ import annotations

import threading
import time

from ..exceptions import OperationCancelledError, OperationTimeoutError


class CancellationToken:
    """Carries an optional deadline and a cancel flag across threads.

    Operations call :meth:`check` at safe points (between pages, before and
    after each blocking library call). Cleanup is never skipped because
    scratch resources are released by their context managers while the
    raised error unwinds.
    """

    def __init__(self, timeout: float | None = None, *, operation: str | None = None) -> None:
        self._event = threading.Event()
        self.timeout = timeout
        self.operation = operation
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def none(cls) -> "CancellationToken":
        return cls(None)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self, stage: str | None = None) -> None:
        where = f" during {stage}" if stage else ""
        if self._event.is_set():
            raise OperationCancelledError(f"Operation cancelled{where}", operation=self.operation)
        if self.expired:
            raise OperationTimeoutError(
                f"Operation exceeded its {self.timeout:g}s deadline{where}",
                operation=self.operation,
            )


__all__ = ["CancellationToken"]
