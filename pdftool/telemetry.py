"""Logging setup, Prometheus metrics and per-operation spans."""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import IO, Any, Iterator

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

from .core.utils import ROOT_LOGGER, get_logger
from .exceptions import ErrorCategory, PdfToolError

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys() | {"message", "asctime", "taskName"}
)


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "info", fmt: str = "json", stream: IO[str] | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``pdftool`` logger hierarchy."""

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_LEVELS.get(level.lower(), logging.INFO))
    logger.propagate = False
    return logger


class OperationMetrics:
    """Prometheus collectors for pipeline operations.

    Each instance owns its registry so several engines (or test apps) can
    coexist in one process.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.operations_total = Counter(
            "pdftool_operations_total",
            "PDF operations handled, by outcome",
            ["operation", "outcome"],
            registry=self.registry,
        )
        self.operation_seconds = Histogram(
            "pdftool_operation_duration_seconds",
            "Wall-clock duration of PDF operations",
            ["operation"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120),
            registry=self.registry,
        )
        self.input_bytes_total = Counter(
            "pdftool_input_bytes_total",
            "Bytes of PDF input accepted per operation",
            ["operation"],
            registry=self.registry,
        )

    def record(self, operation: str, outcome: str, seconds: float, input_bytes: int = 0) -> None:
        self.operations_total.labels(operation=operation, outcome=outcome).inc()
        self.operation_seconds.labels(operation=operation).observe(seconds)
        if input_bytes:
            self.input_bytes_total.labels(operation=operation).inc(input_bytes)

    def exposition(self) -> tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


def _log_failure(logger: logging.Logger, exc: PdfToolError, operation: str, elapsed: float) -> None:
    extra = {"operation": operation, "code": exc.code.value, "duration_ms": round(elapsed * 1000, 2)}
    if exc.category is ErrorCategory.INPUT:
        logger.warning("Rejected %s: %s", operation, exc, extra=extra)
    elif exc.category is ErrorCategory.NOT_IMPLEMENTED:
        logger.info("Unimplemented operation %s requested", operation, extra=extra)
    else:
        logger.error("Operation %s failed: %s", operation, exc, extra=extra)


@contextmanager
def observe_operation(
    operation: str,
    *,
    metrics: OperationMetrics | None = None,
    logger: logging.Logger | None = None,
    input_bytes: int = 0,
) -> Iterator[dict[str, Any]]:
    """Time one operation, log its outcome and record metrics.

    The yielded dict collects extra fields to log on success.
    """

    logger = logger or get_logger("pdftool.operations")
    fields: dict[str, Any] = {}
    start = time.perf_counter()
    logger.debug("Starting %s", operation, extra={"operation": operation, "input_bytes": input_bytes})
    outcome = "success"
    try:
        yield fields
    except PdfToolError as exc:
        outcome = exc.code.value
        _log_failure(logger, exc, operation, time.perf_counter() - start)
        raise
    except Exception:
        outcome = "INTERNAL_ERROR"
        logger.exception("Operation %s crashed", operation, extra={"operation": operation})
        raise
    finally:
        elapsed = time.perf_counter() - start
        if metrics is not None:
            metrics.record(operation, outcome, elapsed, input_bytes)
    logger.info(
        "Completed %s",
        operation,
        extra={"operation": operation, "duration_ms": round(elapsed * 1000, 2), **fields},
    )


__all__ = ["JsonFormatter", "OperationMetrics", "configure_logging", "observe_operation"]
