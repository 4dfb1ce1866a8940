from __future__ import annotations

import io
import json
import logging

import pytest

from pdftool.exceptions import InvalidFormatError, MergeError
from pdftool.telemetry import OperationMetrics, configure_logging, observe_operation


@pytest.fixture()
def stream():
    buffer = io.StringIO()
    configure_logging("debug", "json", stream=buffer)
    yield buffer
    configure_logging("info", "text")


def _records(buffer: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def test_json_lines_carry_extra_fields(stream: io.StringIO) -> None:
    logging.getLogger("pdftool.test").info("hello %s", "world", extra={"operation": "merge", "pages": 3})

    record = _records(stream)[-1]
    assert record["msg"] == "hello world"
    assert record["level"] == "info"
    assert record["logger"] == "pdftool.test"
    assert record["operation"] == "merge"
    assert record["pages"] == 3


def test_successful_operation_is_logged_and_counted(stream: io.StringIO) -> None:
    metrics = OperationMetrics()
    logger = logging.getLogger("pdftool.engine")

    with observe_operation("split", metrics=metrics, logger=logger, input_bytes=128) as fields:
        fields["count"] = 4

    completed = [record for record in _records(stream) if record["msg"] == "Completed split"]
    assert completed and completed[0]["count"] == 4
    assert "duration_ms" in completed[0]
    registry = metrics.registry
    assert registry.get_sample_value("pdftool_operations_total", {"operation": "split", "outcome": "success"}) == 1
    assert registry.get_sample_value("pdftool_input_bytes_total", {"operation": "split"}) == 128
    assert registry.get_sample_value("pdftool_operation_duration_seconds_count", {"operation": "split"}) == 1


def test_failures_are_counted_by_code_and_logged_by_category(stream: io.StringIO) -> None:
    metrics = OperationMetrics()
    logger = logging.getLogger("pdftool.engine")

    with pytest.raises(InvalidFormatError):
        with observe_operation("merge", metrics=metrics, logger=logger):
            raise InvalidFormatError("bad signature")
    with pytest.raises(MergeError):
        with observe_operation("merge", metrics=metrics, logger=logger):
            raise MergeError("broken xref", operation="merge")

    levels = {record["code"]: record["level"] for record in _records(stream) if "code" in record}
    assert levels == {"INVALID_FORMAT": "warning", "MERGE_FAILED": "error"}
    registry = metrics.registry
    assert registry.get_sample_value("pdftool_operations_total", {"operation": "merge", "outcome": "MERGE_FAILED"}) == 1


def test_exposition_uses_prometheus_text_format() -> None:
    metrics = OperationMetrics()
    metrics.record("compress", "success", 0.2)

    payload, content_type = metrics.exposition()

    assert content_type.startswith("text/plain")
    assert b'pdftool_operations_total{operation="compress",outcome="success"} 1.0' in payload
