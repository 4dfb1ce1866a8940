"""Request-scoped helpers shared by the PDF routes."""

from __future__ import annotations

from typing import Any, List, Sequence

from fastapi import Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from pdftool.config import Config
from pdftool.core.cancellation import CancellationToken
from pdftool.core.ranges import is_all, parse_page_spec
from pdftool.core.validator import count_pages, validate_blob
from pdftool.engine import TransformEngine
from pdftool.exceptions import FileTooLargeError, InsufficientInputError, InvalidParameterError
from pdftool.operations import OperationRequest

CHUNK_SIZE = 1024 * 1024


def get_engine(request: Request) -> TransformEngine:
    return request.app.state.engine


def get_config(request: Request) -> Config:
    return request.app.state.config


async def read_upload(upload: UploadFile, limit: int) -> bytes:
    """Read *upload* in chunks, stopping as soon as it exceeds *limit* bytes."""

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise FileTooLargeError(f"File '{upload.filename}' exceeds maximum {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_single(upload: UploadFile | None, config: Config) -> bytes:
    if upload is None:
        raise InvalidParameterError("PDF file required")
    return await read_upload(upload, config.max_file_size)


async def read_many(uploads: Sequence[UploadFile] | None, config: Config) -> List[bytes]:
    uploads = list(uploads or [])
    if len(uploads) < 2:
        raise InsufficientInputError("At least 2 PDFs required")
    return [await read_upload(upload, config.max_file_size) for upload in uploads]


def check_page_bounds(spec: str | None, blob: bytes) -> None:
    """Reject page selections that point past the end of the document."""

    if is_all(spec):
        return
    total = count_pages(blob)
    if total is not None:
        parse_page_spec(spec, total_pages=total)


async def run_operation(engine: TransformEngine, request: OperationRequest, *, pages: str | None = None) -> Any:
    """Check, validate and execute *request* on the worker pool.

    Parameter and validation errors surface here, before any scratch
    resource exists.
    """

    config = engine.config
    request.check(config)
    for blob in request.blobs():
        validate_blob(blob, config)
    if pages is not None:
        for blob in request.blobs():
            check_page_bounds(pages, blob)
    token = CancellationToken(config.operation_timeout, operation=request.operation.value)
    return await run_in_threadpool(engine.execute, request, token)


__all__ = ["get_engine", "get_config", "read_upload", "read_single", "read_many", "run_operation"]
