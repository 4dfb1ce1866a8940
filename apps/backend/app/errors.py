"""Translate pipeline errors into JSON responses with stable codes."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pdftool.core.utils import get_logger
from pdftool.exceptions import (
    ErrorCategory,
    ErrorCode,
    OperationCancelledError,
    OperationTimeoutError,
    PdfToolError,
)

LOGGER = get_logger("pdftool.http")

# nginx convention for a request abandoned before completion.
CLIENT_CLOSED_REQUEST = 499

STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.INPUT: 400,
    ErrorCategory.RESOURCE: 500,
    ErrorCategory.TRANSFORM: 500,
    ErrorCategory.NOT_IMPLEMENTED: 501,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.CONFIGURATION: 500,
}


def status_for(exc: PdfToolError) -> int:
    if isinstance(exc, OperationCancelledError):
        return CLIENT_CLOSED_REQUEST
    if isinstance(exc, OperationTimeoutError):
        return 504
    return STATUS_BY_CATEGORY.get(exc.category, 500)


def error_response(status_code: int, message: str, code: ErrorCode) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code.value})


async def handle_pdftool_error(request: Request, exc: PdfToolError) -> JSONResponse:
    status_code = status_for(exc)
    if exc.category is ErrorCategory.INPUT:
        LOGGER.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "query")
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    message = "Invalid request parameters: " + "; ".join(problems)
    return error_response(400, message, ErrorCode.INVALID_PARAMETER)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", ErrorCode.INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PdfToolError, handle_pdftool_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = ["register_exception_handlers", "status_for", "STATUS_BY_CATEGORY"]
