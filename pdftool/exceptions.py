"""Error taxonomy shared by the :mod:`pdftool` pipeline.

Every error carries a stable :class:`ErrorCode` so the HTTP layer can map it
to a status without inspecting messages, and an :class:`ErrorCategory` that
decides how loudly it is logged.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes exposed to callers."""

    # Input errors
    EMPTY_INPUT = "EMPTY_INPUT"
    TOO_LARGE = "TOO_LARGE"
    INVALID_FORMAT = "INVALID_FORMAT"
    TOO_MANY_PAGES = "TOO_MANY_PAGES"
    INSUFFICIENT_INPUT = "INSUFFICIENT_INPUT"
    INVALID_PARAMETER = "INVALID_PARAMETER"

    # Resource errors
    SCRATCH_ALLOCATION_FAILED = "SCRATCH_ALLOCATION_FAILED"

    # Transformation errors
    MERGE_FAILED = "MERGE_FAILED"
    SPLIT_FAILED = "SPLIT_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    METADATA_READ_FAILED = "METADATA_READ_FAILED"
    COMPRESSION_FAILED = "COMPRESSION_FAILED"
    WATERMARK_FAILED = "WATERMARK_FAILED"
    CONVERSION_FAILED = "CONVERSION_FAILED"

    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"

    INVALID_CONFIG = "INVALID_CONFIG"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorCategory(str, Enum):
    INPUT = "input"
    RESOURCE = "resource"
    TRANSFORM = "transform"
    NOT_IMPLEMENTED = "not_implemented"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"


class PdfToolError(Exception):
    """Base class for every error raised by the pipeline."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    category: ErrorCategory = ErrorCategory.TRANSFORM

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message

    def to_dict(self) -> dict[str, str]:
        return {"error": str(self), "code": self.code.value}


class ConfigurationError(PdfToolError):
    """Raised when configuration values fail validation at startup."""

    code = ErrorCode.INVALID_CONFIG
    category = ErrorCategory.CONFIGURATION


class InputError(PdfToolError):
    """Raised for client mistakes; never retried, never logged as errors."""

    category = ErrorCategory.INPUT


class EmptyInputError(InputError):
    code = ErrorCode.EMPTY_INPUT


class FileTooLargeError(InputError):
    code = ErrorCode.TOO_LARGE


class InvalidFormatError(InputError):
    code = ErrorCode.INVALID_FORMAT


class TooManyPagesError(InputError):
    code = ErrorCode.TOO_MANY_PAGES


class InsufficientInputError(InputError):
    code = ErrorCode.INSUFFICIENT_INPUT


class InvalidParameterError(InputError):
    code = ErrorCode.INVALID_PARAMETER


class ResourceError(PdfToolError):
    category = ErrorCategory.RESOURCE


class ScratchAllocationError(ResourceError):
    code = ErrorCode.SCRATCH_ALLOCATION_FAILED


class TransformError(PdfToolError):
    """Raised when a transformation library fails on the supplied document."""

    category = ErrorCategory.TRANSFORM


class MergeError(TransformError):
    code = ErrorCode.MERGE_FAILED


class SplitError(TransformError):
    code = ErrorCode.SPLIT_FAILED


class ExtractionError(TransformError):
    code = ErrorCode.EXTRACTION_FAILED


class MetadataReadError(TransformError):
    code = ErrorCode.METADATA_READ_FAILED


class CompressionError(TransformError):
    code = ErrorCode.COMPRESSION_FAILED


class WatermarkError(TransformError):
    code = ErrorCode.WATERMARK_FAILED


class ConversionError(TransformError):
    code = ErrorCode.CONVERSION_FAILED


class OperationNotImplementedError(PdfToolError):
    """Raised by operations that are part of the contract but not available yet."""

    code = ErrorCode.NOT_IMPLEMENTED
    category = ErrorCategory.NOT_IMPLEMENTED


class OperationTimeoutError(PdfToolError):
    code = ErrorCode.TIMEOUT
    category = ErrorCategory.TIMEOUT


class OperationCancelledError(PdfToolError):
    code = ErrorCode.CANCELLED
    category = ErrorCategory.TIMEOUT


__all__ = [
    "ErrorCode",
    "ErrorCategory",
    "PdfToolError",
    "ConfigurationError",
    "InputError",
    "EmptyInputError",
    "FileTooLargeError",
    "InvalidFormatError",
    "TooManyPagesError",
    "InsufficientInputError",
    "InvalidParameterError",
    "ResourceError",
    "ScratchAllocationError",
    "TransformError",
    "MergeError",
    "SplitError",
    "ExtractionError",
    "MetadataReadError",
    "CompressionError",
    "WatermarkError",
    "ConversionError",
    "OperationNotImplementedError",
    "OperationTimeoutError",
    "OperationCancelledError",
]
