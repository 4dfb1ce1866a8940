"""The operation taxonomy: one request type per supported PDF task.

Each request checks its own preconditions with :meth:`check` so callers can
reject bad parameters before any scratch resource is allocated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union

from .config import Config
from .core.ranges import parse_page_spec
from .exceptions import InsufficientInputError, InvalidParameterError


class Operation(str, Enum):
    CONVERT_TO_IMAGE = "convert_to_image"
    MERGE = "merge"
    SPLIT = "split"
    EXTRACT_TEXT = "extract_text"
    EXTRACT_METADATA = "extract_metadata"
    COMPRESS = "compress"
    WATERMARK = "watermark"
    ROTATE = "rotate"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    BATCH_PROCESS = "batch_process"


IMPLEMENTED_OPERATIONS = frozenset(
    {
        Operation.CONVERT_TO_IMAGE,
        Operation.MERGE,
        Operation.SPLIT,
        Operation.EXTRACT_TEXT,
        Operation.EXTRACT_METADATA,
        Operation.COMPRESS,
        Operation.WATERMARK,
    }
)

# Pillow encoder names keyed by the format accepted from callers.
IMAGE_FORMATS: dict[str, str] = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG", "webp": "WEBP"}

COMPRESSION_LEVELS = (1, 2, 3)

DEFAULT_WATERMARK_TEXT = "CONFIDENTIAL"
DEFAULT_WATERMARK_OPACITY = 0.3
DEFAULT_WATERMARK_ROTATION = 45.0
DEFAULT_WATERMARK_FONT_SIZE = 48.0


def normalise_image_format(value: str) -> str:
    fmt = value.strip().lower()
    if fmt not in IMAGE_FORMATS:
        supported = ", ".join(sorted(IMAGE_FORMATS))
        raise InvalidParameterError(f"Unsupported image format {value!r}; expected one of {supported}")
    return "jpeg" if fmt == "jpg" else fmt


def check_watermark(text: str, opacity: float, font_size: float) -> None:
    if not text or not text.strip():
        raise InvalidParameterError("Watermark text must not be empty")
    if not 0 < opacity <= 1:
        raise InvalidParameterError("Watermark opacity must be in (0, 1]")
    if font_size <= 0:
        raise InvalidParameterError("Watermark font size must be positive")


def _check_pages(spec: str | None) -> None:
    parse_page_spec(spec)


@dataclass(frozen=True)
class ConvertToImageRequest:
    operation: ClassVar[Operation] = Operation.CONVERT_TO_IMAGE

    blob: bytes
    format: str = "png"
    dpi: int = 150
    pages: str | None = None

    def check(self, config: Config) -> None:
        normalise_image_format(self.format)
        if not 1 <= self.dpi <= config.max_dpi:
            raise InvalidParameterError(f"dpi must be between 1 and {config.max_dpi}")
        _check_pages(self.pages)

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class MergeRequest:
    operation: ClassVar[Operation] = Operation.MERGE

    documents: Sequence[bytes] = ()

    def check(self, config: Config) -> None:
        if len(self.documents) < 2:
            raise InsufficientInputError("At least 2 PDFs required")

    def blobs(self) -> Sequence[bytes]:
        return tuple(self.documents)


@dataclass(frozen=True)
class SplitRequest:
    operation: ClassVar[Operation] = Operation.SPLIT

    blob: bytes
    pages: str = "all"

    def check(self, config: Config) -> None:
        _check_pages(self.pages)

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class ExtractTextRequest:
    operation: ClassVar[Operation] = Operation.EXTRACT_TEXT

    blob: bytes
    use_ocr: bool = False

    def check(self, config: Config) -> None:
        return None

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class ExtractMetadataRequest:
    operation: ClassVar[Operation] = Operation.EXTRACT_METADATA

    blob: bytes

    def check(self, config: Config) -> None:
        return None

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class CompressRequest:
    operation: ClassVar[Operation] = Operation.COMPRESS

    blob: bytes
    level: int | None = None

    def check(self, config: Config) -> None:
        if self.level is not None and self.level not in COMPRESSION_LEVELS:
            raise InvalidParameterError("Compression level must be 1, 2 or 3")

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class WatermarkRequest:
    operation: ClassVar[Operation] = Operation.WATERMARK

    blob: bytes
    text: str = DEFAULT_WATERMARK_TEXT
    opacity: float = DEFAULT_WATERMARK_OPACITY
    rotation: float = DEFAULT_WATERMARK_ROTATION
    font_size: float = DEFAULT_WATERMARK_FONT_SIZE

    def check(self, config: Config) -> None:
        check_watermark(self.text, self.opacity, self.font_size)

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,)


@dataclass(frozen=True)
class _PlaceholderRequest:
    """Base for operations that are reserved but have no transform yet."""

    blob: bytes | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def check(self, config: Config) -> None:
        return None

    def blobs(self) -> Sequence[bytes]:
        return (self.blob,) if self.blob else ()


@dataclass(frozen=True)
class RotateRequest(_PlaceholderRequest):
    operation: ClassVar[Operation] = Operation.ROTATE


@dataclass(frozen=True)
class EncryptRequest(_PlaceholderRequest):
    operation: ClassVar[Operation] = Operation.ENCRYPT


@dataclass(frozen=True)
class DecryptRequest(_PlaceholderRequest):
    operation: ClassVar[Operation] = Operation.DECRYPT


@dataclass(frozen=True)
class BatchProcessRequest(_PlaceholderRequest):
    operation: ClassVar[Operation] = Operation.BATCH_PROCESS


OperationRequest = Union[
    ConvertToImageRequest,
    MergeRequest,
    SplitRequest,
    ExtractTextRequest,
    ExtractMetadataRequest,
    CompressRequest,
    WatermarkRequest,
    RotateRequest,
    EncryptRequest,
    DecryptRequest,
    BatchProcessRequest,
]


__all__ = [
    "Operation",
    "IMPLEMENTED_OPERATIONS",
    "IMAGE_FORMATS",
    "COMPRESSION_LEVELS",
    "OperationRequest",
    "ConvertToImageRequest",
    "MergeRequest",
    "SplitRequest",
    "ExtractTextRequest",
    "ExtractMetadataRequest",
    "CompressRequest",
    "WatermarkRequest",
    "RotateRequest",
    "EncryptRequest",
    "DecryptRequest",
    "BatchProcessRequest",
    "check_watermark",
    "normalise_image_format",
]
