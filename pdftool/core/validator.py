"""Validation gate run on every uploaded blob before any transformation."""

from __future__ import annotations

from io import BytesIO

from pypdf import PdfReader

from ..config import Config
from ..exceptions import (
    EmptyInputError,
    FileTooLargeError,
    InvalidFormatError,
    TooManyPagesError,
)
from .utils import get_logger

LOGGER = get_logger("pdftool.validator")


def count_pages(data: bytes) -> int | None:
    """Return the page-tree count of *data* or ``None`` when it cannot be read.

    This only walks the trailer, the cross-reference table and the root of
    the page tree; no content stream is decoded.
    """

    try:
        reader = PdfReader(BytesIO(data), strict=False)
        if reader.is_encrypted and not reader.decrypt(""):
            return None
        return len(reader.pages)
    except Exception as exc:  # malformed structure is reported by the transform
        LOGGER.debug("Structural parse failed, page limit not enforced: %s", exc)
        return None


def validate_blob(data: bytes, config: Config) -> None:
    """Check *data* against emptiness, size, signature and page ceilings.

    Raises the matching :class:`~pdftool.exceptions.InputError`. A document
    whose structure cannot be parsed passes the gate; the transform that
    consumes it reports the categorized failure.
    """

    if not data:
        raise EmptyInputError("PDF data is empty")
    if len(data) > config.max_file_size:
        raise FileTooLargeError(
            f"File size {len(data)} exceeds maximum {config.max_file_size} bytes"
        )
    if not any(data.startswith(signature) for signature in config.signatures):
        raise InvalidFormatError("Invalid PDF format: missing %PDF signature")

    pages = count_pages(data)
    if pages is not None and pages > config.max_pages:
        raise TooManyPagesError(f"Document has {pages} pages, maximum is {config.max_pages}")


__all__ = ["count_pages", "validate_blob"]
