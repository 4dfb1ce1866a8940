"""Shared building blocks used by every pdftool operation."""

from __future__ import annotations

from .cancellation import CancellationToken
from .scratch import ScratchDirectory, ScratchFile, ScratchSpace
from .validator import count_pages, validate_blob

__all__ = [
    "CancellationToken",
    "ScratchDirectory",
    "ScratchFile",
    "ScratchSpace",
    "count_pages",
    "validate_blob",
]
