"""pdftool: a PDF processing pipeline with a FastAPI front door."""

from __future__ import annotations

from .config import Config
from .engine import TransformEngine
from .exceptions import ErrorCode, PdfToolError
from .operations import Operation

__all__ = ["Config", "TransformEngine", "ErrorCode", "PdfToolError", "Operation"]

__version__ = "1.0.0"
