"""Tesseract OCR used for pages without an embedded text layer."""

from __future__ import annotations

import shutil
from typing import Sequence

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from ...exceptions import ExtractionError
from ..rasterizer.render import render_page

OCR_DPI = 300


def tesseract_available() -> bool:
    return shutil.which("tesseract") is not None


def recognize_image(image: Image.Image, languages: Sequence[str]) -> str:
    """Run Tesseract on *image* using every language in *languages*."""

    lang = "+".join(languages) or "eng"
    try:
        return pytesseract.image_to_string(image, lang=lang)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
        raise ExtractionError(f"OCR failed: {exc}", operation="extract_text") from exc


def ocr_page(page: "fitz.Page", languages: Sequence[str], dpi: int = OCR_DPI) -> str:
    return recognize_image(render_page(page, dpi), languages).strip()
