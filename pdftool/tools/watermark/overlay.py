"""Plugin stamping a translucent text watermark on every page."""

from __future__ import annotations

import io
from pathlib import Path

from pypdf import PageObject, PdfReader, PdfWriter
from reportlab.pdfgen import canvas

from ...exceptions import InvalidParameterError, WatermarkError
from ...operations import (
    DEFAULT_WATERMARK_FONT_SIZE,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
    DEFAULT_WATERMARK_TEXT,
    check_watermark,
)
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool

FONT_NAME = "Helvetica"

BoxKey = tuple[float, float, float, float]


def _box_key(page: PageObject) -> BoxKey:
    box = page.mediabox
    return (float(box.left), float(box.bottom), float(box.right), float(box.top))


def build_overlay(box: BoxKey, text: str, *, opacity: float, rotation: float, font_size: float) -> PageObject:
    """Render *text* centred on a page matching *box* and return it as a page."""

    left, bottom, right, top = box
    buffer = io.BytesIO()
    pdf_canvas = canvas.Canvas(buffer, pagesize=(right, top))
    pdf_canvas.setFillAlpha(opacity)
    pdf_canvas.setFillColorRGB(0.5, 0.5, 0.5)
    pdf_canvas.saveState()
    pdf_canvas.translate(left + (right - left) / 2.0, bottom + (top - bottom) / 2.0)
    pdf_canvas.rotate(rotation)
    pdf_canvas.setFont(FONT_NAME, font_size)
    # Baseline shifted so the glyphs sit on the centre point.
    pdf_canvas.drawCentredString(0, -font_size / 3.0, text)
    pdf_canvas.restoreState()
    pdf_canvas.showPage()
    pdf_canvas.save()
    buffer.seek(0)
    return PdfReader(buffer).pages[0]


@register_tool("watermark")
class WatermarkTool(BaseTool):
    error_class = WatermarkError

    def execute(self) -> Path:
        context = self.context
        source = context.require_input()
        output = context.require_output()
        options = context.options
        text = options.get("text", DEFAULT_WATERMARK_TEXT)
        opacity = float(options.get("opacity", DEFAULT_WATERMARK_OPACITY))
        rotation = float(options.get("rotation", DEFAULT_WATERMARK_ROTATION))
        font_size = float(options.get("font_size", DEFAULT_WATERMARK_FONT_SIZE))
        try:
            check_watermark(text, opacity, font_size)
        except InvalidParameterError as exc:
            raise WatermarkError(exc.message, operation=self.name) from exc

        reader = self.open_reader(source)
        original_boxes = [_box_key(page) for page in reader.pages]
        writer = PdfWriter(clone_from=reader)

        overlays: dict[BoxKey, PageObject] = {}
        for index, page in enumerate(writer.pages):
            self.checkpoint(f"page {index + 1}")
            key = _box_key(page)
            if key not in overlays:
                overlays[key] = build_overlay(
                    key, text, opacity=opacity, rotation=rotation, font_size=font_size
                )
            page.merge_page(overlays[key], over=True)

        stamped_boxes = [_box_key(page) for page in writer.pages]
        if stamped_boxes != original_boxes:
            raise WatermarkError("Watermarking changed page geometry", operation=self.name)

        self.checkpoint("write")
        with output.open("wb") as handle:
            writer.write(handle)
        context.resources["page_count"] = len(stamped_boxes)
        self.logger.debug("Watermarked %d page(s) using %d overlay(s)", len(stamped_boxes), len(overlays))
        return output
