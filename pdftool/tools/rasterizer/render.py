"""Plugin rasterizing PDF pages to PNG, JPEG or WebP images."""

from __future__ import annotations

import io
from pathlib import Path

import fitz  # PyMuPDF
from PIL import Image

from ...core.ranges import InvalidPageRangeError, selected_pages
from ...core.utils import get_logger
from ...exceptions import ConversionError, InvalidParameterError
from ...operations import IMAGE_FORMATS, normalise_image_format
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool

LOGGER = get_logger("pdftool.tools.rasterize")

_LARGE_DIMENSION_THRESHOLD = 10000


def render_page(page: "fitz.Page", dpi: int) -> Image.Image:
    """Render *page* to an RGB image at *dpi*."""

    pix = page.get_pixmap(dpi=dpi, alpha=False)
    if pix.width > _LARGE_DIMENSION_THRESHOLD or pix.height > _LARGE_DIMENSION_THRESHOLD:
        LOGGER.warning("Large page dimensions: %dx%d at %d DPI", pix.width, pix.height, dpi)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def encode_image(image: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    save_options = {"quality": 90} if fmt in ("jpeg", "webp") else {"optimize": True}
    image.save(buffer, format=IMAGE_FORMATS[fmt], **save_options)
    return buffer.getvalue()


@register_tool("rasterize")
class RasterizeTool(BaseTool):
    """Write one image per selected page into the output directory."""

    error_class = ConversionError

    def execute(self) -> list[Path]:
        context = self.context
        source = context.require_input()
        output_dir = context.require_output()
        options = context.options
        dpi = int(options.get("dpi", context.settings.default_dpi))
        try:
            fmt = normalise_image_format(options.get("format", "png"))
        except InvalidParameterError as exc:
            raise ConversionError(exc.message, operation=self.name) from exc
        if not 1 <= dpi <= context.settings.max_dpi:
            raise ConversionError(
                f"dpi must be between 1 and {context.settings.max_dpi}", operation=self.name
            )

        results: list[Path] = []
        with fitz.open(str(source)) as document:
            if document.needs_pass and not document.authenticate(""):
                raise ConversionError("Document is encrypted", operation=self.name)
            try:
                pages = selected_pages(options.get("pages"), total_pages=document.page_count)
            except InvalidPageRangeError as exc:
                raise ConversionError(exc.message, operation=self.name) from exc

            width = len(str(document.page_count))
            for page_number in pages:
                self.checkpoint(f"page {page_number}")
                image = render_page(document.load_page(page_number - 1), dpi)
                destination = output_dir / f"page-{page_number:0{width}d}.{fmt}"
                destination.write_bytes(encode_image(image, fmt))
                results.append(destination)

        context.resources.update({"page_numbers": pages, "format": fmt, "dpi": dpi})
        self.logger.debug("Rendered %d page(s) as %s at %d DPI", len(results), fmt, dpi)
        return results
