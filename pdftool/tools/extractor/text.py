"""Plugin extracting per-page text with an optional OCR fallback."""

from __future__ import annotations

import fitz  # PyMuPDF

from ...exceptions import ExtractionError
from ...results import PageText, TextExtractionResult
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from . import ocr


@register_tool("extract_text")
class ExtractTextTool(BaseTool):
    """Extract the embedded text layer page by page.

    Pages whose embedded text is blank are sent to Tesseract when the caller
    asked for OCR and OCR is enabled in the configuration. Each page records
    which method produced its text.
    """

    error_class = ExtractionError

    def execute(self) -> TextExtractionResult:
        context = self.context
        source = context.require_input()
        settings = context.settings
        use_ocr = bool(context.options.get("use_ocr", False))
        if use_ocr and not settings.ocr_enabled:
            self.logger.info("OCR requested but disabled by configuration")
            use_ocr = False
        if use_ocr and not ocr.tesseract_available():
            raise ExtractionError("OCR requested but tesseract is not installed", operation=self.name)

        reader = self.open_reader(source)
        pages: list[PageText] = []
        document = None
        try:
            for index, page in enumerate(reader.pages):
                self.checkpoint(f"page {index + 1}")
                text = (page.extract_text() or "").strip()
                method = "text"
                if not text and use_ocr:
                    if document is None:
                        document = fitz.open(str(source))
                        if document.needs_pass:
                            document.authenticate("")
                    text = ocr.ocr_page(document.load_page(index), settings.ocr_languages)
                    method = "ocr"
                if not text:
                    method = "none"
                pages.append(PageText(page_number=index + 1, text=text, method=method))
        finally:
            if document is not None:
                document.close()

        result = TextExtractionResult.from_pages(pages)
        context.resources["result"] = result
        ocr_pages = sum(1 for page in pages if page.method == "ocr")
        self.logger.debug("Extracted text from %d page(s), %d via OCR", len(pages), ocr_pages)
        return result
