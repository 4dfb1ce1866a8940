"""Plugin splitting one PDF into a document per page or per range."""

from __future__ import annotations

from pathlib import Path

from pypdf import PdfWriter

from ...core.ranges import InvalidPageRangeError, parse_page_spec
from ...exceptions import SplitError
from ..common.interfaces import BaseTool, document_info
from ..common.pipeline import register_tool


@register_tool("split")
class SplitTool(BaseTool):
    error_class = SplitError

    def execute(self) -> list[Path]:
        context = self.context
        source = context.require_input()
        output_dir = context.require_output()
        output_dir.mkdir(parents=True, exist_ok=True)

        reader = self.open_reader(source)
        total_pages = len(reader.pages)
        spec = context.options.get("pages", "all")
        try:
            page_ranges = parse_page_spec(spec, total_pages=total_pages)
        except InvalidPageRangeError as exc:
            raise SplitError(exc.message, operation=self.name) from exc
        if not page_ranges:
            raise SplitError("Document has no pages to split", operation=self.name)

        metadata = document_info(reader)
        results: list[Path] = []
        # Zero padded index keeps lexical and page order identical.
        width = len(str(len(page_ranges)))
        for index, page_range in enumerate(page_ranges, start=1):
            self.checkpoint(page_range.label())
            writer = PdfWriter()
            for page_number in page_range.pages():
                writer.add_page(reader.pages[page_number - 1])
            if metadata:
                writer.add_metadata(metadata)
            destination = output_dir / f"{index:0{width}d}-{page_range.label()}.pdf"
            with destination.open("wb") as handle:
                writer.write(handle)
            results.append(destination)

        self.logger.debug("Split %d page(s) into %d document(s)", total_pages, len(results))
        context.resources["result"] = results
        return results
