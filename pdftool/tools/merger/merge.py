"""Plugin concatenating several PDFs into one document."""

from __future__ import annotations

from pathlib import Path

from pypdf import PdfWriter

from ...exceptions import InsufficientInputError, MergeError
from ..common.interfaces import BaseTool, document_info
from ..common.pipeline import register_tool


@register_tool("merge")
class MergeTool(BaseTool):
    """Append every page of each input, in input order, to one writer.

    No page is reordered or de-duplicated. Document information from the
    first input is copied to the result when ``options["metadata"]`` is true
    (the default).
    """

    error_class = MergeError

    def execute(self) -> Path:
        context = self.context
        inputs = list(context.inputs)
        if len(inputs) < 2:
            raise InsufficientInputError("At least 2 PDFs required", operation=self.name)
        output = context.require_output()

        writer = PdfWriter()
        first_metadata: dict[str, str] | None = None
        for index, pdf_path in enumerate(inputs):
            self.checkpoint(f"input {index + 1}")
            reader = self.open_reader(pdf_path)
            for page in reader.pages:
                writer.add_page(page)
            self.logger.debug("Appended %d page(s) from input %d", len(reader.pages), index + 1)

            if first_metadata is None and context.options.get("metadata", True):
                first_metadata = document_info(reader)

        if first_metadata:
            writer.add_metadata(first_metadata)

        self.checkpoint("write")
        with output.open("wb") as handle:
            writer.write(handle)

        context.resources["page_count"] = len(writer.pages)
        self.logger.info("Merged %d PDFs into %d page(s)", len(inputs), len(writer.pages))
        return output
