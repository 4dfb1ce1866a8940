"""Plugin applying lossless structural compression."""

from __future__ import annotations

import shutil
from pathlib import Path

from pypdf import PdfReader, PdfWriter

from ...exceptions import CompressionError
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .optimizers import detect_backend, run_backend

# zlib level used when re-encoding content streams, per compression level.
_ZLIB_LEVELS = {1: 6, 2: 9, 3: 9}


@register_tool("compress")
class CompressTool(BaseTool):
    """Re-encode content streams and drop redundant objects.

    Level 1 recompresses page content streams. Level 2 also merges identical
    objects and removes orphans. Level 3 additionally runs qpdf when it is
    installed. Nothing is downsampled or discarded, so the page count and
    visible content are preserved. When the result is not smaller than the
    source, the source bytes are kept.
    """

    error_class = CompressionError

    def execute(self) -> Path:
        context = self.context
        source = context.require_input()
        output = context.require_output()
        level = int(context.options.get("level", context.settings.compression_level))
        if level not in _ZLIB_LEVELS:
            raise CompressionError(f"Unsupported compression level: {level}", operation=self.name)

        reader = self.open_reader(source)
        page_count = len(reader.pages)
        writer = PdfWriter(clone_from=reader)
        for index, page in enumerate(writer.pages):
            if index % 25 == 0:
                self.checkpoint(f"page {index + 1}")
            page.compress_content_streams(level=_ZLIB_LEVELS[level])
        if level >= 2:
            writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)

        self.checkpoint("write")
        with output.open("wb") as handle:
            writer.write(handle)

        if level >= 3:
            self._run_backend(output)

        compressed_pages = len(PdfReader(str(output)).pages)
        if compressed_pages != page_count:
            raise CompressionError(
                f"Compressed output has {compressed_pages} pages, expected {page_count}",
                operation=self.name,
            )

        original_size = source.stat().st_size
        if output.stat().st_size >= original_size:
            self.logger.debug("Optimized output is not smaller; keeping original bytes")
            shutil.copyfile(source, output)

        context.resources.update(
            {
                "page_count": page_count,
                "original_size": original_size,
                "compressed_size": output.stat().st_size,
                "level": level,
            }
        )
        return output

    def _run_backend(self, output: Path) -> None:
        backend = detect_backend()
        if backend is None:
            self.logger.info("qpdf not found on PATH; level 3 falls back to pypdf optimizations")
            return
        self.checkpoint("qpdf")
        optimized = output.with_name(f"{output.stem}-qpdf{output.suffix}")
        run_backend(backend, output, optimized, timeout=self.context.token.remaining())
        if optimized.exists() and optimized.stat().st_size < output.stat().st_size:
            optimized.replace(output)
        else:
            optimized.unlink(missing_ok=True)
