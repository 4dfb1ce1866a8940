"""Transform engine: bytes in, bytes or records out, scratch files in between.

Every operation writes its inputs to uniquely named scratch resources, runs
the registered tool against those paths and reads the output back before the
scratch resources are released. Release happens on every exit path, including
timeouts and cancellation.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Callable, Sequence

from .config import Config
from .core.cancellation import CancellationToken
from .core.scratch import ScratchSpace
from .core.utils import get_logger
from .exceptions import InsufficientInputError
from .operations import (
    DEFAULT_WATERMARK_FONT_SIZE,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
    IMPLEMENTED_OPERATIONS,
    BatchProcessRequest,
    ConvertToImageRequest,
    DecryptRequest,
    EncryptRequest,
    Operation,
    OperationRequest,
    RotateRequest,
    WatermarkRequest,
)
from .results import CompressionResult, ImageConversionResult, MetadataResult, TextExtractionResult
from .telemetry import OperationMetrics, observe_operation
from .tools import load_builtin_plugins
from .tools.common.interfaces import ToolContext
from .tools.common.pipeline import ToolRegistry, registry as default_registry


class TransformEngine:
    """Runs one PDF operation per call against injected configuration."""

    def __init__(
        self,
        config: Config,
        *,
        scratch: ScratchSpace | None = None,
        metrics: OperationMetrics | None = None,
        logger: logging.Logger | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        load_builtin_plugins()
        self.config = config
        self.logger = logger or get_logger("pdftool.engine")
        self.scratch = scratch or ScratchSpace(config.temp_dir, logger=self.logger)
        self.metrics = metrics
        self.registry = registry or default_registry
        self._dispatch: dict[Operation, Callable[[Any, CancellationToken | None], Any]] = {
            Operation.CONVERT_TO_IMAGE: self._execute_convert,
            Operation.MERGE: lambda request, token: self.merge(request.documents, token=token),
            Operation.SPLIT: lambda request, token: self.split(request.blob, request.pages, token=token),
            Operation.EXTRACT_TEXT: lambda request, token: self.extract_text(
                request.blob, request.use_ocr, token=token
            ),
            Operation.EXTRACT_METADATA: lambda request, token: self.extract_metadata(request.blob, token=token),
            Operation.COMPRESS: lambda request, token: self.compress(request.blob, request.level, token=token),
            Operation.WATERMARK: self._execute_watermark,
        }

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def execute(self, request: OperationRequest, token: CancellationToken | None = None) -> Any:
        """Run the operation described by *request* and return its result."""

        if request.operation not in IMPLEMENTED_OPERATIONS:
            return self._placeholder(request.operation, request, token)
        return self._dispatch[request.operation](request, token)

    def _context(self, token: CancellationToken | None, **kwargs: Any) -> ToolContext:
        return ToolContext(settings=self.config, token=token or CancellationToken.none(), **kwargs)

    def _observe(self, operation: Operation, input_bytes: int):
        return observe_operation(
            operation.value, metrics=self.metrics, logger=self.logger, input_bytes=input_bytes
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def merge(self, blobs: Sequence[bytes], *, token: CancellationToken | None = None) -> bytes:
        """Concatenate *blobs* in order into one PDF."""

        blobs = list(blobs)
        with self._observe(Operation.MERGE, sum(len(blob) for blob in blobs)) as fields:
            if len(blobs) < 2:
                raise InsufficientInputError("At least 2 PDFs required", operation=Operation.MERGE.value)
            context = self._context(token, options={"metadata": True})
            context.token.check("merge")
            with ExitStack() as stack:
                for index, blob in enumerate(blobs):
                    scratch_input = stack.enter_context(
                        self.scratch.acquire_file(blob, f"merge-input-{index}-*.pdf")
                    )
                    context.inputs.append(scratch_input.path)
                output = stack.enter_context(self.scratch.acquire_file(None, "merge-output-*.pdf"))
                context.output_path = output.path
                self.registry.create("merge", context).run()
                data = output.read_bytes()
            fields.update(inputs=len(blobs), page_count=context.resources.get("page_count"), output_bytes=len(data))
            return data

    def split(
        self, blob: bytes, pages: str | None = "all", *, token: CancellationToken | None = None
    ) -> list[bytes]:
        """Split *blob* into one document per page (``"all"``) or per range."""

        with self._observe(Operation.SPLIT, len(blob)) as fields:
            context = self._context(token, options={"pages": pages or "all"})
            context.token.check("split")
            with self.scratch.acquire_file(blob, "split-input-*.pdf") as source, self.scratch.acquire_directory(
                "split-output-*"
            ) as output_dir:
                context.input_path = source.path
                context.output_path = output_dir.path
                paths = self.registry.create("split", context).run()
                documents = [path.read_bytes() for path in paths]
            fields.update(count=len(documents))
            return documents

    def extract_text(
        self, blob: bytes, use_ocr: bool = False, *, token: CancellationToken | None = None
    ) -> TextExtractionResult:
        with self._observe(Operation.EXTRACT_TEXT, len(blob)) as fields:
            context = self._context(token, options={"use_ocr": use_ocr})
            context.token.check("extract_text")
            with self.scratch.acquire_file(blob, "extract-text-*.pdf") as source:
                context.input_path = source.path
                result: TextExtractionResult = self.registry.create("extract_text", context).run()
            fields.update(page_count=result.page_count, use_ocr=use_ocr)
            return result

    def extract_metadata(self, blob: bytes, *, token: CancellationToken | None = None) -> MetadataResult:
        with self._observe(Operation.EXTRACT_METADATA, len(blob)) as fields:
            context = self._context(token)
            context.token.check("extract_metadata")
            with self.scratch.acquire_file(blob, "metadata-*.pdf") as source:
                context.input_path = source.path
                result: MetadataResult = self.registry.create("extract_metadata", context).run()
            fields.update(page_count=result.page_count, encrypted=result.encrypted)
            return result

    def compress(
        self, blob: bytes, level: int | None = None, *, token: CancellationToken | None = None
    ) -> CompressionResult:
        """Losslessly optimize *blob*; the output is never larger than the input."""

        level = self.config.compression_level if level is None else level
        with self._observe(Operation.COMPRESS, len(blob)) as fields:
            context = self._context(token, options={"level": level})
            context.token.check("compress")
            with self.scratch.acquire_directory("compress-*") as workdir:
                context.input_path = workdir.write(blob, "input-*.pdf")
                context.output_path = workdir.file("output-*.pdf")
                output = self.registry.create("compress", context).run()
                data = output.read_bytes()
            result = CompressionResult(
                data=data,
                original_size=len(blob),
                compressed_size=len(data),
                level=level,
                page_count=context.resources.get("page_count", 0),
            )
            fields.update(
                level=level,
                original_size=result.original_size,
                compressed_size=result.compressed_size,
                bytes_saved=result.bytes_saved,
                ratio=round(result.compression_ratio, 4),
            )
            return result

    def watermark(
        self,
        blob: bytes,
        text: str,
        opacity: float = DEFAULT_WATERMARK_OPACITY,
        rotation: float = DEFAULT_WATERMARK_ROTATION,
        font_size: float = DEFAULT_WATERMARK_FONT_SIZE,
        *,
        token: CancellationToken | None = None,
    ) -> bytes:
        with self._observe(Operation.WATERMARK, len(blob)) as fields:
            context = self._context(
                token,
                options={"text": text, "opacity": opacity, "rotation": rotation, "font_size": font_size},
            )
            context.token.check("watermark")
            with self.scratch.acquire_file(blob, "watermark-input-*.pdf") as source, self.scratch.acquire_file(
                None, "watermark-output-*.pdf"
            ) as output:
                context.input_path = source.path
                context.output_path = output.path
                self.registry.create("watermark", context).run()
                data = output.read_bytes()
            fields.update(page_count=context.resources.get("page_count"))
            return data

    def convert_to_image(
        self,
        blob: bytes,
        image_format: str = "png",
        dpi: int | None = None,
        pages: str | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> ImageConversionResult:
        """Rasterize the selected pages of *blob*, one image per page in page order."""

        dpi = self.config.default_dpi if dpi is None else dpi
        with self._observe(Operation.CONVERT_TO_IMAGE, len(blob)) as fields:
            context = self._context(token, options={"format": image_format, "dpi": dpi, "pages": pages})
            context.token.check("convert_to_image")
            with self.scratch.acquire_file(blob, "convert-input-*.pdf") as source, self.scratch.acquire_directory(
                "convert-output-*"
            ) as output_dir:
                context.input_path = source.path
                context.output_path = output_dir.path
                paths = self.registry.create("rasterize", context).run()
                images = [path.read_bytes() for path in paths]
            result = ImageConversionResult(
                images=images,
                page_count=len(images),
                format=context.resources["format"],
                dpi=dpi,
                page_numbers=list(context.resources["page_numbers"]),
            )
            fields.update(page_count=result.page_count, format=result.format, dpi=dpi)
            return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _execute_convert(self, request: ConvertToImageRequest, token: CancellationToken | None) -> ImageConversionResult:
        return self.convert_to_image(request.blob, request.format, request.dpi, request.pages, token=token)

    def _execute_watermark(self, request: WatermarkRequest, token: CancellationToken | None) -> bytes:
        return self.watermark(
            request.blob,
            request.text,
            request.opacity,
            request.rotation,
            request.font_size,
            token=token,
        )

    def _placeholder(
        self,
        operation: Operation,
        request: RotateRequest | EncryptRequest | DecryptRequest | BatchProcessRequest,
        token: CancellationToken | None,
    ) -> Any:
        with self._observe(operation, sum(len(blob) for blob in request.blobs())):
            context = self._context(token, options=dict(request.options))
            return self.registry.create(operation.value, context).run()


__all__ = ["TransformEngine"]
