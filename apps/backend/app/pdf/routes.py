"""API routes exposing the PDF pipeline."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from pdftool.engine import TransformEngine
from pdftool.exceptions import OperationNotImplementedError
from pdftool.operations import (
    DEFAULT_WATERMARK_FONT_SIZE,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
    DEFAULT_WATERMARK_TEXT,
    BatchProcessRequest,
    CompressRequest,
    ConvertToImageRequest,
    DecryptRequest,
    EncryptRequest,
    ExtractMetadataRequest,
    ExtractTextRequest,
    MergeRequest,
    RotateRequest,
    SplitRequest,
    WatermarkRequest,
)

from .dependencies import get_engine, read_many, read_single, run_operation
from .models import (
    ErrorResponse,
    ImageConversionResponse,
    MetadataResponse,
    SplitResponse,
    TextExtractionResponse,
)

ERROR_RESPONSES: dict[int | str, dict] = {
    status: {"model": ErrorResponse} for status in (400, 429, 499, 500, 501, 504)
}

router = APIRouter(prefix="/pdf", tags=["pdf"], responses=ERROR_RESPONSES)
batch_router = APIRouter(prefix="/batch", tags=["batch"], responses=ERROR_RESPONSES)


def _pdf_response(data: bytes, filename: str, headers: dict[str, str] | None = None) -> Response:
    response_headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    response_headers.update(headers or {})
    return Response(content=data, media_type="application/pdf", headers=response_headers)


@router.post("/convert/image", response_model=ImageConversionResponse)
async def convert_to_image(
    pdf: UploadFile | None = File(None, description="PDF to rasterize"),
    format: str = Query("png", description="png, jpeg or webp"),
    dpi: int | None = Query(None, description="Resolution, defaults to the configured DPI"),
    pages: str | None = Query(None, description='"all" or a list such as "1-3,5"'),
    engine: TransformEngine = Depends(get_engine),
) -> ImageConversionResponse:
    """Rasterize each selected page and return base64 encoded images."""

    blob = await read_single(pdf, engine.config)
    request = ConvertToImageRequest(
        blob=blob,
        format=format,
        dpi=engine.config.default_dpi if dpi is None else dpi,
        pages=pages,
    )
    result = await run_operation(engine, request, pages=pages)
    return ImageConversionResponse.from_result(result)


@router.post("/merge", response_class=Response)
async def merge_documents(
    pdfs: List[UploadFile] | None = File(None, description="PDF files to merge, in order"),
    engine: TransformEngine = Depends(get_engine),
) -> Response:
    """Merge the uploads in the order received into a single PDF."""

    documents = await read_many(pdfs, engine.config)
    data = await run_operation(engine, MergeRequest(documents=documents))
    return _pdf_response(data, "merged.pdf")


@router.post("/split", response_model=SplitResponse)
async def split_document(
    pdf: UploadFile | None = File(None),
    pages: str = Query("all", description='"all" for one file per page, or ranges such as "1-3,5"'),
    engine: TransformEngine = Depends(get_engine),
) -> SplitResponse:
    blob = await read_single(pdf, engine.config)
    documents = await run_operation(engine, SplitRequest(blob=blob, pages=pages), pages=pages)
    return SplitResponse.from_documents(documents)


@router.post("/extract/text", response_model=TextExtractionResponse)
async def extract_text(
    pdf: UploadFile | None = File(None),
    ocr: bool = Query(False, description="Fall back to OCR on pages without a text layer"),
    engine: TransformEngine = Depends(get_engine),
) -> TextExtractionResponse:
    blob = await read_single(pdf, engine.config)
    result = await run_operation(engine, ExtractTextRequest(blob=blob, use_ocr=ocr))
    return TextExtractionResponse.from_result(result)


@router.post("/extract/metadata", response_model=MetadataResponse)
async def extract_metadata(
    pdf: UploadFile | None = File(None),
    engine: TransformEngine = Depends(get_engine),
) -> MetadataResponse:
    blob = await read_single(pdf, engine.config)
    result = await run_operation(engine, ExtractMetadataRequest(blob=blob))
    return MetadataResponse.from_result(result)


@router.post("/compress", response_class=Response)
async def compress_document(
    pdf: UploadFile | None = File(None),
    level: int | None = Query(None, description="1 (fast) to 3 (smallest)"),
    engine: TransformEngine = Depends(get_engine),
) -> Response:
    """Losslessly compress a PDF; sizes are reported in response headers."""

    blob = await read_single(pdf, engine.config)
    result = await run_operation(engine, CompressRequest(blob=blob, level=level))
    headers = {
        "X-Original-Size": str(result.original_size),
        "X-Compressed-Size": str(result.compressed_size),
        "X-Compression-Ratio": f"{result.compression_ratio:.4f}",
    }
    return _pdf_response(result.data, "compressed.pdf", headers)


@router.post("/watermark", response_class=Response)
async def watermark_document(
    pdf: UploadFile | None = File(None),
    text: str = Query(DEFAULT_WATERMARK_TEXT),
    opacity: float = Query(DEFAULT_WATERMARK_OPACITY),
    rotation: float = Query(DEFAULT_WATERMARK_ROTATION),
    font_size: float = Query(DEFAULT_WATERMARK_FONT_SIZE),
    engine: TransformEngine = Depends(get_engine),
) -> Response:
    blob = await read_single(pdf, engine.config)
    request = WatermarkRequest(blob=blob, text=text, opacity=opacity, rotation=rotation, font_size=font_size)
    data = await run_operation(engine, request)
    return _pdf_response(data, "watermarked.pdf")


@router.post("/rotate")
async def rotate_document(engine: TransformEngine = Depends(get_engine)) -> Response:
    return await run_operation(engine, RotateRequest())


@router.post("/encrypt")
async def encrypt_document(engine: TransformEngine = Depends(get_engine)) -> Response:
    return await run_operation(engine, EncryptRequest())


@router.post("/decrypt")
async def decrypt_document(engine: TransformEngine = Depends(get_engine)) -> Response:
    return await run_operation(engine, DecryptRequest())


@batch_router.post("/process")
async def batch_process(engine: TransformEngine = Depends(get_engine)) -> Response:
    return await run_operation(engine, BatchProcessRequest())


@batch_router.get("/status/{job_id}")
async def batch_status(job_id: str) -> Response:
    raise OperationNotImplementedError("Coming soon", operation="batch_status")


__all__ = ["router", "batch_router"]
