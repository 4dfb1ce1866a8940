"""Pydantic response models for the PDF endpoints."""

from __future__ import annotations

import base64
from typing import List

from pydantic import BaseModel

from pdftool.results import ImageConversionResult, MetadataResult, TextExtractionResult


def _encode(blobs: List[bytes]) -> List[str]:
    return [base64.b64encode(blob).decode("ascii") for blob in blobs]


class ImageConversionResponse(BaseModel):
    """Base64 encoded images, one per selected page in page order."""

    images: List[str]
    page_count: int
    format: str
    dpi: int
    pages: List[int]

    @classmethod
    def from_result(cls, result: ImageConversionResult) -> "ImageConversionResponse":
        return cls(
            images=_encode(result.images),
            page_count=result.page_count,
            format=result.format,
            dpi=result.dpi,
            pages=result.page_numbers,
        )


class SplitResponse(BaseModel):
    """Base64 encoded PDF documents in ascending page order."""

    files: List[str]
    count: int

    @classmethod
    def from_documents(cls, documents: List[bytes]) -> "SplitResponse":
        return cls(files=_encode(documents), count=len(documents))


class PageTextModel(BaseModel):
    page_number: int
    text: str
    method: str


class TextExtractionResponse(BaseModel):
    text: str
    page_count: int
    pages: List[PageTextModel]

    @classmethod
    def from_result(cls, result: TextExtractionResult) -> "TextExtractionResponse":
        return cls(
            text=result.text,
            page_count=result.page_count,
            pages=[
                PageTextModel(page_number=page.page_number, text=page.text, method=page.method)
                for page in result.pages
            ],
        )


class MetadataResponse(BaseModel):
    title: str
    author: str
    subject: str
    creator: str
    producer: str
    keywords: str
    creation_date: str
    modification_date: str
    page_count: int
    file_size: int
    encrypted: bool
    pdf_version: str

    @classmethod
    def from_result(cls, result: MetadataResult) -> "MetadataResponse":
        return cls(**result.as_dict())


class ErrorResponse(BaseModel):
    error: str
    code: str


__all__ = [
    "ErrorResponse",
    "ImageConversionResponse",
    "MetadataResponse",
    "SplitResponse",
    "TextExtractionResponse",
]
