"""Result records produced by the transform engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, List


@dataclass(frozen=True, slots=True)
class PageText:
    page_number: int
    text: str
    method: str = "text"


@dataclass(frozen=True, slots=True)
class TextExtractionResult:
    """Ordered per-page text plus the aggregate joined by blank lines."""

    text: str
    page_count: int
    pages: List[PageText] = field(default_factory=list)

    @classmethod
    def from_pages(cls, pages: List[PageText]) -> "TextExtractionResult":
        aggregate = "\n\n".join(page.text for page in pages)
        return cls(text=aggregate, page_count=len(pages), pages=list(pages))

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class MetadataResult:
    title: str = ""
    author: str = ""
    subject: str = ""
    creator: str = ""
    producer: str = ""
    keywords: str = ""
    creation_date: str = ""
    modification_date: str = ""
    page_count: int = 0
    file_size: int = 0
    encrypted: bool = False
    pdf_version: str = ""

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CompressionResult:
    """Outcome of a compression run, sizes in bytes."""

    data: bytes
    original_size: int
    compressed_size: int
    level: int
    page_count: int

    @property
    def bytes_saved(self) -> int:
        return max(self.original_size - self.compressed_size, 0)

    @property
    def compression_ratio(self) -> float:
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size


@dataclass(frozen=True, slots=True)
class ImageConversionResult:
    images: List[bytes]
    page_count: int
    format: str
    dpi: int
    page_numbers: List[int] = field(default_factory=list)


__all__ = [
    "PageText",
    "TextExtractionResult",
    "MetadataResult",
    "CompressionResult",
    "ImageConversionResult",
]
