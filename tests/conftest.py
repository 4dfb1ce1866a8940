from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import DictionaryObject, NameObject, NumberObject, StreamObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdftool.config import Config  # noqa: E402
from pdftool.engine import TransformEngine  # noqa: E402
from pdftool.telemetry import OperationMetrics  # noqa: E402

PdfFactory = Callable[..., bytes]


def _write(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _set_content(writer: PdfWriter, page, content: bytes, *, with_font: bool) -> None:
    if with_font:
        font_dict = DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
            }
        )
        font_ref = writer._add_object(font_dict)
        page[NameObject("/Resources")] = DictionaryObject(
            {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
        )
    stream = StreamObject()
    stream[NameObject("/Length")] = NumberObject(len(content))
    stream._data = content
    page[NameObject("/Contents")] = writer._add_object(stream)


def page_count(data: bytes) -> int:
    return len(PdfReader(BytesIO(data)).pages)


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(
        temp_dir=tmp_path / "scratch",
        log_format="text",
        rate_limit_enabled=False,
        max_file_size=5 * 1024 * 1024,
        max_pages=50,
    )


@pytest.fixture()
def engine(config: Config) -> TransformEngine:
    return TransformEngine(config, metrics=OperationMetrics())


@pytest.fixture()
def pdf_factory() -> PdfFactory:
    """Build PDFs in memory.

    ``texts`` puts one line of Helvetica text on each page; ``sizes``
    gives per-page (width, height) pairs.
    """

    def _create(
        pages: int = 1,
        *,
        width: float = 200,
        height: float = 200,
        title: str | None = None,
        texts: Sequence[str] | None = None,
        sizes: Sequence[tuple[float, float]] | None = None,
    ) -> bytes:
        writer = PdfWriter()
        dimensions = list(sizes) if sizes else [(width, height)] * pages
        for index, (page_width, page_height) in enumerate(dimensions):
            page = writer.add_blank_page(width=page_width, height=page_height)
            if texts is not None and index < len(texts) and texts[index]:
                content = f"BT /F1 12 Tf 20 100 Td ({texts[index]}) Tj ET".encode("latin-1")
                _set_content(writer, page, content, with_font=True)
        if title is not None:
            writer.add_metadata({"/Title": title, "/Author": "pdftool-tests"})
        return _write(writer)

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: PdfFactory) -> bytes:
    return pdf_factory(5, title="Sample")


@pytest.fixture()
def text_pdf(pdf_factory: PdfFactory) -> bytes:
    return pdf_factory(3, texts=["Page one", "Page two", "Page three"])


@pytest.fixture()
def compressible_pdf() -> bytes:
    """Pages carrying large, uncompressed and identical content streams."""

    writer = PdfWriter()
    drawing = b"0.5 g 10 10 m 190 190 l S\n" * 400
    for _ in range(4):
        page = writer.add_blank_page(width=200, height=200)
        _set_content(writer, page, drawing, with_font=False)
    return _write(writer)


@pytest.fixture()
def no_info_pdf() -> bytes:
    """A single-page PDF whose trailer has no /Info entry."""

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] >>",
    ]
    output = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output += f"{number} 0 obj\n".encode("ascii") + body + b"\nendobj\n"
    xref_offset = len(output)
    output += f"xref\n0 {len(objects) + 1}\n".encode("ascii")
    output += b"0000000000 65535 f \n"
    for offset in offsets:
        output += f"{offset:010d} 00000 n \n".encode("ascii")
    output += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n"
    ).encode("ascii")
    return bytes(output)


@pytest.fixture()
def corrupt_pdf() -> bytes:
    return b"%PDF-1.4\nthis is not really a pdf document\n%%EOF\n"


@pytest.fixture()
def encrypted_pdf_factory(pdf_factory: PdfFactory) -> PdfFactory:
    """Encrypt a generated PDF with pypdf.

    An empty ``user_password`` opens without a password; ``algorithm`` is any
    pypdf algorithm name such as ``"RC4-128"`` or ``"AES-256"``.
    """

    def _create(
        pages: int = 1,
        *,
        user_password: str = "",
        algorithm: str = "AES-256",
        title: str | None = "Locked",
    ) -> bytes:
        writer = PdfWriter(clone_from=PdfReader(BytesIO(pdf_factory(pages, title=title))))
        writer.encrypt(user_password=user_password, owner_password="owner-secret", algorithm=algorithm)
        return _write(writer)

    return _create
