from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from pdftool.config import Config
from pdftool.exceptions import ConversionError, ExtractionError
from pdftool.tools import load_builtin_plugins
from pdftool.tools.common.interfaces import ToolContext
from pdftool.tools.common.pipeline import registry
from pdftool.tools.extractor import ocr


def setup_module(module):
    load_builtin_plugins()


def _context(config: Config, tmp_path: Path, data: bytes, **kwargs) -> ToolContext:
    source = tmp_path / "source.pdf"
    source.write_bytes(data)
    return ToolContext(settings=config, input_path=source, **kwargs)


def test_text_layer_is_extracted_per_page(config: Config, text_pdf: bytes, tmp_path: Path) -> None:
    result = registry.create("extract_text", _context(config, tmp_path, text_pdf)).run()

    assert result.page_count == 3
    assert [page.text for page in result.pages] == ["Page one", "Page two", "Page three"]
    assert {page.method for page in result.pages} == {"text"}
    assert result.text == "Page one\n\nPage two\n\nPage three"


def test_blank_pages_report_no_text(config: Config, pdf_factory, tmp_path: Path) -> None:
    data = pdf_factory(2, texts=["Only first"])
    result = registry.create("extract_text", _context(config, tmp_path, data)).run()

    assert [page.method for page in result.pages] == ["text", "none"]
    assert result.pages[1].text == ""


def test_ocr_fills_pages_without_text_layer(config: Config, pdf_factory, tmp_path: Path, monkeypatch) -> None:
    calls: list[str] = []

    def fake_image_to_string(image, lang):
        calls.append(lang)
        assert isinstance(image, Image.Image)
        return " scanned words \n"

    monkeypatch.setattr(ocr, "tesseract_available", lambda: True)
    monkeypatch.setattr(ocr.pytesseract, "image_to_string", fake_image_to_string)
    data = pdf_factory(2, texts=["Embedded"])
    ocr_config = config.model_copy(update={"ocr_languages": ("eng", "deu")})

    result = registry.create("extract_text", _context(ocr_config, tmp_path, data, options={"use_ocr": True})).run()

    assert [page.method for page in result.pages] == ["text", "ocr"]
    assert result.pages[1].text == "scanned words"
    assert calls == ["eng+deu"]


def test_ocr_disabled_by_configuration_is_skipped(config: Config, pdf_factory, tmp_path: Path, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("OCR must not run")

    monkeypatch.setattr(ocr, "ocr_page", fail)
    disabled = config.model_copy(update={"ocr_enabled": False})

    result = registry.create(
        "extract_text", _context(disabled, tmp_path, pdf_factory(1), options={"use_ocr": True})
    ).run()

    assert result.pages[0].method == "none"


def test_missing_tesseract_is_an_extraction_error(config: Config, text_pdf: bytes, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(ocr, "tesseract_available", lambda: False)

    with pytest.raises(ExtractionError):
        registry.create("extract_text", _context(config, tmp_path, text_pdf, options={"use_ocr": True})).run()


def test_metadata_reads_info_dictionary(config: Config, sample_pdf: bytes, tmp_path: Path) -> None:
    result = registry.create("extract_metadata", _context(config, tmp_path, sample_pdf)).run()

    assert result.title == "Sample"
    assert result.author == "pdftool-tests"
    assert result.page_count == 5
    assert result.file_size == len(sample_pdf)
    assert result.encrypted is False
    assert result.pdf_version


def test_metadata_without_info_dictionary(config: Config, no_info_pdf: bytes, tmp_path: Path) -> None:
    result = registry.create("extract_metadata", _context(config, tmp_path, no_info_pdf)).run()

    assert result.title == ""
    assert result.keywords == ""
    assert result.creation_date == ""
    assert result.page_count == 1
    assert result.pdf_version == "1.4"


def test_rasterize_selected_pages(config: Config, sample_pdf: bytes, tmp_path: Path) -> None:
    output_dir = tmp_path / "images"
    output_dir.mkdir()
    context = _context(
        config, tmp_path, sample_pdf, output_path=output_dir, options={"format": "jpg", "dpi": 72, "pages": "2,4"}
    )

    paths = registry.create("rasterize", context).run()

    assert [path.name for path in paths] == ["page-2.jpeg", "page-4.jpeg"]
    assert context.resources["page_numbers"] == [2, 4]
    with Image.open(BytesIO(paths[0].read_bytes())) as image:
        assert image.format == "JPEG"
        assert image.size == (200, 200)


@pytest.mark.parametrize("options", [{"format": "gif"}, {"dpi": 0}, {"dpi": 601}, {"pages": "7"}])
def test_rasterize_rejects_bad_options(config: Config, sample_pdf: bytes, tmp_path: Path, options: dict) -> None:
    output_dir = tmp_path / "images"
    output_dir.mkdir()
    context = _context(config, tmp_path, sample_pdf, output_path=output_dir, options=options)

    with pytest.raises(ConversionError):
        registry.create("rasterize", context).run()
