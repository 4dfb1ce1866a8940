from __future__ import annotations

import pytest

from pdftool.config import Config
from pdftool.core.validator import count_pages, validate_blob
from pdftool.exceptions import (
    EmptyInputError,
    FileTooLargeError,
    InvalidFormatError,
    TooManyPagesError,
)


def test_valid_pdf_passes(config: Config, sample_pdf: bytes) -> None:
    validate_blob(sample_pdf, config)


def test_empty_input_is_rejected(config: Config) -> None:
    with pytest.raises(EmptyInputError):
        validate_blob(b"", config)


def test_size_is_checked_before_signature(config: Config) -> None:
    small = config.model_copy(update={"max_file_size": 8})
    with pytest.raises(FileTooLargeError):
        validate_blob(b"GIF89a-not-a-pdf", small)


@pytest.mark.parametrize("payload", [b"GIF89a\x01\x00", b"%PD", b"PK\x03\x04", b" %PDF-1.7"])
def test_signature_must_lead_the_blob(config: Config, payload: bytes) -> None:
    with pytest.raises(InvalidFormatError):
        validate_blob(payload, config)


def test_page_ceiling(config: Config, pdf_factory) -> None:
    limited = config.model_copy(update={"max_pages": 3})
    validate_blob(pdf_factory(3), limited)
    with pytest.raises(TooManyPagesError):
        validate_blob(pdf_factory(4), limited)


def test_unparseable_structure_is_left_to_the_transform(config: Config, corrupt_pdf: bytes) -> None:
    assert count_pages(corrupt_pdf) is None
    validate_blob(corrupt_pdf, config)


def test_count_pages_reads_page_tree(sample_pdf: bytes, no_info_pdf: bytes) -> None:
    assert count_pages(sample_pdf) == 5
    assert count_pages(no_info_pdf) == 1
