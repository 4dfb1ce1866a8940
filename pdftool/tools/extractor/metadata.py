"""Plugin reading the document information dictionary."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pypdf import PdfReader
from pypdf.errors import DependencyError, PdfReadError

from ...exceptions import MetadataReadError
from ...results import MetadataResult
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _date(info: Any, attribute: str, raw_attribute: str) -> str:
    """Return an ISO 8601 date, the raw PDF date string, or ``""``."""

    try:
        value = getattr(info, attribute)
    except ValueError:
        value = None
    if isinstance(value, datetime):
        return value.isoformat()
    return _text(getattr(info, raw_attribute, None))


@register_tool("extract_metadata")
class ExtractMetadataTool(BaseTool):
    """Read info fields, page count, size and the encryption flag.

    Missing fields come back empty. Encrypted documents that do not open
    with an empty password report ``encrypted=True`` and nothing else.
    """

    error_class = MetadataReadError

    def execute(self) -> MetadataResult:
        context = self.context
        source = context.require_input()
        file_size = source.stat().st_size

        reader = PdfReader(str(source))
        encrypted = reader.is_encrypted
        version = reader.pdf_header.lstrip("%").replace("PDF-", "")
        if encrypted and not self._opens_with_empty_password(reader):
            self.logger.debug("Encrypted document without empty password; skipping info dictionary")
            result = MetadataResult(file_size=file_size, encrypted=True, pdf_version=version)
            context.resources["result"] = result
            return result

        info = reader.metadata
        fields: dict[str, str] = {}
        if info is not None:
            fields = {
                "title": _text(info.title),
                "author": _text(info.author),
                "subject": _text(info.subject),
                "creator": _text(info.creator),
                "producer": _text(info.producer),
                "keywords": _text(info["/Keywords"] if "/Keywords" in info else None),
                "creation_date": _date(info, "creation_date", "creation_date_raw"),
                "modification_date": _date(info, "modification_date", "modification_date_raw"),
            }

        result = MetadataResult(
            page_count=len(reader.pages),
            file_size=file_size,
            encrypted=encrypted,
            pdf_version=version,
            **fields,
        )
        context.resources["result"] = result
        return result

    def _opens_with_empty_password(self, reader: PdfReader) -> bool:
        try:
            return bool(reader.decrypt(""))
        except (DependencyError, NotImplementedError, PdfReadError) as exc:
            self.logger.debug("Cannot decrypt document: %s", exc)
            return False
