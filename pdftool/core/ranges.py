"""Page specification parsing shared by split and image conversion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..exceptions import InvalidParameterError

ALL_PAGES = "all"


class InvalidPageRangeError(InvalidParameterError):
    """Raised when a page specification is malformed or out of bounds."""

    def __init__(self, ranges: object) -> None:
        super().__init__(f"Invalid or empty page ranges provided: {ranges!r}")
        self.ranges = ranges


@dataclass(frozen=True)
class PageRange:
    """Represents an inclusive, 1-based page range."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < 1:
            raise ValueError("Page numbers must be positive integers")
        if self.start > self.end:
            raise ValueError("Page range start must be less than or equal to end")

    def pages(self) -> range:
        return range(self.start, self.end + 1)

    def label(self) -> str:
        if self.start == self.end:
            return f"page_{self.start}"
        return f"pages_{self.start}-{self.end}"


def is_all(spec: str | None) -> bool:
    return spec is None or spec.strip().lower() in ("", ALL_PAGES)


def parse_page_spec(spec: str | None, *, total_pages: int | None = None) -> List[PageRange]:
    """Parse ``"all"`` or a comma separated list such as ``"1-3,5"``.

    ``"all"`` (or ``None``) expands to one single-page range per page and
    therefore needs *total_pages*. Explicit ranges are returned sorted by
    their first page. When *total_pages* is ``None`` only the syntax is
    checked.

    Raises:
        InvalidPageRangeError: If a token is malformed, reversed, or falls
            outside ``1..total_pages``.
    """

    if is_all(spec):
        if total_pages is None:
            return []
        return [PageRange(number, number) for number in range(1, total_pages + 1)]

    tokens = [token.strip() for token in spec.split(",") if token.strip()]
    if not tokens:
        raise InvalidPageRangeError(spec)

    parsed: List[PageRange] = []
    for token in tokens:
        start_str, separator, end_str = token.partition("-")
        try:
            start = int(start_str)
            end = int(end_str) if separator else start
        except ValueError as exc:
            raise InvalidPageRangeError(token) from exc
        if start < 1 or start > end:
            raise InvalidPageRangeError(token)
        if total_pages is not None and end > total_pages:
            raise InvalidPageRangeError(token)
        parsed.append(PageRange(start, end))

    return sorted(parsed, key=lambda item: (item.start, item.end))


def selected_pages(spec: str | None, *, total_pages: int) -> List[int]:
    """Flatten *spec* into sorted, unique page numbers."""

    numbers = {page for page_range in parse_page_spec(spec, total_pages=total_pages) for page in page_range.pages()}
    return sorted(numbers)


__all__ = [
    "ALL_PAGES",
    "InvalidPageRangeError",
    "PageRange",
    "is_all",
    "parse_page_spec",
    "selected_pages",
]
