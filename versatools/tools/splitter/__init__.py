"""PDF split engine and page-range planning."""

from __future__ import annotations

from .split import PdfSplitter, SplitOptions, archive_name
from .utils import PageRange, RANGE_PATTERN, entry_filename, parse_page_ranges

__all__ = [
    "PdfSplitter",
    "SplitOptions",
    "PageRange",
    "RANGE_PATTERN",
    "archive_name",
    "entry_filename",
    "parse_page_ranges",
]
