"""Page-range planning for :mod:`versatools.tools.splitter`."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

RANGE_PATTERN = re.compile(r"[0-9,\-\s]*")


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

    def as_list(self) -> list[int]:
        return [self.start, self.end]


def _to_page(token: str) -> int | None:
    try:
        return int(token.strip())
    except ValueError:
        return None


def _explode(total_pages: int) -> List[PageRange]:
    return [PageRange(page, page) for page in range(1, total_pages + 1)]


def parse_page_ranges(raw: str | None, *, total_pages: int) -> List[PageRange]:
    """Parse a range expression such as ``"1-3,5,8-10"`` into a plan.

    An empty expression yields one single-page range per page. Every dash
    token expands into single-page ranges: reversed bounds are swapped, the
    end is clamped to ``total_pages`` and a start beyond the document drops
    the token. Single numbers outside ``[1, total_pages]`` are dropped, as
    are tokens that do not parse. The plan keeps token order.

    Returns:
        The ordered plan, possibly empty when nothing was in range.
    """

    expression = (raw or "").strip()
    if not expression:
        return _explode(total_pages)

    tokens = [part.strip() for part in expression.split(",") if part.strip()]

    plan: List[PageRange] = []
    for token in tokens:
        if "-" in token:
            bounds = token.split("-")
            start = _to_page(bounds[0])
            end = _to_page(bounds[1])
            if start is None or end is None:
                continue
            if start < 1 or end < 1:
                continue
            if start > end:
                start, end = end, start
            if start > total_pages:
                continue
            end = min(end, total_pages)
            plan.extend(PageRange(page, page) for page in range(start, end + 1))
        else:
            page = _to_page(token)
            if page is None or page < 1 or page > total_pages:
                continue
            plan.append(PageRange(page, page))

    return plan


def entry_filename(index: int) -> str:
    """Name of the ``index``-th (1-based) document inside the split archive."""

    return f"page_{index}.pdf"


__all__ = ["PageRange", "RANGE_PATTERN", "parse_page_ranges", "entry_filename"]
