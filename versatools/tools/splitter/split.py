"""Engine splitting one PDF into a ZIP of documents following a range plan."""

from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, field_validator
from pypdf import PdfReader, PdfWriter

from ...core.utils import get_logger
from ...errors import ProcessingError
from ..common.archive import stream_zip
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    as_tool_input,
    estimate_duration,
    validate_options,
)
from ..merger.merge import load_reader
from .utils import RANGE_PATTERN, PageRange, entry_filename, parse_page_ranges

LOGGER = get_logger("versatools.tools.split")


class SplitOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ranges: str = ""

    @field_validator("ranges", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("ranges")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if not RANGE_PATTERN.fullmatch(value):
            raise ValueError(
                "Invalid page ranges format. Use numbers, commas, and dashes only (e.g. 1-3,5,8-10)."
            )
        return value


def archive_name(today: date) -> str:
    return f"Pdfsplit_{today:%d%m%Y}.zip"


def _render_range(reader: PdfReader, page_range: PageRange) -> bytes:
    writer = PdfWriter()
    try:
        for page_number in range(page_range.start, page_range.end + 1):
            writer.add_page(reader.pages[page_number - 1])
        buffer = BytesIO()
        writer.write(buffer)
    except Exception as exc:
        raise ProcessingError(
            f"Failed to extract pages {page_range.start}-{page_range.end}: {exc}"
        ) from exc
    return buffer.getvalue()


class PdfSplitter:
    kind = EngineKind.PDF_SPLITTER
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 0.5
    options_model = SplitOptions

    def __init__(self, clock: Callable[[], date] = date.today) -> None:
        self._clock = clock

    def validate(self, raw_options: Any) -> SplitOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: SplitOptions) -> ExecutionResult:
        form = as_tool_input(data, self.tool_id)
        uploads = [upload for upload in form.files() if upload.is_pdf()]
        if len(uploads) != 1:
            raise ProcessingError("Exactly 1 PDF file is required for splitting")

        upload = uploads[0]
        reader = load_reader(upload)
        total_pages = len(reader.pages)
        plan = parse_page_ranges(options.ranges, total_pages=total_pages)
        if not plan:
            raise ProcessingError("No valid page ranges found")

        LOGGER.debug("Splitting %s (%d pages) into %d document(s)", upload.filename, total_pages, len(plan))

        entries = [
            (entry_filename(index), lambda page_range=page_range: _render_range(reader, page_range))
            for index, page_range in enumerate(plan, start=1)
        ]

        return ExecutionResult(
            output_stream=stream_zip(entries),
            metadata={
                "originalName": upload.filename,
                "pageCount": total_pages,
                "extractedRanges": [page_range.as_list() for page_range in plan],
                "fileCount": len(plan),
                "mimeType": "application/zip",
                "fileName": archive_name(self._clock()),
            },
        )
