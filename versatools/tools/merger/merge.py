"""Engine concatenating uploaded PDFs into one document."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict
from pypdf import PdfReader, PdfWriter

from ...core.utils import get_logger, iter_bytes
from ...errors import ProcessingError
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    UploadedFile,
    as_tool_input,
    estimate_duration,
    validate_options,
)

LOGGER = get_logger("versatools.tools.merge")

OUTPUT_FILENAME = "merged-document.pdf"


class MergeOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")


def load_reader(upload: UploadedFile) -> PdfReader:
    """Open ``upload`` with pypdf, decrypting empty-password documents."""

    try:
        reader = PdfReader(BytesIO(upload.data))
    except Exception as exc:
        raise ProcessingError(f"Failed to read PDF '{upload.filename}': {exc}") from exc

    if reader.is_encrypted:
        LOGGER.debug("Attempting to decrypt encrypted PDF %s", upload.filename)
        try:
            reader.decrypt("")
        except Exception as exc:
            raise ProcessingError(f"Unable to decrypt encrypted PDF: {upload.filename}") from exc
    return reader


def merge_pdf_documents(uploads: Sequence[UploadedFile]) -> tuple[bytes, int]:
    """Concatenate ``uploads`` in order and return ``(pdf_bytes, page_count)``."""

    writer = PdfWriter()
    for upload in uploads:
        reader = load_reader(upload)
        try:
            for page_index, page in enumerate(reader.pages):
                LOGGER.debug("Adding page %s from %s", page_index, upload.filename)
                writer.add_page(page)
        except ProcessingError:
            raise
        except Exception as exc:
            raise ProcessingError(f"Failed to merge PDFs: {exc}") from exc

    buffer = BytesIO()
    try:
        writer.write(buffer)
    except Exception as exc:
        raise ProcessingError(f"Failed to merge PDFs: {exc}") from exc
    return buffer.getvalue(), len(writer.pages)


class PdfMerger:
    kind = EngineKind.PDF_MERGER
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 0.5
    options_model = MergeOptions

    def validate(self, raw_options: Any) -> MergeOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: MergeOptions) -> ExecutionResult:
        form = as_tool_input(data, self.tool_id)
        uploads = [upload for upload in form.files() if upload.is_pdf()]
        if len(uploads) < 2:
            raise ProcessingError("At least 2 PDF files are required for merging")

        LOGGER.debug("Merging %d input(s)", len(uploads))
        pdf_bytes, page_count = merge_pdf_documents(uploads)
        LOGGER.info("Merged %d PDFs into %d pages", len(uploads), page_count)

        return ExecutionResult(
            output_stream=iter_bytes(pdf_bytes),
            metadata={
                "fileCount": len(uploads),
                "pageCount": page_count,
                "outputSize": len(pdf_bytes),
                "mimeType": "application/pdf",
                "fileName": OUTPUT_FILENAME,
            },
        )
