"""Engine packaging arbitrary uploads into one ZIP archive."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

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

LOGGER = get_logger("versatools.tools.archive")

DEFAULT_ARCHIVE_NAME = "archive"


class ArchiveOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    filename: str = DEFAULT_ARCHIVE_NAME

    @field_validator("filename", mode="before")
    @classmethod
    def _default_when_missing(cls, value: object) -> object:
        return DEFAULT_ARCHIVE_NAME if value is None else value


class FileArchiver:
    kind = EngineKind.FILE_ARCHIVER
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 0.5
    options_model = ArchiveOptions

    def validate(self, raw_options: Any) -> ArchiveOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: ArchiveOptions) -> ExecutionResult:
        uploads = as_tool_input(data, self.tool_id).files()
        if not uploads:
            raise ProcessingError("No files provided for archiving")

        LOGGER.debug("Archiving %d file(s)", len(uploads))
        entries = [(upload.filename, upload.data) for upload in uploads]

        return ExecutionResult(
            output_stream=stream_zip(entries),
            metadata={
                "fileCount": len(uploads),
                "fileName": f"{options.filename or DEFAULT_ARCHIVE_NAME}.zip",
                "mimeType": "application/zip",
            },
        )
