"""Core interfaces and value objects shared by VersaTools engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Protocol, TypeVar, Union, runtime_checkable

from pydantic import BaseModel, ValidationError

from ...errors import OptionsValidationError, ProcessingError

MIN_ESTIMATED_SECONDS = 2.0


class ToolCategory(str, Enum):
    PDF = "pdf"
    IMAGE = "image"
    FILE = "file"
    TEXT = "text"
    UTILITY = "utility"


class ExecutionMode(str, Enum):
    """How an engine receives its raw input."""

    STREAM = "stream"
    BATCH = "batch"


class EngineKind(str, Enum):
    """Closed set of engine variants. The value doubles as the tool id."""

    PDF_MERGER = "pdf-merger"
    PDF_SPLITTER = "pdf-splitter"
    IMAGE_COMPRESSOR = "image-compressor"
    BG_REMOVER = "bg-remover"
    WATERMARK_REMOVER = "watermark-remover"
    FILE_ARCHIVER = "file-archiver"
    VIDEO_TO_GIF = "video-to-gif"
    QR_GENERATOR = "qr-generator"
    TEXT_TRANSLATOR = "text-translator"


@dataclass(frozen=True)
class UploadedFile:
    """A file field received from the transport layer."""

    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    def is_pdf(self) -> bool:
        return self.content_type == "application/pdf" or self.filename.lower().endswith(".pdf")

    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def is_video(self) -> bool:
        return self.content_type.startswith("video/")


FieldValue = Union[UploadedFile, str]


@dataclass
class ToolInput:
    """Ordered set of named form fields handed to a batch-mode engine."""

    fields: list[tuple[str, FieldValue]] = field(default_factory=list)

    def add(self, name: str, value: FieldValue) -> "ToolInput":
        self.fields.append((name, value))
        return self

    def files(self) -> list[UploadedFile]:
        return [value for _, value in self.fields if isinstance(value, UploadedFile)]

    def get(self, name: str) -> FieldValue | None:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def get_file(self, name: str) -> UploadedFile | None:
        value = self.get(name)
        return value if isinstance(value, UploadedFile) else None

    def get_text(self, name: str) -> str | None:
        value = self.get(name)
        return value if isinstance(value, str) else None

    def total_file_bytes(self) -> int:
        return sum(upload.size for upload in self.files())


EngineInput = Union[ToolInput, Iterable[bytes]]


@dataclass
class ExecutionResult:
    """Output of :meth:`ProcessingEngine.process`.

    ``metadata`` is complete when the result is returned; ``output_stream``
    is a single-pass iterator and must be consumed at most once.
    """

    output_stream: Iterator[bytes]
    metadata: dict[str, Any]


OptionsT = TypeVar("OptionsT", bound=BaseModel)


@runtime_checkable
class ProcessingEngine(Protocol):
    """Interface every engine variant exposes to the dispatcher."""

    kind: EngineKind
    tool_id: str
    execution_mode: ExecutionMode
    processing_rate: float

    def validate(self, raw_options: Any) -> BaseModel: ...

    def process(self, data: EngineInput, options: Any) -> ExecutionResult: ...

    def estimate_duration(self, size_mb: float) -> float: ...


def _format_location(location: Iterable[object]) -> str:
    return ".".join(str(part) for part in location) or "options"


def validate_options(model: type[OptionsT], raw_options: Any) -> OptionsT:
    """Validate ``raw_options`` against ``model``.

    Raises:
        OptionsValidationError: naming each violated field and constraint.
    """

    if raw_options is None:
        raw_options = {}
    if not isinstance(raw_options, Mapping):
        raise OptionsValidationError(
            "Options must be a JSON object.",
            details=[{"field": "options", "message": "Input should be an object"}],
        )
    try:
        return model.model_validate(dict(raw_options))
    except ValidationError as exc:
        details = [
            {"field": _format_location(error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        summary = "; ".join(f"{item['field']}: {item['message']}" for item in details)
        raise OptionsValidationError(f"Invalid options: {summary}", details=details) from exc


def estimate_duration(processing_rate: float, size_mb: float) -> float:
    """Advisory duration in seconds, never less than two seconds."""

    return max(MIN_ESTIMATED_SECONDS, size_mb * processing_rate)


def as_tool_input(data: EngineInput, tool_id: str) -> ToolInput:
    if not isinstance(data, ToolInput):
        raise ProcessingError(f"Tool '{tool_id}' expects form data input")
    return data


__all__ = [
    "ToolCategory",
    "ExecutionMode",
    "EngineKind",
    "UploadedFile",
    "FieldValue",
    "ToolInput",
    "EngineInput",
    "ExecutionResult",
    "ProcessingEngine",
    "validate_options",
    "estimate_duration",
    "as_tool_input",
    "MIN_ESTIMATED_SECONDS",
]
