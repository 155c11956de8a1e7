"""Execution dispatcher turning a tool request into a transport response.

The dispatcher owns the only error boundary of the pipeline: engines raise
:class:`~versatools.errors.ToolError` subclasses and the dispatcher converts
them into structured payloads, after reporting telemetry exactly once.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from json import JSONDecodeError
from typing import Any, Iterator, Mapping
from urllib.parse import quote

from .core.utils import get_logger, sizeof_mb
from .errors import OptionsValidationError, ProcessingError, ToolError, ToolResolutionError
from .telemetry import ExecutionReport, ExecutionReporter, LoggingReporter
from .tools.common.interfaces import EngineInput, ExecutionMode, ExecutionResult, ToolCategory, ToolInput
from .tools.common.pipeline import RegisteredTool, ToolRegistry

LOGGER = get_logger("versatools.dispatcher")

METADATA_HEADER = "X-Tool-Metadata"
DURATION_HEADER = "X-Estimated-Duration"
DEFAULT_STREAM_SIZE_MB = 1.0


@dataclass
class TransportResponse:
    """Framework-neutral response handed back to the transport adapter."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Iterator[bytes] | None = None
    payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_error(cls, error: ToolError) -> "TransportResponse":
        return cls(status_code=error.status_code, payload=error.to_payload())


def parse_options(raw_options: Any) -> Any:
    """Decode a JSON options string; empty or missing options become ``{}``."""

    if raw_options is None:
        return {}
    if isinstance(raw_options, (bytes, bytearray)):
        raw_options = raw_options.decode("utf-8")
    if isinstance(raw_options, str):
        if not raw_options.strip():
            return {}
        try:
            return json.loads(raw_options)
        except JSONDecodeError as exc:
            raise OptionsValidationError(
                "options must be valid JSON.",
                details=[{"field": "options", "message": exc.msg}],
            ) from exc
    return raw_options


def content_disposition(filename: str) -> str:
    """Build an ``attachment`` disposition safe for latin-1 header encoding."""

    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "").replace("\\", "")
    fallback = fallback.strip() or "download"
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def format_duration(seconds: float) -> str:
    return f"{round(seconds, 2):g}"


def _default_content_type(category: ToolCategory) -> str:
    return "application/pdf" if category is ToolCategory.PDF else "application/octet-stream"


def _close_stream(stream: Iterator[bytes]) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        close()


class Dispatcher:
    """Resolve, validate and run tools registered on a :class:`ToolRegistry`."""

    def __init__(self, registry: ToolRegistry, reporter: ExecutionReporter | None = None) -> None:
        self.registry = registry
        self.reporter = reporter or LoggingReporter()

    def execute(
        self,
        tool_id: str,
        raw_input: EngineInput,
        raw_options: Any = None,
        *,
        content_length: int | None = None,
    ) -> TransportResponse:
        started = time.perf_counter()
        failure: str | None = None
        try:
            response = self._run(tool_id, raw_input, raw_options, content_length)
        except ToolError as exc:
            failure = exc.message
            LOGGER.warning("Tool execution failed [%s]: %s", tool_id, exc.message)
            response = TransportResponse.from_error(exc)
        except Exception as exc:
            failure = str(exc) or exc.__class__.__name__
            LOGGER.error("Tool execution failed [%s]", tool_id, exc_info=True)
            response = TransportResponse.from_error(ProcessingError(str(exc)))

        self._report(tool_id, int((time.perf_counter() - started) * 1000), failure)
        return response

    def _report(self, tool_id: str, duration_ms: int, failure: str | None) -> None:
        report = ExecutionReport(tool_id=tool_id, duration_ms=duration_ms, success=failure is None, error=failure)
        try:
            self.reporter.report(report)
        except Exception:
            LOGGER.error("Telemetry reporter failed for %s", tool_id, exc_info=True)

    def _run(
        self,
        tool_id: str,
        raw_input: EngineInput,
        raw_options: Any,
        content_length: int | None,
    ) -> TransportResponse:
        entry = self.registry.get(tool_id)
        if entry is None:
            raise ToolResolutionError(f"Tool '{tool_id}' not found.")

        engine = entry.engine
        size_mb = self._input_size_mb(entry, raw_input, content_length)

        options = engine.validate(parse_options(raw_options))
        result = engine.process(raw_input, options)

        try:
            headers = self._build_headers(entry, result, engine.estimate_duration(size_mb))
        except Exception:
            _close_stream(result.output_stream)
            raise
        return TransportResponse(status_code=200, headers=headers, body=result.output_stream)

    @staticmethod
    def _input_size_mb(entry: RegisteredTool, raw_input: EngineInput, content_length: int | None) -> float:
        if entry.engine.execution_mode is ExecutionMode.BATCH and isinstance(raw_input, ToolInput):
            return sizeof_mb(raw_input.total_file_bytes())
        if content_length:
            return sizeof_mb(content_length)
        return DEFAULT_STREAM_SIZE_MB

    @staticmethod
    def _build_headers(entry: RegisteredTool, result: ExecutionResult, estimate: float) -> dict[str, str]:
        metadata: Mapping[str, Any] = result.metadata
        mime_type = metadata.get("mimeType")
        headers = {
            "Content-Type": mime_type
            if isinstance(mime_type, str) and mime_type
            else _default_content_type(entry.descriptor.category),
            METADATA_HEADER: json.dumps(metadata, separators=(",", ":")),
            DURATION_HEADER: format_duration(estimate),
            "X-Content-Type-Options": "nosniff",
        }
        file_name = metadata.get("fileName")
        if isinstance(file_name, str) and file_name:
            headers["Content-Disposition"] = content_disposition(file_name)
        return headers


__all__ = [
    "Dispatcher",
    "TransportResponse",
    "parse_options",
    "content_disposition",
    "format_duration",
    "METADATA_HEADER",
    "DURATION_HEADER",
]
