"""Exception hierarchy shared by the dispatcher, router and engines.

Every error carries a stable ``kind`` string that callers use to tell bad
input apart from failures worth retrying.
"""

from __future__ import annotations

from typing import Any, Iterable


class ToolError(Exception):
    """Base exception for all VersaTools errors."""

    kind = "PROCESSING_FAILED"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unexpected error occurred during processing."

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class OptionsValidationError(ToolError):
    """Raised when raw options do not conform to an engine's schema."""

    kind = "INVALID_OPTIONS"
    status_code = 400

    def __init__(self, message: str = "", *, details: Iterable[dict[str, Any]] = ()) -> None:
        super().__init__(message)
        self.details = list(details)

    @property
    def default_message(self) -> str:
        return "Invalid tool options."

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.details:
            payload["details"] = self.details
        return payload


class ToolResolutionError(ToolError):
    """Raised when a tool id cannot be resolved to a registered engine."""

    kind = "TOOL_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "", *, kind: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code

    @property
    def default_message(self) -> str:
        return "Tool not found."


class NoToolsAvailableError(ToolError):
    """Raised when the router is asked to choose from an empty tool set."""

    kind = "NO_TOOLS_AVAILABLE"
    status_code = 503

    @property
    def default_message(self) -> str:
        return "No tools are currently available to the agent."


class ProcessingError(ToolError):
    """Raised by an engine when execution fails. Always retryable."""

    kind = "PROCESSING_FAILED"
    status_code = 500
    retryable = True

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["retryable"] = self.retryable
        return payload


class UpstreamCallError(ToolError):
    """Raised when a forwarded call to another tool fails."""

    kind = "TOOL_CALL_FAILED"
    status_code = 502

    def __init__(self, upstream_status: int, upstream_body: Any = None, message: str = "") -> None:
        super().__init__(message or f"Tool call failed with status {upstream_status}.")
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "status": self.upstream_status,
            "toolError": self.upstream_body,
        }


__all__ = [
    "ToolError",
    "OptionsValidationError",
    "ToolResolutionError",
    "NoToolsAvailableError",
    "ProcessingError",
    "UpstreamCallError",
]
