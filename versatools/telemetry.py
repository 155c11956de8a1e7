"""Execution telemetry emitted once per dispatched tool call."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from .core.utils import get_logger

LOGGER = get_logger("versatools.telemetry")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ExecutionReport:
    tool_id: str
    duration_ms: int
    success: bool
    error: str | None = None
    timestamp: str = field(default_factory=_utc_now)

    @property
    def status(self) -> str:
        return "SUCCESS" if self.success else "FAILED"

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tool": self.tool_id,
            "durationMs": self.duration_ms,
            "status": self.status,
            "timestamp": self.timestamp,
        }
        if self.error:
            data["error"] = self.error
        return data


class ExecutionReporter(Protocol):
    def report(self, report: ExecutionReport) -> None: ...


class LoggingReporter:
    """Writes execution reports to the ``versatools.telemetry`` logger."""

    def report(self, report: ExecutionReport) -> None:
        line = json.dumps(report.as_dict(), ensure_ascii=False)
        if report.success:
            LOGGER.info("Tool Execution Report %s", line)
        else:
            LOGGER.error("Tool Execution Failed %s", line)


__all__ = ["ExecutionReport", "ExecutionReporter", "LoggingReporter"]
