"""VersaTools: a dispatch layer for self-contained file-processing tools."""

from __future__ import annotations

from .agent import AgentGateway
from .dispatcher import Dispatcher, TransportResponse, parse_options
from .errors import (
    NoToolsAvailableError,
    OptionsValidationError,
    ProcessingError,
    ToolError,
    ToolResolutionError,
    UpstreamCallError,
)
from .router import route
from .telemetry import ExecutionReport, ExecutionReporter, LoggingReporter
from .tools import build_registry, initialize_tools
from .tools.common.interfaces import (
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    ProcessingEngine,
    ToolCategory,
    ToolInput,
    UploadedFile,
)
from .tools.common.pipeline import RegisteredTool, ToolDescriptor, ToolRegistry

__version__ = "0.3.0"

__all__ = [
    "AgentGateway",
    "Dispatcher",
    "TransportResponse",
    "parse_options",
    "route",
    "build_registry",
    "initialize_tools",
    "ToolRegistry",
    "ToolDescriptor",
    "RegisteredTool",
    "ProcessingEngine",
    "EngineKind",
    "ExecutionMode",
    "ExecutionResult",
    "ToolCategory",
    "ToolInput",
    "UploadedFile",
    "ExecutionReport",
    "ExecutionReporter",
    "LoggingReporter",
    "ToolError",
    "OptionsValidationError",
    "ToolResolutionError",
    "NoToolsAvailableError",
    "ProcessingError",
    "UpstreamCallError",
]
