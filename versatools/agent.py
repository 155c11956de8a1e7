"""Agent entry point: pick a tool from a prompt, then run it through the dispatcher."""

from __future__ import annotations

from typing import Any

from .core.utils import get_logger
from .dispatcher import DURATION_HEADER, METADATA_HEADER, Dispatcher, TransportResponse
from .errors import NoToolsAvailableError, ToolError, ToolResolutionError, UpstreamCallError
from .router import route
from .tools.common.interfaces import EngineInput
from .tools.common.pipeline import ToolRegistry

LOGGER = get_logger("versatools.agent")

AUTO_MODE = "auto"
MANUAL_MODE = "manual"
TOOL_ID_HEADER = "X-Agent-Tool-Id"
MODE_HEADER = "X-Agent-Mode"
RELAYED_HEADERS = (METADATA_HEADER, DURATION_HEADER, "Content-Disposition")


class AgentGateway:
    """Resolve a tool for an agent request and relay the tool's response.

    In ``auto`` mode the tool is chosen by :func:`versatools.router.route`
    from the AI-exposed tools; in ``manual`` mode the caller names it. Either
    way the tool must be AI-exposed.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    @property
    def registry(self) -> ToolRegistry:
        return self.dispatcher.registry

    def resolve(self, *, prompt: str | None, tool_id: str | None, mode: str | None) -> tuple[str, str]:
        """Return ``(tool_id, mode)`` or raise a :class:`ToolError`."""

        mode = mode or (MANUAL_MODE if tool_id else AUTO_MODE)

        if mode == AUTO_MODE:
            if not prompt:
                raise ToolResolutionError(
                    "A prompt query parameter is required to select a tool automatically.",
                    kind="MISSING_PROMPT",
                    status_code=400,
                )
            tools = self.registry.list_ai_exposed()
            if not tools:
                raise NoToolsAvailableError()
            tool_id = route(prompt, tools)
            LOGGER.debug("Routed prompt to %s", tool_id)

        if not tool_id:
            raise ToolResolutionError(
                "No toolId was given and automatic planning is not enabled.",
                kind="MISSING_TOOL_ID",
                status_code=400,
            )

        descriptor = self.registry.get_descriptor(tool_id)
        if descriptor is None or not descriptor.ai_exposed:
            raise ToolResolutionError(
                f"Tool '{tool_id}' is not available to the agent or does not exist.",
                kind="TOOL_NOT_AVAILABLE_FOR_AGENT",
                status_code=404,
            )
        return tool_id, mode

    def invoke(
        self,
        raw_input: EngineInput,
        raw_options: Any = None,
        *,
        prompt: str | None = None,
        tool_id: str | None = None,
        mode: str | None = None,
        content_length: int | None = None,
    ) -> TransportResponse:
        try:
            resolved_id, resolved_mode = self.resolve(prompt=prompt, tool_id=tool_id, mode=mode)
        except ToolError as exc:
            LOGGER.warning("Agent request rejected: %s", exc.message)
            return TransportResponse.from_error(exc)

        forwarded = self.dispatcher.execute(
            resolved_id, raw_input, raw_options, content_length=content_length
        )
        if not forwarded.ok:
            error = UpstreamCallError(forwarded.status_code, forwarded.payload)
            LOGGER.warning("Agent call to %s failed with status %s", resolved_id, forwarded.status_code)
            return TransportResponse.from_error(error)

        headers = {
            "Content-Type": forwarded.headers.get("Content-Type", "application/octet-stream"),
        }
        for name in RELAYED_HEADERS:
            if name in forwarded.headers:
                headers[name] = forwarded.headers[name]
        headers[TOOL_ID_HEADER] = resolved_id
        headers[MODE_HEADER] = resolved_mode

        return TransportResponse(status_code=200, headers=headers, body=forwarded.body)


__all__ = ["AgentGateway", "AUTO_MODE", "MANUAL_MODE", "TOOL_ID_HEADER", "MODE_HEADER"]
