"""FastAPI application exposing the VersaTools dispatcher over HTTP."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse, Response, StreamingResponse

from versatools import AgentGateway, Dispatcher, ToolInput, ToolRegistry, TransportResponse, UploadedFile, __version__
from versatools.tools import build_registry
from versatools.tools.common.interfaces import EngineInput, ExecutionMode

DOCS_PREFIX = "/api"
OPTIONS_FIELD = "options"
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def create_app(registry: ToolRegistry | None = None) -> FastAPI:
    """Build the API around ``registry`` (the built-in tools by default)."""

    application = FastAPI(title="VersaTools API", version=__version__)
    dispatcher = Dispatcher(registry if registry is not None else build_registry())
    application.state.dispatcher = dispatcher
    application.state.gateway = AgentGateway(dispatcher)
    _register_routes(application)
    return application


def _to_response(result: TransportResponse) -> Response:
    if result.body is None:
        return JSONResponse(result.payload or {}, status_code=result.status_code, headers=result.headers or None)
    return StreamingResponse(result.body, status_code=result.status_code, headers=result.headers)


def _content_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


def _is_form(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() in FORM_CONTENT_TYPES


async def _read_form(request: Request) -> tuple[ToolInput, str | None]:
    """Decode a form body into a :class:`ToolInput` and its ``options`` field."""

    form = await request.form()
    tool_input = ToolInput()
    options: str | None = None
    for name, value in form.multi_items():
        if isinstance(value, str):
            if name == OPTIONS_FIELD:
                options = value
                continue
            tool_input.add(name, value)
            continue
        data = await value.read()
        tool_input.add(
            name,
            UploadedFile(
                filename=value.filename or name,
                content_type=value.content_type or "application/octet-stream",
                data=data,
            ),
        )
    return tool_input, options


async def _read_input(request: Request, mode: ExecutionMode | None) -> tuple[EngineInput, Any]:
    query_options = request.query_params.get(OPTIONS_FIELD)
    if mode is ExecutionMode.STREAM or (mode is None and not _is_form(request)):
        body = await request.body()
        return [body], query_options
    tool_input, form_options = await _read_form(request)
    return tool_input, form_options or query_options


def _register_routes(application: FastAPI) -> None:
    @application.get("/health", response_class=JSONResponse)
    async def health() -> dict[str, str]:
        """Lightweight health endpoint for uptime checks."""
        return {"status": "ok"}

    @application.get(
        f"{DOCS_PREFIX}/openapi.json",
        include_in_schema=False,
        name="prefixed_openapi",
    )
    async def prefixed_openapi() -> JSONResponse:
        """Expose the OpenAPI schema under the gateway's ``/api`` prefix."""

        return JSONResponse(application.openapi())

    @application.get(f"{DOCS_PREFIX}/docs", include_in_schema=False)
    async def prefixed_swagger_ui(request: Request) -> HTMLResponse:
        """Serve Swagger UI from the same ``/api`` prefix used by the gateway."""

        return get_swagger_ui_html(
            openapi_url=str(request.url_for("prefixed_openapi")),
            title=f"{application.title} - Swagger UI",
        )

    @application.get(f"{DOCS_PREFIX}/tools")
    async def list_tools(request: Request) -> list[dict[str, Any]]:
        """List every registered tool descriptor in registration order."""

        dispatcher: Dispatcher = request.app.state.dispatcher
        return [descriptor.as_dict() for descriptor in dispatcher.registry.list_all()]

    @application.post(f"{DOCS_PREFIX}/tools/{{tool_id}}")
    async def execute_tool(tool_id: str, request: Request) -> Response:
        """Run ``tool_id`` on the uploaded files and stream the result back.

        Batch tools take a multipart form with an optional JSON ``options``
        field; stream tools take the raw request body. Options may also be
        passed as an ``options`` query parameter.
        """

        dispatcher: Dispatcher = request.app.state.dispatcher
        engine = dispatcher.registry.get_engine(tool_id)
        mode = engine.execution_mode if engine is not None else ExecutionMode.BATCH
        raw_input, raw_options = await _read_input(request, mode)

        result = await run_in_threadpool(
            dispatcher.execute,
            tool_id,
            raw_input,
            raw_options,
            content_length=_content_length(request),
        )
        return _to_response(result)

    @application.post(f"{DOCS_PREFIX}/agent")
    async def agent(request: Request) -> Response:
        """Select a tool from ``prompt`` (auto mode) or ``toolId`` and run it."""

        gateway: AgentGateway = request.app.state.gateway
        params = request.query_params
        raw_input, raw_options = await _read_input(request, None)

        result = await run_in_threadpool(
            gateway.invoke,
            raw_input,
            raw_options,
            prompt=params.get("prompt") or "",
            tool_id=params.get("toolId"),
            mode=params.get("mode"),
            content_length=_content_length(request),
        )
        return _to_response(result)


app = create_app()

__all__ = ["app", "create_app"]
