"""MCP server exposing operation search and execution."""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .config import Settings
from .executors import format_results
from .service import StaticConfigurationProvider, SwaggerApiService

logger = logging.getLogger(__name__)


def build_server(settings: Settings) -> tuple[FastMCP, object | None]:
    service = SwaggerApiService(settings)

    mcp = FastMCP(settings.service_name, instructions=_instructions())
    app = _get_http_app(mcp, settings)
    _attach_auth(app, settings)
    _attach_healthcheck(app)

    for name, handler in _tool_handlers(service).items():
        mcp.tool(name=name)(handler)
        logger.info("Registered tool: %s", name)

    return mcp, app


def _tool_handlers(service: SwaggerApiService) -> Dict[str, Any]:
    async def search_operations(
        credentials: Dict[str, Any], filter_text: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """List operations in the API specification, grouped by tag."""
        provider = StaticConfigurationProvider(credentials)
        entries = await service.search_operations(provider, filter_text)
        return [asdict(entry) for entry in entries]

    async def list_path_parameters(
        credentials: Dict[str, Any], operation: str
    ) -> List[Dict[str, Any]]:
        """Suggest path parameters for the selected operation."""
        provider = StaticConfigurationProvider(credentials, {"operation": operation})
        options = await service.path_parameter_options(provider)
        return [asdict(option) for option in options]

    async def list_query_parameters(
        credentials: Dict[str, Any], operation: str
    ) -> List[Dict[str, Any]]:
        """Suggest query parameters for the selected operation."""
        provider = StaticConfigurationProvider(credentials, {"operation": operation})
        options = await service.query_parameter_options(provider)
        return [asdict(option) for option in options]

    async def call_operation(
        credentials: Dict[str, Any],
        items: List[Dict[str, Any]],
        continue_on_fail: bool = False,
    ) -> List[Dict[str, Any]]:
        """Execute the selected operation once per item."""
        results = await service.execute(credentials, items, continue_on_fail)
        return format_results(results)

    return {
        "search_operations": search_operations,
        "list_path_parameters": list_path_parameters,
        "list_query_parameters": list_query_parameters,
        "call_operation": call_operation,
    }


def _attach_auth(app, settings: Settings) -> None:  # type: ignore[no-untyped-def]
    if not app:
        logger.warning("FastMCP app not available; auth middleware disabled")
        return
    if not settings.adapter_auth_token:
        return

    @app.middleware("http")
    async def auth_middleware(request, call_next):  # type: ignore[no-untyped-def]
        if request.method == "OPTIONS":
            return await call_next(request)
        if request.url.path.endswith("/health"):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        token = auth_header.replace("Bearer", "").strip()
        if token == settings.adapter_auth_token:
            return await call_next(request)

        from starlette.responses import JSONResponse

        return JSONResponse({"error": "Unauthorized"}, status_code=401)


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions() -> str:
    return (
        "Swagger API adapter. Search the operations of any Swagger 2 or OpenAPI 3 "
        "document, then call one with path, query, header and body values."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.adapter_transport.lower()
    if transport in {"http"}:
        app = mcp.http_app(transport="http", stateless_http=True, json_response=True)
        _attach_cors(app)
        return app
    if transport in {"streamable-http", "streamablehttp"}:
        app = mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
        _attach_cors(app)
        return app
    if transport in {"sse"}:
        app = mcp.sse_app()
        _attach_cors(app)
        return app
    return None


def _attach_cors(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return
    from starlette.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
