"""MCP server façade and transport adapters.

`MCPServer` owns one registry, one admission chain, and one invocation
pipeline. Tools and middleware are added during startup; the first call to
`start`, `http_app`, or `handle` seals both, after which the server is
read-only for its serving lifetime.

Transports:

1. **stdio** - MCP protocol for Cursor, Claude Desktop, VS Code (`start`)
2. **HTTP/REST** - plain endpoints for web backends (`http_app`, `serve_http`)
   - GET  /tools         → catalog
   - POST /tools/{name}  → invoke tool with JSON body as arguments
   - GET  /manifest      → manifest

Example:
    >>> server = create_server("demo-mcp", rate_limit=RateLimitOptions(max=100, time_window="1m"))
    >>> server.register_tool(greet)
    >>> await server.start()

Requires: pip install mcpforge[mcp] (for stdio)
         pip install mcpforge[http] (for HTTP endpoints)
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import orjson

from mcpforge.foundation.config import AuthOptions, CorsOptions, RateLimitOptions, ServerSettings, get_settings
from mcpforge.foundation.core import Capabilities, DefaultCapabilities, ToolDescriptor
from mcpforge.foundation.errors import ConfigurationError
from mcpforge.foundation.registry import ToolRegistry
from mcpforge.runtime.middleware import (
    AdmissionRequest,
    AdmissionResponse,
    AuthMiddleware,
    CorsMiddleware,
    ErrorMiddleware,
    HeaderAuthMiddleware,
    HeaderValidator,
    Middleware,
    Next,
    RateLimitMiddleware,
    compose,
)
from mcpforge.runtime.observability import BoundLogger, get_logger
from mcpforge.runtime.pipeline import CallToolResult, InvocationPipeline, ToolListing

from .manifest import Manifest, generate_manifest
from .protocol import CallToolRequest, http_status, rejection_to_result

if TYPE_CHECKING:
    from starlette.applications import Starlette

_TOOLS_PREFIX = "/tools/"


class MCPServer:
    """Tool server: registry + admission chain + invocation pipeline.

    An error guard wraps the whole chain, so a raising middleware or auth
    validator yields a 500 rejection rather than an exception. Built-in
    admission from configuration runs next, in the fixed order
    CORS → auth → rate limit, followed by `middleware` and anything added
    with `use()`, in the order given.

    Args:
        name: Server name shown to clients
        version: Server version
        description: Human-readable description (manifest)
        capabilities: Capability set forwarded to handlers (default: httpx client + env)
        auth: Token authentication options
        rate_limit: Sliding-window limit options
        cors: CORS options, or True for defaults
        middleware: Additional admission middleware
        settings: Source for defaults (timeouts, rate-limit default key)
        logger: Base logger

    Example:
        >>> server = MCPServer("demo-mcp", auth=AuthOptions(type="bearer", validate=check_token))
        >>> server.register_tool(calculate)
        >>> result = await server.call_tool("calculate", {"operation": "add", "a": 1, "b": 2})
    """

    __slots__ = (
        "_name", "_version", "_description", "_settings", "_log", "_registry", "_capabilities",
        "_pipeline", "_middleware", "_chain", "_auth", "_rate_limit", "_cors", "_serve_task", "_sealed",
    )

    def __init__(
        self,
        name: str | None = None,
        *,
        version: str | None = None,
        description: str | None = None,
        capabilities: Capabilities | None = None,
        auth: AuthOptions | None = None,
        rate_limit: RateLimitOptions | None = None,
        cors: CorsOptions | bool | None = None,
        middleware: Iterable[Middleware] = (),
        settings: ServerSettings | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._name = name or self._settings.name
        self._version = version or self._settings.version
        self._description = description if description is not None else self._settings.description
        self._log = (logger or get_logger("mcpforge.server")).bind(server=self._name)
        self._capabilities = capabilities or DefaultCapabilities.from_settings(self._settings)
        self._registry = ToolRegistry(logger=self._log)
        self._pipeline = InvocationPipeline(self._registry, self._capabilities, self._log.bind(component="pipeline"))
        self._auth = auth
        self._rate_limit = rate_limit
        self._cors = CorsOptions() if cors is True else (cors or None)
        self._middleware: list[Middleware] = self._builtin_middleware()
        self._middleware.extend(middleware)
        self._chain: Next | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._sealed = False

    @classmethod
    def from_settings(cls, settings: ServerSettings | None = None, **kwargs: Any) -> MCPServer:
        """Build a server whose auth, rate limit and CORS come from `MCPFORGE_*` settings.

        Keyword arguments override what the settings provide.
        """
        settings = settings or get_settings()
        defaults: dict[str, Any] = {
            "rate_limit": settings.rate_limit.options(),
            "cors": settings.cors.options(),
        }
        if settings.auth.type is not None:
            defaults["auth"] = AuthOptions(type=settings.auth.type, header_name=settings.auth.header_name)
        return cls(settings=settings, **{**defaults, **kwargs})

    def _builtin_middleware(self) -> list[Middleware]:
        chain: list[Middleware] = [ErrorMiddleware(
            expose_messages=self._settings.is_development,
            log=self._log.bind(component="admission"),
        )]
        if self._cors is not None:
            chain.append(CorsMiddleware(self._cors))
        if self._auth is not None:
            chain.append(AuthMiddleware(self._auth, self._capabilities, self._log.bind(component="auth")))
        if self._rate_limit is not None:
            chain.append(RateLimitMiddleware(
                self._rate_limit,
                default_key=self._settings.rate_limit.default_key,
                log=self._log.bind(component="rate_limit"),
            ))
        return chain

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def pipeline(self) -> InvocationPipeline:
        return self._pipeline

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        """Registered tools in registration order."""
        return self._registry.list()

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    # ─────────────────────────────────────────────────────────────────
    # Registration (startup only)
    # ─────────────────────────────────────────────────────────────────

    def register_tool(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        """Register a tool. Raises DuplicateToolError on a name clash."""
        return self._registry.register(descriptor)

    def register_tools(self, descriptors: Iterable[ToolDescriptor]) -> None:
        for descriptor in descriptors:
            self.register_tool(descriptor)

    def use(self, middleware: Middleware) -> None:
        """Append admission middleware. First added = outermost."""
        if self._sealed:
            raise ConfigurationError("Cannot add middleware: server is already serving")
        self._middleware.append(middleware)
        self._chain = None

    def use_auth(self, validator: HeaderValidator) -> None:
        """Gate every request on `validator(headers)`; false yields 401 `Unauthorized`."""
        self.use(HeaderAuthMiddleware(validator, self._log.bind(component="auth")))

    def seal(self) -> None:
        """End the registration phase. Called implicitly when serving starts."""
        if not self._sealed:
            self._sealed = True
            self._registry.seal()
            self._log.debug("server sealed", tools=len(self._registry), middleware=len(self._middleware))

    # ─────────────────────────────────────────────────────────────────
    # Catalog / Calls
    # ─────────────────────────────────────────────────────────────────

    def list_tools(self) -> list[ToolListing]:
        return self._pipeline.list_tools()

    def manifest(self) -> Manifest:
        return generate_manifest(
            self._registry,
            name=self._name,
            version=self._version,
            description=self._description,
            auth=self._auth,
            rate_limit=self._rate_limit,
            cors=self._cors,
        )

    async def handle(self, request: AdmissionRequest) -> AdmissionResponse:
        """Run a request through the admission chain and, if admitted, the router."""
        if self._chain is None:
            self.seal()
            self._chain = compose(self._middleware, self._route)
        return await self._chain(request)

    async def call_tool(
        self,
        name: str,
        arguments: object = None,
        *,
        request_id: str | None = None,
        headers: Mapping[str, str] | None = None,
        client_ip: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> CallToolResult:
        """Call a tool through admission and the pipeline. Never raises for per-call faults.

        An admission rejection comes back as an error envelope.
        """
        request = AdmissionRequest(
            "POST",
            f"{_TOOLS_PREFIX}{name}",
            headers or {},
            body={} if arguments is None else arguments,
            client_ip=client_ip,
            tool_name=name,
            request_id=request_id,
        )
        if cancel is not None:
            request["cancel"] = cancel
        response = await self.handle(request)
        if isinstance(result := request.get("result"), CallToolResult):
            return result
        return rejection_to_result(name, response)

    async def _route(self, request: AdmissionRequest) -> AdmissionResponse:
        match request.method, request.path:
            case "GET", "/tools":
                return AdmissionResponse(body={"tools": [t.to_wire() for t in self.list_tools()]})
            case "GET", "/manifest":
                return AdmissionResponse(body=self.manifest().to_dict())
            case "POST", str(path) if path.startswith(_TOOLS_PREFIX) and len(path) > len(_TOOLS_PREFIX):
                name = request.tool_name or path[len(_TOOLS_PREFIX):]
                cancel = request.get("cancel")
                result = await self._pipeline.invoke(
                    name,
                    {} if request.body is None else request.body,
                    request_id=request.ensure_request_id(),
                    identity=request.identity,
                    headers=request.headers,
                    cancel=cancel if isinstance(cancel, asyncio.Event) else None,
                )
                request["result"] = result
                return AdmissionResponse(status=http_status(result), body=result.to_wire())
            case _:
                return AdmissionResponse.reject(404, "Not found", f"No route for {request.method} {request.path}")

    # ─────────────────────────────────────────────────────────────────
    # stdio transport (MCP protocol)
    # ─────────────────────────────────────────────────────────────────

    def _create_mcp_server(self) -> Any:
        """Create a low-level MCP server wired to this façade."""
        try:
            from mcp import types
            from mcp.server import Server
        except ImportError as e:
            raise ImportError(
                "stdio transport requires the MCP SDK. "
                "Install with: pip install mcpforge[mcp]"
            ) from e

        server = Server(self._name, version=self._version)

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
                for t in self.list_tools()
            ]

        async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
            call = CallToolRequest.from_mcp(req.params)
            result = await self.call_tool(call.name, call.arguments, request_id=call.request_id)
            return types.ServerResult(types.CallToolResult(
                content=[types.TextContent(type="text", text=c.text) for c in result.content],
                isError=result.is_error,
            ))

        # Registered directly so the SDK does not validate arguments on our behalf
        server.request_handlers[types.CallToolRequest] = call_tool
        return server

    async def start(self) -> None:
        """Serve MCP over stdio until the peer disconnects or `stop()` is called."""
        try:
            from mcp.server.stdio import stdio_server
        except ImportError as e:
            raise ImportError(
                "stdio transport requires the MCP SDK. "
                "Install with: pip install mcpforge[mcp]"
            ) from e

        self.seal()
        server = self._create_mcp_server()
        self._log.info("server starting", transport="stdio", tools=len(self._registry), version=self._version)

        async def run() -> None:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())

        self._serve_task = asyncio.create_task(run())
        try:
            await self._serve_task
        except asyncio.CancelledError:
            if self._serve_task is None or not self._serve_task.cancelled():
                raise
        finally:
            self._serve_task = None
            self._log.info("server stopped")

    async def stop(self) -> None:
        """Stop serving and release capability resources."""
        self._log.info("server stopping")
        if self._serve_task is not None and not self._serve_task.done():
            self._serve_task.cancel()
        if isinstance(self._capabilities, DefaultCapabilities):
            await self._capabilities.aclose()

    # ─────────────────────────────────────────────────────────────────
    # HTTP transport
    # ─────────────────────────────────────────────────────────────────

    def http_app(self) -> Starlette:
        """Create a Starlette ASGI app exposing the REST endpoints."""
        try:
            from starlette.applications import Starlette
            from starlette.requests import Request
            from starlette.responses import Response
            from starlette.routing import Route
        except ImportError as e:
            raise ImportError(
                "HTTP server requires starlette. "
                "Install with: pip install mcpforge[http]"
            ) from e

        self.seal()

        async def endpoint(request: Request) -> Response:
            raw = await request.body()
            try:
                body = orjson.loads(raw) if raw else None
            except orjson.JSONDecodeError:
                reply = AdmissionResponse.reject(400, "Bad request", "Invalid JSON body")
            else:
                reply = await self.handle(AdmissionRequest(
                    request.method,
                    request.url.path,
                    dict(request.headers),
                    body=body,
                    client_ip=request.client.host if request.client else None,
                    tool_name=request.path_params.get("name"),
                ))
            return Response(
                content=reply.render(),
                status_code=reply.status,
                headers=reply.headers,
                media_type="application/json" if reply.body is not None else None,
            )

        return Starlette(routes=[
            Route("/tools", endpoint, methods=["GET", "OPTIONS"]),
            Route("/tools/{name}", endpoint, methods=["POST", "OPTIONS"]),
            Route("/manifest", endpoint, methods=["GET", "OPTIONS"]),
        ])

    def serve_http(self, host: str = "127.0.0.1", port: int | None = None) -> None:
        """Run the HTTP app with uvicorn (blocking)."""
        try:
            import uvicorn
        except ImportError as e:
            raise ImportError(
                "HTTP server requires uvicorn. "
                "Install with: pip install mcpforge[http]"
            ) from e

        app = self.http_app()
        self._log.info("server starting", transport="http", host=host, port=port or self._settings.port)
        uvicorn.run(app, host=host, port=port or self._settings.port)

    def __repr__(self) -> str:
        return f"MCPServer(name={self._name!r}, tools={len(self._registry)}, sealed={self._sealed})"


# ═══════════════════════════════════════════════════════════════════════════════
# Factory Functions
# ═══════════════════════════════════════════════════════════════════════════════


def create_server(
    name: str | None = None,
    *,
    tools: Iterable[ToolDescriptor] = (),
    **kwargs: Any,
) -> MCPServer:
    """Create a server and register `tools` in order."""
    server = MCPServer(name, **kwargs)
    server.register_tools(tools)
    return server
