"""Tests for the server façade: catalog, calls through admission, routing, transports."""

from __future__ import annotations

import pytest

from mcpforge.ext.mcp import CallToolRequest, MCPServer, create_server, http_status
from mcpforge.foundation.config import AuthOptions, RateLimitOptions, ServerSettings
from mcpforge.foundation.errors import ConfigurationError, DuplicateToolError, ErrorCode
from mcpforge.foundation.testing import FakeCapabilities, quiet_logger
from mcpforge.runtime.middleware import AdmissionRequest, AdmissionResponse, ErrorMiddleware, LoggingMiddleware
from mcpforge.tools.prebuilt import calculate, create_demo_server, fetch_data, greet


@pytest.fixture
def server(settings: ServerSettings, caps: FakeCapabilities) -> MCPServer:
    return create_server(
        "demo-mcp", tools=[greet, calculate], capabilities=caps, settings=settings, logger=quiet_logger(),
    )


def build(settings: ServerSettings, **kwargs) -> MCPServer:
    kwargs.setdefault("capabilities", FakeCapabilities.with_env(API_KEY="secret"))
    return create_server("demo-mcp", tools=[greet, calculate], settings=settings, logger=quiet_logger(), **kwargs)


# ═════════════════════════════════════════════════════════════════════════════
# Catalog and calls
# ═════════════════════════════════════════════════════════════════════════════


def test_catalog_in_registration_order(server: MCPServer) -> None:
    assert [t.name for t in server.list_tools()] == ["greet", "calculate"]
    assert [t.name for t in server.tools] == ["greet", "calculate"]


def test_demo_server(settings: ServerSettings) -> None:
    demo = create_demo_server(settings=settings, capabilities=FakeCapabilities(), logger=quiet_logger())
    assert demo.name == "demo-mcp"
    assert [t.name for t in demo.tools] == ["greet", "calculate", "fetchData"]


def test_duplicate_registration(server: MCPServer) -> None:
    with pytest.raises(DuplicateToolError):
        server.register_tool(greet)


@pytest.mark.asyncio
async def test_call_tool_success(server: MCPServer) -> None:
    result = await server.call_tool("calculate", {"operation": "multiply", "a": 6, "b": 7})
    assert result.payload() == {"result": 42, "operation": "6 multiply 7"}


@pytest.mark.asyncio
async def test_call_tool_failures_are_envelopes(server: MCPServer) -> None:
    fault = await server.call_tool("calculate", {"operation": "divide", "a": 10, "b": 0})
    assert fault.payload() == {"error": "Tool execution failed", "message": "Division by zero"}

    missing = await server.call_tool("nope", {})
    assert missing.payload() == {"error": 'Tool "nope" not found'}

    invalid = await server.call_tool("greet", {"name": ""})
    assert invalid.payload()["details"] == [{"path": "name", "message": "String must contain at least 1 character(s)"}]


@pytest.mark.asyncio
async def test_absent_arguments_treated_as_empty_object(server: MCPServer) -> None:
    result = await server.call_tool("greet")
    assert result.payload()["details"] == [{"path": "name", "message": "Required"}]


# ═════════════════════════════════════════════════════════════════════════════
# Admission
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_auth_rejection_becomes_envelope(settings: ServerSettings) -> None:
    async def check(token, ctx):
        return token == ctx.env["API_KEY"]

    server = build(settings, auth=AuthOptions(type="apiKey", validate=check))

    missing = await server.call_tool("greet", {"name": "Ada"})
    assert missing.is_error
    assert missing.error.code is ErrorCode.UNAUTHORIZED
    assert missing.payload() == {"error": "Authentication required", "message": "Missing apiKey token"}

    wrong = await server.call_tool("greet", {"name": "Ada"}, headers={"X-API-Key": "nope"})
    assert wrong.payload() == {"error": "Authentication failed", "message": "Invalid token"}

    ok = await server.call_tool("greet", {"name": "Ada"}, headers={"X-API-Key": "secret"})
    assert ok.payload()["message"] == "Hello, Ada!"


@pytest.mark.asyncio
async def test_raising_auth_validator_becomes_envelope(settings: ServerSettings) -> None:
    def check(token, ctx):
        raise RuntimeError("auth backend down")

    server = build(settings, auth=AuthOptions(type="apiKey", validate=check))
    result = await server.call_tool("calculate", {"operation": "add", "a": 1, "b": 2}, headers={"x-api-key": "k"})
    assert result.is_error
    assert result.error.code is ErrorCode.EXECUTION_FAILED
    assert result.payload() == {"error": "Internal server error", "message": "auth backend down"}

    response = await server.handle(AdmissionRequest("POST", "/tools/calculate", {"x-api-key": "k"}, body={}))
    assert response.status == 500


@pytest.mark.asyncio
async def test_raising_middleware_hides_message_outside_development() -> None:
    async def broken(request, next):
        raise RuntimeError("secret detail")

    server = build(ServerSettings(_env_file=None, environment="production"), middleware=[broken])
    result = await server.call_tool("greet", {"name": "Ada"})
    assert result.payload() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_authenticated_callers_get_separate_budgets(settings: ServerSettings) -> None:
    server = build(settings, auth=AuthOptions(type="apiKey"), rate_limit=RateLimitOptions(max=1, time_window="1m"))
    alice = await server.call_tool("greet", {"name": "Ada"}, headers={"x-api-key": "alice"})
    bob = await server.call_tool("greet", {"name": "Bob"}, headers={"x-api-key": "bob"})
    again = await server.call_tool("greet", {"name": "Ada"}, headers={"x-api-key": "alice"})
    assert not alice.is_error
    assert not bob.is_error
    assert again.error.code is ErrorCode.RATE_LIMITED


@pytest.mark.asyncio
async def test_rate_limit_rejection_becomes_envelope(settings: ServerSettings) -> None:
    server = build(settings, rate_limit=RateLimitOptions(max=2, time_window="1m"))
    results = [await server.call_tool("greet", {"name": "Ada"}, client_ip="10.0.0.1") for _ in range(3)]
    assert [r.is_error for r in results] == [False, False, True]
    assert results[-1].error.code is ErrorCode.RATE_LIMITED
    assert results[-1].payload()["message"] == "Rate limit exceeded. Max 2 requests per 1m"
    assert not (await server.call_tool("greet", {"name": "Ada"}, client_ip="10.0.0.2")).is_error


@pytest.mark.asyncio
async def test_use_auth_header_predicate(server: MCPServer) -> None:
    server.use_auth(lambda headers: headers.get("x-role") == "admin")
    denied = await server.call_tool("greet", {"name": "Ada"})
    assert denied.payload() == {"error": "Unauthorized"}
    allowed = await server.call_tool("greet", {"name": "Ada"}, headers={"X-Role": "admin"})
    assert not allowed.is_error


@pytest.mark.asyncio
async def test_user_middleware_runs_after_builtins(settings: ServerSettings) -> None:
    seen: list[str] = []

    async def spy(request, next):
        seen.append(request.tool_name)
        return await next(request)

    server = build(settings, auth=AuthOptions(type="bearer"), cors=True, middleware=[spy])
    assert len(server.middleware) == 4
    assert isinstance(server.middleware[0], ErrorMiddleware)
    await server.call_tool("greet", {"name": "Ada"})
    assert seen == []
    await server.call_tool("greet", {"name": "Ada"}, headers={"Authorization": "Bearer t"})
    assert seen == ["greet"]


@pytest.mark.asyncio
async def test_sealed_after_first_call(server: MCPServer) -> None:
    await server.call_tool("greet", {"name": "Ada"})
    with pytest.raises(ConfigurationError):
        server.use(LoggingMiddleware(quiet_logger()))
    with pytest.raises(ConfigurationError):
        server.register_tool(fetch_data)


# ═════════════════════════════════════════════════════════════════════════════
# Routing
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_handle_routes(server: MCPServer) -> None:
    tools = await server.handle(AdmissionRequest("GET", "/tools"))
    assert tools.status == 200
    assert [t["name"] for t in tools.body["tools"]] == ["greet", "calculate"]
    assert "inputSchema" in tools.body["tools"][0]

    manifest = await server.handle(AdmissionRequest("GET", "/manifest"))
    assert manifest.body["name"] == "demo-mcp"

    call = await server.handle(AdmissionRequest("POST", "/tools/calculate", body={"operation": "add", "a": 1, "b": 1}))
    assert call.status == 200
    assert "isError" not in call.body

    missing = await server.handle(AdmissionRequest("POST", "/tools/nope", body={}))
    assert missing.status == 404
    assert missing.body["isError"] is True

    unknown = await server.handle(AdmissionRequest("DELETE", "/tools"))
    assert unknown.status == 404
    assert unknown.body["error"] == "Not found"


@pytest.mark.asyncio
async def test_http_status_mapping(server: MCPServer) -> None:
    invalid = await server.call_tool("greet", {"name": 3})
    fault = await server.call_tool("calculate", {"operation": "divide", "a": 1, "b": 0})
    assert http_status(invalid) == 400
    assert http_status(fault) == 500


def test_manifest_metadata(settings: ServerSettings) -> None:
    server = build(settings, auth=AuthOptions(type="bearer"), rate_limit=RateLimitOptions(max=100, time_window="1m"), cors=True)
    assert server.manifest().metadata == {
        "framework": "mcpforge",
        "authType": "bearer",
        "rateLimitMax": 100,
        "rateLimitWindow": "1m",
        "corsEnabled": True,
    }


def test_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCPFORGE_NAME", "env-mcp")
    monkeypatch.setenv("MCPFORGE_RATELIMIT_ENABLED", "true")
    monkeypatch.setenv("MCPFORGE_RATELIMIT_MAX", "5")
    monkeypatch.setenv("MCPFORGE_RATELIMIT_TIME_WINDOW", "30s")
    monkeypatch.setenv("MCPFORGE_AUTH_TYPE", "apiKey")
    server = MCPServer.from_settings(ServerSettings(_env_file=None), capabilities=FakeCapabilities(), logger=quiet_logger())
    assert server.name == "env-mcp"
    assert server.manifest().metadata == {
        "framework": "mcpforge", "authType": "apiKey", "rateLimitMax": 5, "rateLimitWindow": "30s",
    }


# ═════════════════════════════════════════════════════════════════════════════
# Wire models
# ═════════════════════════════════════════════════════════════════════════════


def test_call_request_meta_spellings() -> None:
    assert CallToolRequest.model_validate({"name": "greet", "_meta": {"requestId": "r1"}}).request_id == "r1"
    assert CallToolRequest.model_validate({"name": "greet", "meta": {"requestId": "r2"}}).request_id == "r2"
    assert CallToolRequest.model_validate({"name": "greet"}).request_id is None


def test_rejection_status_mapping() -> None:
    from mcpforge.ext.mcp import rejection_to_result

    result = rejection_to_result("greet", AdmissionResponse.reject(429, "Too many requests", "slow down"))
    assert result.error.code is ErrorCode.RATE_LIMITED
    assert result.payload() == {"error": "Too many requests", "message": "slow down"}


# ═════════════════════════════════════════════════════════════════════════════
# Transports
# ═════════════════════════════════════════════════════════════════════════════


def test_http_app(settings: ServerSettings) -> None:
    pytest.importorskip("starlette")
    from starlette.testclient import TestClient

    server = build(settings, cors=True)
    client = TestClient(server.http_app())

    listing = client.get("/tools")
    assert listing.status_code == 200
    assert listing.headers["access-control-allow-origin"] == "*"
    assert [t["name"] for t in listing.json()["tools"]] == ["greet", "calculate"]

    ok = client.post("/tools/calculate", json={"operation": "add", "a": 2, "b": 3})
    assert ok.status_code == 200
    assert ok.json()["content"][0]["type"] == "text"

    fault = client.post("/tools/calculate", json={"operation": "divide", "a": 2, "b": 0})
    assert fault.status_code == 500
    assert fault.json()["isError"] is True

    bad_json = client.post("/tools/calculate", content=b"{not json", headers={"content-type": "application/json"})
    assert bad_json.status_code == 400

    preflight = client.options("/tools/greet")
    assert preflight.status_code == 204


@pytest.mark.asyncio
async def test_stdio_call_handler(server: MCPServer) -> None:
    pytest.importorskip("mcp")
    from mcp import types

    mcp_server = server._create_mcp_server()
    handler = mcp_server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name="calculate", arguments={"operation": "divide", "a": 1, "b": 0}),
    )
    reply = (await handler(request)).root
    assert reply.isError is True
    assert "Division by zero" in reply.content[0].text


def test_stdio_adapter_matches_installed_sdk(server: MCPServer) -> None:
    pytest.importorskip("mcp")
    from importlib.metadata import version

    from mcp import types

    assert int(version("mcp").split(".")[0]) == 1
    mcp_server = server._create_mcp_server()
    assert {types.ListToolsRequest, types.CallToolRequest} <= set(mcp_server.request_handlers)
