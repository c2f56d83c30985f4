"""Demo tools: greeting, arithmetic, and a network fetch.

Example:
    >>> server = create_demo_server()
    >>> [t.name for t in server.tools]
    ['greet', 'calculate', 'fetchData']
    >>> await server.start()
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from mcpforge.foundation import schema as s
from mcpforge.foundation.core import define_tool, tool

if TYPE_CHECKING:
    from mcpforge.ext.mcp import MCPServer
    from mcpforge.foundation.core import InvocationContext


@tool(
    input=s.object({
        "name": s.string(min_length=1, max_length=100, description="Name of the person to greet"),
        "formal": s.boolean(description="Use formal greeting").with_default(False),
    }),
    output=s.object({"message": s.string(), "timestamp": s.string()}),
)
def greet(input: dict[str, Any], ctx: InvocationContext) -> dict[str, str]:  # noqa: A002
    """Greet a user by name."""
    ctx.log.info("greeting", name=input["name"])
    greeting = "Good day" if input["formal"] else "Hello"
    return {
        "message": f"{greeting}, {input['name']}!",
        "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def _calculate(input: dict[str, Any], ctx: InvocationContext) -> dict[str, Any]:  # noqa: A002
    a, b, op = input["a"], input["b"], input["operation"]
    match op:
        case "add":
            result = a + b
        case "subtract":
            result = a - b
        case "multiply":
            result = a * b
        case "divide":
            if b == 0:
                raise ValueError("Division by zero")
            result = a / b
        case _:
            raise ValueError(f"Unknown operation: {op}")
    return {"result": result, "operation": f"{a} {op} {b}"}


calculate = define_tool(
    name="calculate",
    description="Perform basic mathematical operations",
    input=s.object({
        "operation": s.enum(["add", "subtract", "multiply", "divide"]),
        "a": s.number(),
        "b": s.number(),
    }),
    output=s.object({"result": s.number(), "operation": s.string()}),
    handler=_calculate,
)


async def _fetch_data(input: dict[str, Any], ctx: InvocationContext) -> dict[str, Any]:  # noqa: A002
    if ctx.http is None:
        raise RuntimeError("Network capability is not configured")
    response = await ctx.http.get(input["endpoint"])
    return {"status": response.status_code, "data": response.json()}


fetch_data = define_tool(
    name="fetchData",
    description="Fetch data from a public API",
    input=s.object({"endpoint": s.url(description="API endpoint URL")}),
    output=s.object({"status": s.integer(), "data": s.record(s.unknown())}),
    handler=_fetch_data,
    metadata={"network": True},
)

DEMO_TOOLS = (greet, calculate, fetch_data)


def create_demo_server(**kwargs: Any) -> MCPServer:
    """Server named `demo-mcp` with the three demo tools registered."""
    from mcpforge.ext.mcp import create_server

    kwargs.setdefault("version", "1.0.0")
    kwargs.setdefault("description", "Demo MCP server showcasing basic functionality")
    return create_server("demo-mcp", tools=DEMO_TOOLS, **kwargs)


def main() -> None:
    """Console entry point: serve the demo tools over stdio."""
    from mcpforge.foundation.config import get_settings
    from mcpforge.runtime.observability import configure_from_settings

    settings = get_settings()
    configure_from_settings(settings.logging)
    asyncio.run(create_demo_server().start())
