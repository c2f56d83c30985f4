"""Tools shipped with mcpforge."""

from .prebuilt import DEMO_TOOLS, calculate, create_demo_server, fetch_data, greet

__all__ = ["greet", "calculate", "fetch_data", "DEMO_TOOLS", "create_demo_server"]
