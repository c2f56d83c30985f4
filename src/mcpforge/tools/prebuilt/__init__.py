"""Prebuilt tools ready for use.

Includes:
- greet, calculate, fetch_data: demo tools
- create_demo_server: server with all three registered
"""

from .demo import DEMO_TOOLS, calculate, create_demo_server, fetch_data, greet

__all__ = ["greet", "calculate", "fetch_data", "DEMO_TOOLS", "create_demo_server"]
