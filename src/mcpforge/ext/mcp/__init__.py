"""MCP server façade, wire models, and manifest generation.

Requires: pip install mcpforge[mcp] (for stdio)
         pip install mcpforge[http] (for HTTP endpoints)
"""

from .manifest import Manifest, ManifestTool, generate_manifest, generate_markdown_docs, generate_openapi_spec
from .protocol import CallMeta, CallToolRequest, http_status, rejection_to_result
from .server import MCPServer, create_server

__all__ = [
    # Server
    "MCPServer", "create_server",
    # Wire
    "CallToolRequest", "CallMeta", "rejection_to_result", "http_status",
    # Manifest
    "Manifest", "ManifestTool", "generate_manifest", "generate_markdown_docs", "generate_openapi_spec",
]
