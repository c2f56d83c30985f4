"""Invocation pipeline and response envelopes."""

from .envelope import CallToolResult, TextContent, ToolListing, dump_json
from .pipeline import InvocationPipeline, Stage

__all__ = ["InvocationPipeline", "Stage", "CallToolResult", "TextContent", "ToolListing", "dump_json"]
