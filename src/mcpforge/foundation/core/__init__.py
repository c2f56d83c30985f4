"""Core abstractions: tool descriptors, hooks, invocation context, capabilities."""

from .capabilities import Capabilities, DefaultCapabilities, HttpCapability, HttpxCapability
from .context import InvocationContext, RequestInfo
from .tool import Handler, PostHook, PreHook, Replace, ToolDescriptor, define_tool, tool

__all__ = [
    "ToolDescriptor", "define_tool", "tool", "Replace", "Handler", "PreHook", "PostHook",
    "InvocationContext", "RequestInfo",
    "Capabilities", "DefaultCapabilities", "HttpCapability", "HttpxCapability",
]
