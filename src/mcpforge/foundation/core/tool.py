"""Tool descriptors: name, declared input/output shapes, handler, and hooks.

A descriptor is immutable once built. Hooks decide explicitly whether they
alter the value flowing through the pipeline: return `Replace(new_value)` to
substitute it, or `None` to leave it untouched. Any other return value is a
fault.

Example (factory):
    >>> calculate = define_tool(
    ...     name="calculate",
    ...     description="Perform basic mathematical operations",
    ...     input=s.object({"operation": s.enum(["add", "divide"]), "a": s.number(), "b": s.number()}),
    ...     output=s.object({"result": s.number()}),
    ...     handler=lambda input, ctx: {"result": input["a"] + input["b"]},
    ... )

Example (decorator):
    >>> @tool(input=s.object({"name": s.string()}), output=s.object({"message": s.string()}))
    ... async def greet(input, ctx):
    ...     '''Greet a user by name.'''
    ...     return {"message": f"Hello, {input['name']}!"}
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeAlias, TypeVar

from mcpforge.foundation.errors import ConfigurationError
from mcpforge.foundation.schema import BaseNode

if TYPE_CHECKING:
    from .context import InvocationContext

T = TypeVar("T")

_NAME_RE = re.compile(r"^[A-Za-z0-9_.\-]{1,128}$")

MetadataValue: TypeAlias = "str | int | float | bool"


@dataclass(frozen=True, slots=True)
class Replace(Generic[T]):
    """Hook outcome that substitutes the value seen by later stages."""

    value: T


# (input, ctx) -> output
Handler: TypeAlias = Callable[[Any, "InvocationContext"], "Any | Awaitable[Any]"]
# (ctx, input) -> Replace | None
PreHook: TypeAlias = Callable[["InvocationContext", Any], "Replace[Any] | None | Awaitable[Replace[Any] | None]"]
# (ctx, input, output) -> Replace | None
PostHook: TypeAlias = Callable[["InvocationContext", Any, Any], "Replace[Any] | None | Awaitable[Replace[Any] | None]"]


@dataclass(frozen=True, slots=True, eq=False)
class ToolDescriptor:
    """Immutable description of a registered tool."""

    name: str
    input_schema: BaseNode
    output_schema: BaseNode
    handler: Handler
    description: str | None = None
    metadata: Mapping[str, MetadataValue] = field(default_factory=lambda: MappingProxyType({}))
    pre_hooks: tuple[PreHook, ...] = ()
    post_hooks: tuple[PostHook, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _NAME_RE.match(self.name):
            raise ConfigurationError(f"Invalid tool name {self.name!r}: use 1-128 letters, digits, '_', '-' or '.'")
        for label, node in (("input", self.input_schema), ("output", self.output_schema)):
            if not isinstance(node, BaseNode):
                raise ConfigurationError(f"Tool '{self.name}' {label} schema must be a schema node")
        if not callable(self.handler):
            raise ConfigurationError(f"Tool '{self.name}' handler must be callable")
        pre, post = tuple(self.pre_hooks), tuple(self.post_hooks)
        if not all(callable(h) for h in (*pre, *post)):
            raise ConfigurationError(f"Tool '{self.name}' hooks must be callable")
        object.__setattr__(self, "pre_hooks", pre)
        object.__setattr__(self, "post_hooks", post)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def display_description(self) -> str:
        return self.description or f"Execute {self.name}"


def define_tool(
    *,
    name: str,
    input: BaseNode,  # noqa: A002
    output: BaseNode,
    handler: Handler,
    description: str | None = None,
    metadata: Mapping[str, MetadataValue] | None = None,
    pre_hooks: Iterable[PreHook] = (),
    post_hooks: Iterable[PostHook] = (),
) -> ToolDescriptor:
    """Build a tool descriptor. Hooks run in the order given."""
    return ToolDescriptor(
        name=name,
        input_schema=input,
        output_schema=output,
        handler=handler,
        description=description,
        metadata=metadata or {},
        pre_hooks=tuple(pre_hooks),
        post_hooks=tuple(post_hooks),
    )


def tool(
    *,
    input: BaseNode,  # noqa: A002
    output: BaseNode,
    name: str | None = None,
    description: str | None = None,
    metadata: Mapping[str, MetadataValue] | None = None,
    pre_hooks: Iterable[PreHook] = (),
    post_hooks: Iterable[PostHook] = (),
) -> Callable[[Handler], ToolDescriptor]:
    """Decorator form of `define_tool`.

    Name defaults to the function name; description defaults to the first
    line of the docstring.
    """
    def decorator(fn: Handler) -> ToolDescriptor:
        doc = (fn.__doc__ or "").strip()
        return define_tool(
            name=name or fn.__name__,
            input=input,
            output=output,
            handler=fn,
            description=description or (doc.splitlines()[0].strip() if doc else None),
            metadata=metadata,
            pre_hooks=pre_hooks,
            post_hooks=post_hooks,
        )
    return decorator
