"""Ordered, name-keyed store of tool descriptors.

Registration happens during startup. Once serving begins the registry is
sealed and read-only, so interleaved calls share it without locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from mcpforge.foundation.core import ToolDescriptor
from mcpforge.foundation.errors import ConfigurationError, DuplicateToolError
from mcpforge.runtime.observability import BoundLogger, get_logger


class ToolRegistry:
    """Registry of tool descriptors, iterated in registration order.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(greet)
        >>> registry.register(calculate)
        >>> [t.name for t in registry.list()]
        ['greet', 'calculate']
        >>> registry.resolve("missing") is None
        True
    """

    __slots__ = ("_tools", "_sealed", "_log")

    def __init__(self, tools: Iterable[ToolDescriptor] = (), *, logger: BoundLogger | None = None) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._sealed = False
        self._log = logger or get_logger("mcpforge.registry")
        for descriptor in tools:
            self.register(descriptor)

    def register(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        """Add a descriptor. Returns it so the call can be used as a decorator.

        Raises:
            DuplicateToolError: a tool with the same name already exists
            ConfigurationError: the registry is sealed or `descriptor` is not a ToolDescriptor
        """
        if self._sealed:
            raise ConfigurationError(f"Cannot register '{getattr(descriptor, 'name', descriptor)}': registry is sealed")
        if not isinstance(descriptor, ToolDescriptor):
            raise ConfigurationError(f"Expected ToolDescriptor, got {type(descriptor).__name__}")
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)
        self._tools[descriptor.name] = descriptor
        self._log.info("tool registered", tool=descriptor.name, total=len(self._tools))
        return descriptor

    def resolve(self, name: str) -> ToolDescriptor | None:
        """Look up a tool by name. Returns None when unknown."""
        return self._tools.get(name)

    get = resolve

    def list(self) -> tuple[ToolDescriptor, ...]:
        """All descriptors in registration order."""
        return tuple(self._tools.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._tools)

    # ─────────────────────────────────────────────────────────────────
    # Serving lifecycle
    # ─────────────────────────────────────────────────────────────────

    def seal(self) -> None:
        """Freeze the registry for the serving lifetime. Idempotent."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # ─────────────────────────────────────────────────────────────────
    # Container protocol
    # ─────────────────────────────────────────────────────────────────

    def __getitem__(self, name: str) -> ToolDescriptor:
        """Get tool by name, raises KeyError if not found."""
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={list(self._tools)!r}, sealed={self._sealed})"
