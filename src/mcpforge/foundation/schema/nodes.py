"""Schema nodes: immutable, recursive descriptions of a value's shape.

Each variant is a frozen dataclass. Children must exist before their parent
is built and can never be reassigned, so every tree is finite and acyclic.
Translation and validation dispatch on the variant with `match`, never on
reflection over a third-party schema object.

Example:
    >>> from mcpforge.foundation import schema as s
    >>> node = s.object({
    ...     "name": s.string(min_length=1).describe("Name to greet"),
    ...     "formal": s.boolean().optional(default=False),
    ... })
    >>> node.required
    ('name',)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from typing import Self

    from mcpforge.foundation.errors import JsonPrimitive


class _Missing:
    """Sentinel for an absent value (distinct from None / JSON null)."""

    __slots__ = ()
    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class StringFormat(StrEnum):
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"


# ═══════════════════════════════════════════════════════════════════════════════
# Fluent Mixin
# ═══════════════════════════════════════════════════════════════════════════════


class BaseNode:
    """Fluent wrappers shared by every variant. Each returns a new node."""

    __slots__ = ()

    def optional(self, *, default: object = MISSING) -> OptionalNode:
        return OptionalNode(self, default=default)  # type: ignore[arg-type]

    def with_default(self, value: object) -> OptionalNode:
        return OptionalNode(self, default=value)  # type: ignore[arg-type]

    def nullable(self) -> NullableNode:
        return NullableNode(self)  # type: ignore[arg-type]

    def describe(self, description: str) -> Self:
        return dataclasses.replace(self, description=description)  # type: ignore[type-var]


# ═══════════════════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StringNode(BaseNode):
    min_length: int | None = None
    max_length: int | None = None
    format: StringFormat | None = None
    pattern: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class NumberNode(BaseNode):
    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    description: str | None = None


@dataclass(frozen=True, slots=True)
class BooleanNode(BaseNode):
    description: str | None = None


@dataclass(frozen=True, slots=True)
class EnumNode(BaseNode):
    values: tuple[str, ...]
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("EnumNode requires at least one value")
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True, slots=True)
class LiteralNode(BaseNode):
    value: JsonPrimitive
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ArrayNode(BaseNode):
    element: SchemaNode
    description: str | None = None

    def __post_init__(self) -> None:
        _check_child(self.element, "element")


@dataclass(frozen=True, slots=True)
class ObjectNode(BaseNode):
    """Object with ordered properties.

    Properties are stored as an ordered tuple of (name, node) pairs; order is
    preserved through translation. Required names are every property not
    wrapped in `OptionalNode`.
    """

    properties: tuple[tuple[str, SchemaNode], ...] = ()
    description: str | None = None

    def __post_init__(self) -> None:
        props = self.properties
        pairs = tuple(props.items()) if isinstance(props, Mapping) else tuple(props)
        seen: set[str] = set()
        for name, child in pairs:
            if name in seen:
                raise ValueError(f"Duplicate property '{name}'")
            seen.add(name)
            _check_child(child, name)
        object.__setattr__(self, "properties", pairs)

    @property
    def fields(self) -> dict[str, SchemaNode]:
        return dict(self.properties)

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(name for name, child in self.properties if not isinstance(child, OptionalNode))


@dataclass(frozen=True, slots=True)
class OptionalNode(BaseNode):
    """Absent values are accepted; `default` (if set) is filled in for them."""

    inner: SchemaNode
    default: object = field(default=MISSING)
    description: str | None = None

    def __post_init__(self) -> None:
        _check_child(self.inner, "inner")

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


@dataclass(frozen=True, slots=True)
class NullableNode(BaseNode):
    inner: SchemaNode
    description: str | None = None

    def __post_init__(self) -> None:
        _check_child(self.inner, "inner")


@dataclass(frozen=True, slots=True)
class RecordNode(BaseNode):
    """String-keyed mapping whose values all share one shape."""

    element: SchemaNode
    description: str | None = None

    def __post_init__(self) -> None:
        _check_child(self.element, "element")


@dataclass(frozen=True, slots=True)
class UnknownNode(BaseNode):
    """Accepts any value unchanged."""

    description: str | None = None


SchemaNode = Union[
    ObjectNode, ArrayNode, StringNode, NumberNode, BooleanNode,
    EnumNode, LiteralNode, OptionalNode, NullableNode, RecordNode, UnknownNode,
]


def _check_child(child: object, where: str) -> None:
    if not isinstance(child, BaseNode):
        raise TypeError(f"Schema child '{where}' must be a schema node, got {type(child).__name__}")
