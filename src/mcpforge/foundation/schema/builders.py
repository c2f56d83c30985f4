"""Short constructors for schema nodes.

Meant to be used through the package alias:

    >>> from mcpforge.foundation import schema as s
    >>> s.object({"operation": s.enum(["add", "divide"]), "a": s.number(), "b": s.number()})
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .nodes import (
    MISSING,
    ArrayNode,
    BooleanNode,
    EnumNode,
    LiteralNode,
    NullableNode,
    NumberNode,
    ObjectNode,
    OptionalNode,
    RecordNode,
    SchemaNode,
    StringFormat,
    StringNode,
    UnknownNode,
)

if TYPE_CHECKING:
    from mcpforge.foundation.errors import JsonPrimitive


def string(
    *,
    min_length: int | None = None,
    max_length: int | None = None,
    format: StringFormat | str | None = None,  # noqa: A002
    pattern: str | None = None,
    description: str | None = None,
) -> StringNode:
    fmt = StringFormat(format) if format is not None else None
    return StringNode(min_length, max_length, fmt, pattern, description)


def email(**kw: object) -> StringNode:
    return string(format=StringFormat.EMAIL, **kw)  # type: ignore[arg-type]


def url(**kw: object) -> StringNode:
    return string(format=StringFormat.URL, **kw)  # type: ignore[arg-type]


def uuid(**kw: object) -> StringNode:
    return string(format=StringFormat.UUID, **kw)  # type: ignore[arg-type]


def number(
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    integer: bool = False,
    description: str | None = None,
) -> NumberNode:
    return NumberNode(minimum, maximum, integer, description)


def integer(*, minimum: float | None = None, maximum: float | None = None, description: str | None = None) -> NumberNode:
    return NumberNode(minimum, maximum, True, description)


def boolean(*, description: str | None = None) -> BooleanNode:
    return BooleanNode(description)


def enum(values: Iterable[str], *, description: str | None = None) -> EnumNode:
    return EnumNode(tuple(values), description)


def literal(value: JsonPrimitive, *, description: str | None = None) -> LiteralNode:
    return LiteralNode(value, description)


def array(element: SchemaNode, *, description: str | None = None) -> ArrayNode:
    return ArrayNode(element, description)


def object(properties: Mapping[str, SchemaNode] | None = None, *, description: str | None = None) -> ObjectNode:  # noqa: A001
    return ObjectNode(tuple((properties or {}).items()), description)


def optional(inner: SchemaNode, *, default: object = MISSING) -> OptionalNode:
    return OptionalNode(inner, default)


def nullable(inner: SchemaNode) -> NullableNode:
    return NullableNode(inner)


def record(element: SchemaNode, *, description: str | None = None) -> RecordNode:
    return RecordNode(element, description)


def unknown(*, description: str | None = None) -> UnknownNode:
    return UnknownNode(description)
