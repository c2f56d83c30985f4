"""Schema node → JSON Schema translation for the tool catalog.

Pure structural recursion: no caching, no global state, fresh dicts on every
call. Property order of object nodes is preserved. Unknown or future variants
translate to `{"type": "object"}` so one unsupported tool never breaks the
whole catalog.
"""

from __future__ import annotations

from .nodes import (
    ArrayNode,
    BaseNode,
    BooleanNode,
    EnumNode,
    LiteralNode,
    NullableNode,
    NumberNode,
    ObjectNode,
    OptionalNode,
    RecordNode,
    StringFormat,
    StringNode,
    UnknownNode,
)
from mcpforge.foundation.errors import JsonDict

# Interchange format names for string formats
_FORMATS: dict[StringFormat, str] = {
    StringFormat.EMAIL: "email",
    StringFormat.URL: "uri",
    StringFormat.UUID: "uuid",
}


def to_json_schema(node: BaseNode) -> JsonDict:
    """Translate a schema node into a JSON Schema document.

    Example:
        >>> to_json_schema(s.object({"a": s.number(), "b": s.number().optional()}))
        {'type': 'object', 'properties': {'a': {'type': 'number'}, 'b': {'type': 'number'}}, 'required': ['a']}
    """
    out: JsonDict
    match node:
        case ObjectNode(properties=props):
            out = {"type": "object", "properties": {name: to_json_schema(child) for name, child in props}}
            if required := node.required:
                out["required"] = list(required)
        case StringNode(min_length=lo, max_length=hi, format=fmt, pattern=pattern):
            out = {"type": "string"}
            if fmt is not None:
                out["format"] = _FORMATS[fmt]
            if lo is not None:
                out["minLength"] = lo
            if hi is not None:
                out["maxLength"] = hi
            if pattern is not None:
                out["pattern"] = pattern
        case NumberNode(minimum=lo, maximum=hi, integer=integer):
            out = {"type": "integer" if integer else "number"}
            if lo is not None:
                out["minimum"] = lo
            if hi is not None:
                out["maximum"] = hi
        case BooleanNode():
            out = {"type": "boolean"}
        case ArrayNode(element=element):
            out = {"type": "array", "items": to_json_schema(element)}
        case OptionalNode(inner=inner):
            out = to_json_schema(inner)
        case NullableNode(inner=inner):
            out = {**to_json_schema(inner), "nullable": True}
        case EnumNode(values=values):
            out = {"type": "string", "enum": list(values)}
        case LiteralNode(value=value):
            out = {"type": _literal_type(value), "const": value}
        case RecordNode(element=element):
            out = {"type": "object", "additionalProperties": to_json_schema(element)}
        case UnknownNode():
            out = {}
        case _:
            out = {"type": "object"}
    if (description := getattr(node, "description", None)) is not None:
        out["description"] = description
    return out


def to_input_schema(node: BaseNode) -> JsonDict:
    """Catalog form of a tool's input schema: always an object with properties."""
    schema = to_json_schema(node)
    return {**schema, "type": "object", "properties": schema.get("properties", {})}


def _literal_type(value: object) -> str:
    match value:
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case _:
            return "string"
