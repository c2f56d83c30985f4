"""Declarative schema nodes, JSON Schema translation, and validation.

Use the module as a builder namespace:

    >>> from mcpforge.foundation import schema as s
    >>> node = s.object({"name": s.string(), "tags": s.array(s.string()).optional()})
    >>> s.to_json_schema(node)["required"]
    ['name']
    >>> s.validate(node, {"name": "ada"}).unwrap()
    {'name': 'ada'}
"""

from .builders import (
    array,
    boolean,
    email,
    enum,
    integer,
    literal,
    nullable,
    number,
    object,
    optional,
    record,
    string,
    unknown,
    url,
    uuid,
)
from .nodes import (
    MISSING,
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
    SchemaNode,
    StringFormat,
    StringNode,
    UnknownNode,
)
from .translate import to_input_schema, to_json_schema
from .validate import Issue, ValidationResult, format_issues, validate

__all__ = [
    # Nodes
    "BaseNode", "SchemaNode", "MISSING", "StringFormat",
    "ObjectNode", "ArrayNode", "StringNode", "NumberNode", "BooleanNode",
    "EnumNode", "LiteralNode", "OptionalNode", "NullableNode", "RecordNode", "UnknownNode",
    # Builders
    "object", "array", "string", "email", "url", "uuid", "number", "integer", "boolean",
    "enum", "literal", "optional", "nullable", "record", "unknown",
    # Translation
    "to_json_schema", "to_input_schema",
    # Validation
    "validate", "Issue", "ValidationResult", "format_issues",
]
