"""Validation of untyped values against schema nodes.

`validate` never raises. It walks the whole value, collecting every violated
constraint reachable from the root (it does not stop at the first error), and
returns `Ok(coerced_value)` or `Err(issues)`. Coercion is limited to filling
declared defaults for absent optional properties and dropping undeclared
object keys.

Example:
    >>> result = validate(s.object({"a": s.number(), "b": s.string(min_length=3)}), {"a": "x", "b": "no"})
    >>> [str(i) for i in result.unwrap_err()]
    ['a: Expected number, received string', 'b: String must contain at least 3 character(s)']
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeAlias
from urllib.parse import urlparse

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
    StringFormat,
    StringNode,
    UnknownNode,
)
from mcpforge.foundation.errors import Err, JsonDict, Ok, Result

PathKey: TypeAlias = "str | int"

_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+'-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")
_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


@dataclass(frozen=True, slots=True)
class Issue:
    """One violated constraint, located by its path from the root value."""

    path: tuple[PathKey, ...]
    message: str
    code: str = "custom"

    @property
    def location(self) -> str:
        """Dot/bracket rendering of the path, e.g. `items[2].name`."""
        out = ""
        for key in self.path:
            out += f"[{key}]" if isinstance(key, int) else (f".{key}" if out else key)
        return out

    def to_dict(self) -> JsonDict:
        return {"path": self.location, "message": self.message}

    def __str__(self) -> str:
        return f"{self.location}: {self.message}" if self.path else self.message


ValidationResult: TypeAlias = Result[object, tuple[Issue, ...]]


def validate(node: BaseNode, value: object = MISSING) -> ValidationResult:
    """Validate `value` against `node`. Pass nothing (MISSING) to validate an absent value."""
    issues: list[Issue] = []
    coerced = _check(node, value, (), issues)
    return Err(tuple(issues)) if issues else Ok(coerced)


def format_issues(issues: tuple[Issue, ...] | list[Issue]) -> str:
    """Human-readable one-line summary: `a: msg, b[0]: msg`."""
    return ", ".join(str(issue) for issue in issues)


# ═══════════════════════════════════════════════════════════════════════════════
# Recursive Checker
# ═══════════════════════════════════════════════════════════════════════════════


def _check(node: BaseNode, value: object, path: tuple[PathKey, ...], issues: list[Issue]) -> object:
    if value is MISSING:
        if isinstance(node, OptionalNode):
            return copy.deepcopy(node.default) if node.has_default else MISSING
        issues.append(Issue(path, "Required", "required"))
        return MISSING

    match node:
        case ObjectNode(properties=props):
            if not isinstance(value, Mapping):
                return _type_issue("object", value, path, issues)
            out: dict[str, object] = {}
            for name, child in props:
                checked = _check(child, value.get(name, MISSING), (*path, name), issues)
                if checked is not MISSING:
                    out[name] = checked
            return out

        case ArrayNode(element=element):
            if not isinstance(value, (list, tuple)):
                return _type_issue("array", value, path, issues)
            return [_check(element, item, (*path, i), issues) for i, item in enumerate(value)]

        case RecordNode(element=element):
            if not isinstance(value, Mapping):
                return _type_issue("object", value, path, issues)
            return {str(k): _check(element, v, (*path, str(k)), issues) for k, v in value.items()}

        case StringNode():
            if not isinstance(value, str):
                return _type_issue("string", value, path, issues)
            _check_string(node, value, path, issues)
            return value

        case NumberNode(minimum=lo, maximum=hi, integer=integer):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return _type_issue("number", value, path, issues)
            if isinstance(value, float) and not math.isfinite(value):
                issues.append(Issue(path, f"Expected number, received {value}", "invalid_type"))
                return value
            if integer and isinstance(value, float) and not value.is_integer():
                issues.append(Issue(path, "Expected integer, received float", "invalid_type"))
            if lo is not None and value < lo:
                issues.append(Issue(path, f"Number must be greater than or equal to {_num(lo)}", "too_small"))
            if hi is not None and value > hi:
                issues.append(Issue(path, f"Number must be less than or equal to {_num(hi)}", "too_big"))
            return value

        case BooleanNode():
            if not isinstance(value, bool):
                return _type_issue("boolean", value, path, issues)
            return value

        case EnumNode(values=values):
            if not isinstance(value, str) or value not in values:
                expected = " | ".join(f"'{v}'" for v in values)
                issues.append(Issue(path, f"Invalid enum value. Expected {expected}, received {_repr(value)}", "invalid_enum_value"))
            return value

        case LiteralNode(value=expected):
            if not _same_literal(expected, value):
                issues.append(Issue(path, f"Invalid literal value, expected {_repr(expected)}", "invalid_literal"))
            return value

        case OptionalNode(inner=inner):
            return _check(inner, value, path, issues)

        case NullableNode(inner=inner):
            return None if value is None else _check(inner, value, path, issues)

        case UnknownNode():
            return value

        case _:
            issues.append(Issue(path, f"Unsupported schema node {type(node).__name__}", "unsupported"))
            return value


def _check_string(node: StringNode, value: str, path: tuple[PathKey, ...], issues: list[Issue]) -> None:
    if node.min_length is not None and len(value) < node.min_length:
        issues.append(Issue(path, f"String must contain at least {node.min_length} character(s)", "too_small"))
    if node.max_length is not None and len(value) > node.max_length:
        issues.append(Issue(path, f"String must contain at most {node.max_length} character(s)", "too_big"))
    match node.format:
        case StringFormat.EMAIL if not _EMAIL_RE.match(value):
            issues.append(Issue(path, "Invalid email", "invalid_string"))
        case StringFormat.URL if not _is_url(value):
            issues.append(Issue(path, "Invalid url", "invalid_string"))
        case StringFormat.UUID if not _UUID_RE.match(value):
            issues.append(Issue(path, "Invalid uuid", "invalid_string"))
    if node.pattern is not None and not _compiled(node.pattern).search(value):
        issues.append(Issue(path, "Invalid", "invalid_string"))


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and (parsed.netloc or parsed.scheme in ("mailto", "file", "data")))


def _type_issue(expected: str, value: object, path: tuple[PathKey, ...], issues: list[Issue]) -> object:
    issues.append(Issue(path, f"Expected {expected}, received {_type_name(value)}", "invalid_type"))
    return value


def _type_name(value: object) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list() | tuple():
            return "array"
        case Mapping():
            return "object"
        case _:
            return type(value).__name__


def _same_literal(expected: object, value: object) -> bool:
    if isinstance(expected, bool) or isinstance(value, bool):
        return type(expected) is type(value) and expected == value
    if isinstance(expected, (int, float)) and isinstance(value, (int, float)):
        return expected == value
    return type(expected) is type(value) and expected == value


def _num(value: float) -> str:
    return str(int(value)) if isinstance(value, float) and value.is_integer() else str(value)


def _repr(value: object) -> str:
    return f"'{value}'" if isinstance(value, str) else _type_name(value) if value is None else repr(value)
