"""Normalized response envelopes and catalog entries.

Every call produces a `CallToolResult`: on success one text item holding
the 2-space indented JSON of the output, on failure the same shape with
`isError: true` and the rendered `ToolError` payload as text.
"""

from __future__ import annotations

from typing import Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field

from mcpforge.foundation.errors import JsonDict, ToolError


def dump_json(value: object) -> str:
    """Serialize to 2-space indented JSON text.

    Raises:
        TypeError: value is not JSON serializable (orjson.JSONEncodeError)
    """
    return orjson.dumps(value, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS).decode()


class TextContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """Success or error envelope returned for every call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: tuple[TextContent, ...]
    is_error: bool = Field(default=False, alias="isError")
    error: ToolError | None = Field(default=None, exclude=True, repr=False)

    @classmethod
    def success(cls, output: object) -> CallToolResult:
        return cls(content=(TextContent(text=dump_json(output)),))

    @classmethod
    def failure(cls, error: ToolError) -> CallToolResult:
        return cls(content=(TextContent(text=error.render()),), is_error=True, error=error)

    @property
    def text(self) -> str:
        return self.content[0].text if self.content else ""

    def payload(self) -> object:
        """Decoded JSON of the first text item."""
        return orjson.loads(self.text)

    def to_wire(self) -> JsonDict:
        """Wire form. `isError` appears only on error envelopes."""
        out: JsonDict = {"content": [c.model_dump() for c in self.content]}
        if self.is_error:
            out["isError"] = True
        return out


class ToolListing(BaseModel):
    """Catalog entry: `{name, description, inputSchema}`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: JsonDict = Field(alias="inputSchema")

    def to_wire(self) -> JsonDict:
        return self.model_dump(by_alias=True)
