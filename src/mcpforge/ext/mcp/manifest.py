"""Server manifest, Markdown docs, and OpenAPI description.

The manifest describes a server and its tools (input and output schemas,
metadata) for publishing. Unlike the catalog it carries output schemas and
leaves descriptions as declared.

Example:
    >>> manifest = generate_manifest(registry, name="demo-mcp", version="1.0.0",
    ...                              rate_limit=RateLimitOptions(max=100, time_window="1m"))
    >>> manifest.metadata
    {'framework': 'mcpforge', 'rateLimitMax': 100, 'rateLimitWindow': '1m'}
    >>> print(generate_markdown_docs(manifest))
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from mcpforge.foundation.config import AuthOptions, CorsOptions, RateLimitOptions
from mcpforge.foundation.core import ToolDescriptor
from mcpforge.foundation.errors import JsonDict
from mcpforge.foundation.schema import to_json_schema
from mcpforge.runtime.pipeline import dump_json

FRAMEWORK = "mcpforge"

MetadataValue = str | int | float | bool


class ManifestTool(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    input: JsonDict
    output: JsonDict
    metadata: dict[str, MetadataValue] | None = None


class Manifest(BaseModel):
    """Published description of a server and its tools."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = "1.0.0"
    description: str | None = None
    tools: list[ManifestTool] = Field(default_factory=list)
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return self.model_dump(exclude_none=True)

    def render(self) -> str:
        return dump_json(self.to_dict())


def generate_manifest(
    tools: Iterable[ToolDescriptor],
    *,
    name: str,
    version: str = "1.0.0",
    description: str | None = None,
    auth: AuthOptions | None = None,
    rate_limit: RateLimitOptions | None = None,
    cors: CorsOptions | bool | None = None,
    framework: str = FRAMEWORK,
) -> Manifest:
    """Build the manifest for `tools`, in iteration (registration) order."""
    metadata: dict[str, MetadataValue] = {"framework": framework}
    if auth is not None:
        metadata["authType"] = auth.type
    if rate_limit is not None:
        metadata["rateLimitMax"] = rate_limit.max
        metadata["rateLimitWindow"] = rate_limit.window_label
    if cors:
        metadata["corsEnabled"] = True

    return Manifest(
        name=name,
        version=version,
        description=description,
        tools=[
            ManifestTool(
                name=t.name,
                description=t.description,
                input=to_json_schema(t.input_schema),
                output=to_json_schema(t.output_schema),
                metadata=dict(t.metadata) or None,
            )
            for t in tools
        ],
        metadata=metadata,
    )


def _json_block(value: object) -> str:
    return f"```json\n{dump_json(value)}\n```\n\n"


def generate_markdown_docs(manifest: Manifest) -> str:
    """Render the manifest as Markdown, one section per tool."""
    parts = [f"# {manifest.name}\n\n"]
    if manifest.description:
        parts.append(f"{manifest.description}\n\n")
    parts.append(f"**Version:** {manifest.version}\n\n## Tools\n\n")
    for t in manifest.tools:
        parts.append(f"### {t.name}\n\n")
        if t.description:
            parts.append(f"{t.description}\n\n")
        parts.append("**Input Schema:**\n\n" + _json_block(t.input))
        parts.append("**Output Schema:**\n\n" + _json_block(t.output))
        if t.metadata:
            parts.append("**Metadata:**\n\n" + _json_block(t.metadata))
        parts.append("---\n\n")
    return "".join(parts)


def generate_openapi_spec(manifest: Manifest) -> JsonDict:
    """OpenAPI 3.0 document exposing each tool as `POST /tools/{name}`."""
    paths: JsonDict = {
        f"/tools/{t.name}": {
            "post": {
                "summary": t.description or t.name,
                "operationId": t.name,
                "requestBody": {"required": True, "content": {"application/json": {"schema": t.input}}},
                "responses": {
                    "200": {"description": "Successful response", "content": {"application/json": {"schema": t.output}}},
                    "400": {"description": "Bad request - validation error"},
                    "500": {"description": "Internal server error"},
                },
            }
        }
        for t in manifest.tools
    }
    info: JsonDict = {"title": manifest.name, "version": manifest.version}
    if manifest.description:
        info["description"] = manifest.description
    return {"openapi": "3.0.0", "info": info, "paths": paths}
