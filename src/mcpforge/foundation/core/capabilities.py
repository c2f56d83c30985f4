"""Capability handles forwarded to tool handlers.

The pipeline never inspects capabilities. It receives one `Capabilities`
implementation at construction time and hands it to every invocation
context, so tests swap in fakes without touching the pipeline.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from mcpforge.foundation.config import ServerSettings


@runtime_checkable
class HttpCapability(Protocol):
    """Network capability. `httpx.AsyncClient` satisfies this protocol."""

    async def request(self, method: str, url: str, **kwargs: Any) -> Any: ...
    async def get(self, url: str, **kwargs: Any) -> Any: ...
    async def post(self, url: str, **kwargs: Any) -> Any: ...


@runtime_checkable
class Capabilities(Protocol):
    """Capability set injected into the pipeline."""

    @property
    def http(self) -> HttpCapability | None: ...

    @property
    def storage(self) -> object | None: ...

    @property
    def env(self) -> Mapping[str, str]: ...


@dataclass(slots=True)
class HttpxCapability:
    """Lazily-created shared `httpx.AsyncClient`.

    Example:
        >>> http = HttpxCapability(timeout=10.0, user_agent="demo-mcp/1.0.0")
        >>> resp = await http.get("https://api.github.com/zen")
        >>> await http.aclose()
    """

    timeout: float = 30.0
    user_agent: str = "mcpforge/1.0.0"
    _client: httpx.AsyncClient | None = field(default=None, repr=False)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": self.user_agent})
        return self._client

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await self.client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.client.post(url, **kwargs)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


@dataclass(slots=True, frozen=True)
class DefaultCapabilities:
    """Production capability set: httpx network client, optional storage, env snapshot."""

    http: HttpCapability | None = None
    storage: object | None = None
    env: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(os.environ)))

    @classmethod
    def from_settings(cls, settings: ServerSettings, *, storage: object | None = None) -> DefaultCapabilities:
        return cls(
            http=HttpxCapability(timeout=settings.http.timeout, user_agent=settings.user_agent),
            storage=storage,
        )

    async def aclose(self) -> None:
        if isinstance(self.http, HttpxCapability):
            await self.http.aclose()
