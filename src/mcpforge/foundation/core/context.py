"""Per-call invocation context.

Created fresh for every call and owned by that call only. Carries caller
identity and request metadata, a logger bound to the call (the diagnostics
channel), the injected capabilities, and a scratch `state` mapping hooks use
to hand data to later stages.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpforge.runtime.observability import BoundLogger

    from .capabilities import Capabilities, HttpCapability


@dataclass(slots=True, frozen=True)
class RequestInfo:
    """Request metadata as seen by handlers."""

    id: str
    timestamp: float = field(default_factory=time.time)
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def create(cls, request_id: str | None = None, headers: Mapping[str, str] | None = None) -> RequestInfo:
        return cls(id=request_id or uuid.uuid4().hex[:12], headers=MappingProxyType(dict(headers or {})))


@dataclass(slots=True)
class InvocationContext:
    """Execution context passed to hooks and handlers.

    Example:
        >>> async def audit(ctx, input):
        ...     ctx["started"] = time.time()
        ...     ctx.log.info("audit", identity=ctx.identity)
    """

    capabilities: Capabilities
    log: BoundLogger
    request: RequestInfo | None = None
    identity: str | None = None
    tool_name: str | None = None
    state: dict[str, object] = field(default_factory=dict)
    cancel_event: asyncio.Event | None = field(default=None, repr=False)

    # ─── Capability forwarding ───────────────────────────────────────

    @property
    def http(self) -> HttpCapability | None:
        return self.capabilities.http

    @property
    def storage(self) -> object | None:
        return self.capabilities.storage

    @property
    def env(self) -> Mapping[str, str]:
        return self.capabilities.env

    @property
    def request_id(self) -> str | None:
        return self.request.id if self.request else None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    # ─── Scratch state ───────────────────────────────────────────────

    def __getitem__(self, key: str) -> object:
        return self.state[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.state[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.state

    def get(self, key: str, default: object = None) -> object:
        return self.state.get(key, default)
