"""Admission middleware types and chain composition.

Middleware follows continuation-passing style: each check receives the
inbound request and a `next` function. It either short-circuits with a
terminal `AdmissionResponse` (401, 429, 204 preflight, ...) without calling
`next`, or calls `next` to proceed. The innermost continuation is the
endpoint that hands the call to the invocation pipeline.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Protocol, runtime_checkable

import orjson

from mcpforge.foundation.errors import JsonDict


def _lower_keys(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType({k.lower(): v for k, v in (headers or {}).items()})


@dataclass(slots=True)
class AdmissionRequest:
    """Inbound call as seen by admission checks.

    Header names are lower-cased on construction. `state` is request-scoped
    scratch space shared by middleware (timing, auth results, ...).

    Example:
        >>> req = AdmissionRequest("POST", "/tools/greet", {"X-API-Key": "k"}, body={"name": "ada"})
        >>> req.header("x-api-key")
        'k'
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: object = None
    client_ip: str | None = None
    identity: str | None = None
    tool_name: str | None = None
    request_id: str | None = None
    state: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = _lower_keys(self.headers)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def ensure_request_id(self) -> str:
        if self.request_id is None:
            self.request_id = self.header("x-request-id") or uuid.uuid4().hex[:12]
        return self.request_id

    def __getitem__(self, key: str) -> object:
        return self.state[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.state[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.state

    def get(self, key: str, default: object = None) -> object:
        return self.state.get(key, default)


@dataclass(slots=True)
class AdmissionResponse:
    """Terminal or endpoint response. `body` is JSON-serializable or None (no content)."""

    status: int = 200
    body: object = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def reject(cls, status: int, error: str, message: str | None = None) -> AdmissionResponse:
        body: JsonDict = {"error": error}
        if message is not None:
            body["message"] = message
        return cls(status=status, body=body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def render(self) -> bytes:
        return b"" if self.body is None else orjson.dumps(self.body, option=orjson.OPT_NON_STR_KEYS)


# Type alias for the continuation function
Next = Callable[[AdmissionRequest], Awaitable[AdmissionResponse]]


@runtime_checkable
class Middleware(Protocol):
    """Protocol for admission middleware.

    Example:
        >>> class TimingMiddleware:
        ...     async def __call__(self, request, next):
        ...         start = time.perf_counter()
        ...         response = await next(request)
        ...         response.headers["x-response-time"] = f"{(time.perf_counter() - start) * 1000:.1f}ms"
        ...         return response
    """

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse: ...


def compose(middleware: Sequence[Middleware], endpoint: Next) -> Next:
    """Compose middleware around an endpoint.

    Args:
        middleware: Ordered checks (first = outermost, runs first)
        endpoint: Innermost continuation

    Returns:
        Composed async function: (request) -> response
    """
    chain: Next = endpoint
    for mw in reversed(middleware):
        def make_wrapper(m: Middleware, nxt: Next) -> Next:
            async def wrapped(request: AdmissionRequest) -> AdmissionResponse:
                return await m(request, nxt)
            return wrapped
        chain = make_wrapper(mw, chain)
    return chain
