"""Token-based authentication gating."""

from __future__ import annotations

import hashlib
import inspect
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Callable

from mcpforge.foundation.config import AuthOptions
from mcpforge.foundation.core import Capabilities, DefaultCapabilities, InvocationContext, RequestInfo
from mcpforge.runtime.observability import BoundLogger, get_logger

from ..middleware import AdmissionRequest, AdmissionResponse, Next

_BEARER = "Bearer "

# (headers) -> bool, sync or async
HeaderValidator = Callable[[Mapping[str, str]], "bool | Awaitable[bool]"]


def extract_token(options: AuthOptions, request: AdmissionRequest) -> str | None:
    """Pull the credential out of the request per the configured scheme.

    Returns None when the header is absent, empty, or (bearer) lacks the `Bearer ` prefix.
    """
    raw = request.header(options.effective_header)
    match options.type:
        case "bearer":
            token = raw[len(_BEARER):] if raw and raw.startswith(_BEARER) else None
        case _:
            token = raw
    return token or None


def token_identity(token: str) -> str:
    """Stable caller identity derived from a token, safe to log and key on."""
    return f"token:{hashlib.sha256(token.encode()).hexdigest()[:16]}"


async def _resolve(value: object) -> object:
    return await value if inspect.isawaitable(value) else value


@dataclass
class AuthMiddleware:
    """Reject requests without a valid token with 401.

    The accept/reject decision is delegated to `options.validate_token`
    (token, ctx) -> bool | str. Without a validator any present token is accepted.
    On acceptance `request.identity` is set to the validator's string result,
    or else to `token_identity(token)`, so rate limiting keys on the caller.
    The validator receives an invocation context carrying the server's
    capabilities and a bound logger.

    Example:
        >>> async def check(token, ctx):
        ...     return token == ctx.env.get("API_KEY")
        >>> server.use(AuthMiddleware(AuthOptions(type="apiKey", validate=check)))
    """

    options: AuthOptions
    capabilities: Capabilities = field(default_factory=DefaultCapabilities, repr=False)
    log: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.middleware.auth"), repr=False)

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        if (token := extract_token(self.options, request)) is None:
            self.log.warning("authentication missing", scheme=self.options.type, path=request.path)
            return AdmissionResponse.reject(401, "Authentication required", f"Missing {self.options.type} token")

        verdict: object = True
        if (validate := self.options.validate_token) is not None:
            ctx = InvocationContext(
                capabilities=self.capabilities,
                log=self.log.bind(request_id=request.ensure_request_id()),
                request=RequestInfo.create(request.request_id, request.headers),
                tool_name=request.tool_name,
            )
            if not (verdict := await _resolve(validate(token, ctx))):
                self.log.warning("authentication failed", scheme=self.options.type, path=request.path)
                return AdmissionResponse.reject(401, "Authentication failed", "Invalid token")

        request.identity = verdict if isinstance(verdict, str) else token_identity(token)
        request["authenticated"] = True
        return await next(request)


@dataclass
class HeaderAuthMiddleware:
    """Gate on a predicate over the raw request headers (401 `Unauthorized` when false)."""

    validator: HeaderValidator
    log: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.middleware.auth"), repr=False)

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        if not await _resolve(self.validator(request.headers)):
            self.log.warning("authentication failed", path=request.path)
            return AdmissionResponse.reject(401, "Unauthorized")
        request["authenticated"] = True
        return await next(request)
