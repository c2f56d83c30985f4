"""Last-resort conversion of endpoint faults into a 500 response."""

from __future__ import annotations

from dataclasses import dataclass, field

from mcpforge.runtime.observability import BoundLogger, get_logger

from ..middleware import AdmissionRequest, AdmissionResponse, Next


@dataclass
class ErrorMiddleware:
    """Catch exceptions escaping the rest of the chain.

    The exception message is exposed only when `expose_messages` is set
    (development); the traceback always goes to the log only.
    """

    expose_messages: bool = False
    log: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.middleware.errors"), repr=False)

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        try:
            return await next(request)
        except Exception as e:
            self.log.exception("request error", method=request.method, path=request.path, error=str(e))
            return AdmissionResponse.reject(500, "Internal server error", str(e) if self.expose_messages else None)
