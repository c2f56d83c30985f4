"""Request logging middleware."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from mcpforge.runtime.observability import BoundLogger, get_logger

from ..middleware import AdmissionRequest, AdmissionResponse, Next


@dataclass
class LoggingMiddleware:
    """Log each request and its outcome with timing.

    The request id comes from `x-request-id` or is generated, and is
    echoed back in the `x-request-id` response header. Duration is stored
    on the request as `duration_ms`.

    Example:
        >>> server.use(LoggingMiddleware())
    """

    log: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.middleware.http"))

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        request_id = request.ensure_request_id()
        log = self.log.bind(request_id=request_id, method=request.method, path=request.path)
        start = time.perf_counter()
        log.info("request received", ip=request.client_ip)
        try:
            response = await next(request)
        except Exception as e:
            request["duration_ms"] = duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log.exception("request errored", duration_ms=duration_ms, error=str(e))
            raise
        request["duration_ms"] = duration_ms = round((time.perf_counter() - start) * 1000, 2)
        (log.info if response.ok else log.warning)("request completed", status=response.status, duration_ms=duration_ms)
        response.headers.setdefault("x-request-id", request_id)
        return response
