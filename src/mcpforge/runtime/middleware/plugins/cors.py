"""CORS response headers and preflight handling."""

from __future__ import annotations

from dataclasses import dataclass, field

from mcpforge.foundation.config import CorsOptions

from ..middleware import AdmissionRequest, AdmissionResponse, Next


@dataclass
class CorsMiddleware:
    """Attach CORS headers to every response. `OPTIONS` short-circuits with 204.

    Example:
        >>> server.use(CorsMiddleware(CorsOptions(origin=["https://app.example.com"], credentials=True)))
    """

    options: CorsOptions = field(default_factory=CorsOptions)

    def headers(self) -> dict[str, str]:
        opts = self.options
        out = {
            "Access-Control-Allow-Origin": opts.origin_header,
            "Access-Control-Allow-Methods": ", ".join(opts.methods),
            "Access-Control-Allow-Headers": ", ".join(opts.allowed_headers),
        }
        if opts.exposed_headers:
            out["Access-Control-Expose-Headers"] = ", ".join(opts.exposed_headers)
        if opts.credentials:
            out["Access-Control-Allow-Credentials"] = "true"
        if opts.max_age:
            out["Access-Control-Max-Age"] = str(opts.max_age)
        return out

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        if request.method == "OPTIONS":
            return AdmissionResponse(status=204, headers=self.headers())
        response = await next(request)
        response.headers.update(self.headers())
        return response
