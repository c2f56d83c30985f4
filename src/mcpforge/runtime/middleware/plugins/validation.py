"""Request shape checks that run before the pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from ..middleware import AdmissionRequest, AdmissionResponse, Next


@dataclass(slots=True)
class BodyRequiredMiddleware:
    """Reject body-carrying methods (POST by default) that arrive without a body, with 400."""

    methods: frozenset[str] = frozenset({"POST"})

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        if request.method in self.methods and request.body is None:
            return AdmissionResponse.reject(400, "Bad request", "Request body is required")
        return await next(request)
