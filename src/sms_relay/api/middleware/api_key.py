from __future__ import annotations

import hmac

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

HEADER = "X-API-Key"
EXEMPT_PATHS = frozenset({"/health", "/healthz"})


def _is_exempt(path: str) -> bool:
    return path in EXEMPT_PATHS or path.startswith("/health/")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Shared-secret header check; health endpoints are exempt."""

    def __init__(self, app: ASGIApp, api_key: str) -> None:
        super().__init__(app)
        self._api_key = api_key.encode("utf-8")

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if _is_exempt(request.url.path):
            return await call_next(request)

        provided = request.headers.get(HEADER)
        if provided is None:
            return PlainTextResponse("API Key missing", status_code=401)

        # constant-time comparison
        if not hmac.compare_digest(self._api_key, provided.encode("utf-8")):
            return PlainTextResponse("Invalid API Key", status_code=403)

        return await call_next(request)
