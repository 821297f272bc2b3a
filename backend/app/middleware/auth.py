"""API key check for the import endpoints."""

from __future__ import annotations

import hmac

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_settings

API_KEY_HEADER = "X-API-Key"
PUBLIC_PATHS = frozenset({"/", "/health", "/docs", "/openapi.json", "/redoc", "/debug/cors"})


def _needs_key(request: Request) -> bool:
    # CORS preflight never carries the key header
    return request.method != "OPTIONS" and request.url.path not in PUBLIC_PATHS


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Reject protected requests lacking the configured key. Without a key (local runs) everything passes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        expected = get_settings().api_key
        if expected and _needs_key(request):
            supplied = request.headers.get(API_KEY_HEADER, "")
            if not hmac.compare_digest(supplied.encode(), expected.encode()):
                return JSONResponse(status_code=401, content={"detail": "Invalid or missing API key"})
        return await call_next(request)
