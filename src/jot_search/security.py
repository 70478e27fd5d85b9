"""Request guards for the Jot search server."""

from __future__ import annotations

import hmac
from collections.abc import Awaitable, Callable

from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

HEALTH_PATH = "/jot/health"
SECRET_HEADER = "x-jot-secret"


class SharedSecretMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not carry the shared secret header."""

    def __init__(
        self, app: ASGIApp, secret: str, open_paths: frozenset[str] = frozenset({HEALTH_PATH})
    ) -> None:
        super().__init__(app)
        if not secret:
            raise ValueError("Shared secret must be configured")
        self._secret = secret.encode("utf-8")
        self._open_paths = open_paths

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in self._open_paths:
            return await call_next(request)

        provided = request.headers.get(SECRET_HEADER, "").encode("utf-8")
        if not provided or not hmac.compare_digest(provided, self._secret):
            return JSONResponse({"detail": "Unauthorized"}, status_code=401)

        return await call_next(request)


def build_security_middleware(secret: str | None) -> list[Middleware]:
    """Create the middleware stack for the HTTP transport.

    CORS is always allowed; the shared secret check is added in
    front of it only when a secret is configured.
    """

    middleware: list[Middleware] = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    ]

    if secret:
        middleware.insert(0, Middleware(SharedSecretMiddleware, secret=secret))

    return middleware
