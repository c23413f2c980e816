"""Identity middleware: bearer-token authentication and request logging.

Processing pipeline
-------------------
1. Skip public infrastructure paths (health, docs) and OPTIONS preflights.
2. Refuse with 503 while the manager is not initialised.
3. If an ``Authorization`` header is present, require ``Bearer <token>``
   and validate it; a bad header or token is answered with 401.
4. Store the authenticated user id (or ``None``) on ``request.state.user_id``.
5. Forward to the next handler and log a one-line request summary.

Routes that need an identity depend on
:func:`taskhub.api.dependencies.get_current_user_id`, which turns a missing
identity into 401.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from taskhub.api.errors import error_response
from taskhub.core.exceptions import UnauthorizedError

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

_PUBLIC_PREFIXES: tuple[str, ...] = ("/health", "/docs", "/redoc", "/openapi.json")


class IdentityMiddleware(BaseHTTPMiddleware):
    """Authenticate the bearer token, if any, of every request.

    Parameters
    ----------
    app:
        The ASGI application (injected by Starlette's middleware machinery).
    public_prefixes:
        URL prefixes served without touching the manager or the token.
    """

    def __init__(
        self, app: Any, *, public_prefixes: tuple[str, ...] = _PUBLIC_PREFIXES
    ) -> None:
        super().__init__(app)
        self.public_prefixes = public_prefixes

    def _is_public(self, request: Request) -> bool:
        # CORS preflights carry no credentials
        return request.method == "OPTIONS" or request.url.path.startswith(
            self.public_prefixes
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        request.state.user_id = None

        if self._is_public(request):
            return await call_next(request)

        manager = getattr(request.app.state, "manager", None)
        if manager is None or not manager.initialized:
            logger.error("IdentityMiddleware called before TaskHubManager.initialize()")
            return error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "service_unavailable",
                "Service is not yet initialised.",
            )

        auth_header = request.headers.get("Authorization")
        if auth_header:
            parts = auth_header.split()
            if len(parts) != 2 or parts[0].lower() != "bearer":
                return error_response(
                    status.HTTP_401_UNAUTHORIZED,
                    UnauthorizedError.code,
                    "Invalid Authorization header format. Expected: Bearer <token>",
                )
            try:
                request.state.user_id = manager.auth.authenticate(parts[1])
            except UnauthorizedError as exc:
                return error_response(exc.status_code, exc.code, exc.message)

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d user=%s in %.2f ms",
            request.method,
            request.url.path,
            response.status_code,
            request.state.user_id,
            elapsed_ms,
        )
        return response


__all__ = ["IdentityMiddleware"]
