"""Translate :class:`~taskhub.core.exceptions.TaskHubError` into JSON responses.

Error body::

    {"error": "<code>", "message": "<text>", "details": {...}}

``details`` is omitted when empty.  The status code comes from the exception
class unless the route narrowed it with :func:`status_overrides`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from fastapi.responses import JSONResponse

from taskhub.core.exceptions import TaskHubError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"error": error, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@contextmanager
def status_overrides(mapping: dict[type[TaskHubError], int]) -> Iterator[None]:
    """Re-tag errors raised inside the block with a route-specific status.

    Example:
        ```python
        with status_overrides({NotFoundError: 400}):
            view = await manager.invitations.get_invitation(token)
        ```
    """
    try:
        yield
    except TaskHubError as exc:
        for exc_type, status_code in mapping.items():
            if isinstance(exc, exc_type):
                exc.status_code = status_code
                break
        raise


async def taskhub_error_handler(request: Request, exc: TaskHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        return error_response(exc.status_code, exc.code, "An unexpected error occurred")
    logger.info(
        "%s %s rejected status=%d error=%s: %s",
        request.method, request.url.path, exc.status_code, exc.code, exc.message,
    )
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskHubError, taskhub_error_handler)  # type: ignore[arg-type]


__all__ = [
    "error_response",
    "register_exception_handlers",
    "status_overrides",
    "taskhub_error_handler",
]
