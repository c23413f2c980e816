"""FastAPI dependency-injection helpers for TaskHub routes."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from taskhub.core.exceptions import UnauthorizedError
from taskhub.manager import TaskHubManager


def get_manager(request: Request) -> TaskHubManager:
    """Return the :class:`TaskHubManager` attached to the application.

    Raises 503 while no initialised manager is attached, e.g. an app not built
    with :func:`taskhub.api.app.create_app` or one whose lifespan has ended.
    """
    manager = getattr(request.app.state, "manager", None)
    if manager is None or not manager.initialized:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not yet initialised.",
        )
    return manager


def get_current_user_id(request: Request) -> uuid.UUID:
    """Return the authenticated user's id, raising 401 if the request is anonymous.

    The id is set by :class:`~taskhub.api.middleware.IdentityMiddleware`.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise UnauthorizedError("Authentication required")
    return user_id


Manager = Annotated[TaskHubManager, Depends(get_manager)]
CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]


__all__ = ["CurrentUserId", "Manager", "get_current_user_id", "get_manager"]
