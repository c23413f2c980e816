"""FastAPI application factory.

Run with::

    uvicorn --factory taskhub.api.app:create_app

Configuration is read from ``TASKHUB_*`` environment variables (or ``.env``)
unless a :class:`~taskhub.core.config.TaskHubConfig` is passed in.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub import __version__
from taskhub.api.errors import register_exception_handlers
from taskhub.api.middleware import IdentityMiddleware
from taskhub.api.routers import (
    auth,
    health,
    invitations,
    notifications,
    projects,
    subscriptions,
    tasks,
)
from taskhub.core.config import TaskHubConfig
from taskhub.manager import TaskHubManager

logger = logging.getLogger(__name__)


def create_app(
    config: TaskHubConfig | None = None,
    *,
    manager: TaskHubManager | None = None,
) -> FastAPI:
    """Build the TaskHub application.

    Parameters
    ----------
    config:
        Settings; read from the environment when omitted.
    manager:
        Pre-built manager, e.g. one already initialised by a test fixture.
        Its lifecycle is still driven by the app lifespan (initialisation is
        idempotent).
    """
    if config is None:
        config = manager.config if manager is not None else TaskHubConfig()
    if manager is None:
        manager = TaskHubManager(config)

    app = FastAPI(
        title="TaskHub",
        version=__version__,
        lifespan=TaskHubManager.create_lifespan(config, manager=manager),
    )
    # Routes and the middleware reach the manager here even when the
    # lifespan is not run (ASGI test transports).
    app.state.manager = manager
    app.state.config = config

    app.add_middleware(IdentityMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for module in (auth, projects, tasks, subscriptions, invitations, notifications, health):
        app.include_router(module.router)

    logger.info("TaskHub application created version=%s", __version__)
    return app


__all__ = ["create_app"]
