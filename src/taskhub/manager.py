"""Central TaskHub manager: lifecycle and component orchestration.

Design decisions
----------------
* ``TaskHubManager.__init__`` performs **no** I/O and needs no ``app``.  The
  database engine, the schema, the mail dispatcher and the deadline notifier
  are all created in :meth:`TaskHubManager.initialize`, which makes the
  manager independently constructable and testable.

* **create_lifespan** is the one-call integration with FastAPI::

      app = FastAPI(lifespan=TaskHubManager.create_lifespan(config))

* Tests that drive the app through ``httpx.ASGITransport`` (which does not
  run the lifespan) use the manager as an async context manager instead::

      async with TaskHubManager(config, mailer=RecordingMailer()) as manager:
          app = create_app(config, manager=manager)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from taskhub.mail.base import LoggingMailer
from taskhub.mail.dispatcher import MailDispatcher
from taskhub.mail.smtp import SMTPMailer
from taskhub.services import (
    AuthService,
    DeadlineNotifier,
    InvitationService,
    ProjectService,
    SubscriptionService,
    TaskService,
    TokenIssuer,
)
from taskhub.storage.database import Database

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI
    from starlette.types import Lifespan

    from taskhub.core.config import TaskHubConfig
    from taskhub.mail.base import Mailer

logger = logging.getLogger(__name__)


class TaskHubManager:
    """Orchestrator for every TaskHub component.

    Lifecycle
    ---------
    1. **Construct**: stores configuration and overrides, no I/O.
    2. **initialize()**: creates the engine and tables, the services, the
       mail dispatcher, and starts the deadline notifier when enabled.
    3. **shutdown()**: stops the notifier, drains pending mail and disposes
       the engine.

    Parameters
    ----------
    config:
        Validated :class:`~taskhub.core.config.TaskHubConfig`.
    database:
        Override the :class:`~taskhub.storage.database.Database` built from
        ``config.database_url``.
    mailer:
        Override the mail backend.  Defaults to
        :class:`~taskhub.mail.smtp.SMTPMailer` when ``smtp_host`` is set and
        :class:`~taskhub.mail.base.LoggingMailer` otherwise.
    """

    def __init__(
        self,
        config: TaskHubConfig,
        *,
        database: Database | None = None,
        mailer: Mailer | None = None,
    ) -> None:
        self.config = config
        self._initialized = False

        self._custom_database = database
        self._custom_mailer = mailer

        # These are set during initialize()
        self.database: Database
        self.tokens: TokenIssuer
        self.mail: MailDispatcher
        self.auth: AuthService
        self.projects: ProjectService
        self.invitations: InvitationService
        self.subscriptions: SubscriptionService
        self.tasks: TaskService
        self.notifier: DeadlineNotifier

        logger.info(
            "TaskHubManager created deadline_checker=%s smtp=%s",
            config.enable_deadline_checker,
            "on" if config.smtp_host else "off",
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialise all components.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        if self._initialized:
            return

        logger.info("TaskHubManager initialising …")

        self._initialize_storage()
        await self.database.initialize()
        self._initialize_mail()
        self._initialize_services()

        if self.config.enable_deadline_checker:
            self.notifier.start()

        self._initialized = True
        logger.info("TaskHubManager initialised")

    async def shutdown(self) -> None:
        """Release all resources (notifier task, pending mail, connection pool)."""
        if not self._initialized:
            return

        logger.info("TaskHubManager shutting down …")

        await self.notifier.stop()
        await self.mail.close()
        await self.database.close()

        self._initialized = False
        logger.info("TaskHubManager shutdown complete")

    async def __aenter__(self) -> TaskHubManager:
        """Support ``async with TaskHubManager(config) as m:`` in tests."""
        await self.initialize()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.shutdown()

    @staticmethod
    def create_lifespan(
        config: TaskHubConfig,
        *,
        manager: TaskHubManager | None = None,
    ) -> Lifespan[FastAPI]:
        """Build a FastAPI ``lifespan`` that initialises and shuts down a manager.

        When *manager* is omitted a new one is built from *config*.  The
        manager and config are exposed as ``app.state.manager`` and
        ``app.state.config``.
        """

        @asynccontextmanager
        async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
            active = manager or TaskHubManager(config)
            app.state.manager = active
            app.state.config = config

            await active.initialize()
            try:
                yield
            finally:
                await active.shutdown()

        return _lifespan

    def _initialize_storage(self) -> None:
        if self._custom_database is not None:
            self.database = self._custom_database
        else:
            self.database = Database(
                database_url=self.config.database_url,
                pool_size=self.config.database_pool_size,
                max_overflow=self.config.database_max_overflow,
                echo=self.config.database_echo,
            )

    def _initialize_mail(self) -> None:
        if self._custom_mailer is not None:
            mailer = self._custom_mailer
        elif self.config.smtp_host:
            mailer = SMTPMailer.from_config(self.config)
        else:
            mailer = LoggingMailer()
        self.mail = MailDispatcher(mailer)

    def _initialize_services(self) -> None:
        db, config = self.database, self.config
        self.tokens = TokenIssuer(config)
        self.auth = AuthService(db, config, self.tokens, self.mail)
        self.projects = ProjectService(db, config, self.tokens, self.mail)
        self.invitations = InvitationService(db, config, self.tokens)
        self.subscriptions = SubscriptionService(db, config)
        self.tasks = TaskService(db, config)
        self.notifier = DeadlineNotifier(db, config, self.mail)

    async def health_check(self) -> dict[str, Any]:
        """Return health information for all managed components."""
        health: dict[str, Any] = {"status": "healthy", "components": {}}
        if not self._initialized:
            health["status"] = "unhealthy"
            health["components"]["manager"] = {"status": "not initialised"}
            return health

        try:
            await self.database.ping()
            health["components"]["database"] = {
                "status": "healthy",
                "dialect": self.database.dialect.value,
            }
        except Exception as exc:
            health["status"] = "unhealthy"
            health["components"]["database"] = {"status": "unhealthy", "error": str(exc)}

        health["components"]["deadline_notifier"] = {
            "status": "running" if self.notifier.running else "stopped",
        }
        health["components"]["mail"] = {
            "status": "healthy",
            "pending": self.mail.pending,
        }
        return health


__all__ = ["TaskHubManager"]
