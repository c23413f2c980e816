"""Periodic deadline warnings.

:class:`DeadlineNotifier` runs one background :class:`asyncio.Task` that,
every ``deadline_check_interval_seconds``, mails the assignee of each
unfinished task due within the warning window.  A failing cycle is logged
and the loop carries on.  Warnings are not de-duplicated: a task that stays
inside the window across several cycles is warned once per cycle.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from taskhub.mail.messages import deadline_warning_message
from taskhub.services.base import BaseService
from taskhub.storage.repositories import TaskStore
from taskhub.utils.dates import utc_now

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig
    from taskhub.mail.dispatcher import MailDispatcher
    from taskhub.storage.database import Database

logger = logging.getLogger(__name__)


class DeadlineNotifier(BaseService):
    def __init__(
        self,
        database: Database,
        config: TaskHubConfig,
        mail: MailDispatcher,
    ) -> None:
        super().__init__(database, config)
        self.mail = mail
        self.interval = config.deadline_check_interval_seconds
        self.window = timedelta(hours=config.deadline_warning_window_hours)
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_deadlines(self) -> int:
        """Run one cycle; return the number of warnings dispatched."""
        now = utc_now()
        async with self.database.session_factory() as session:
            due = await TaskStore(session).list_due_between(now, now + self.window)

        for task in due:
            logger.warning(
                "DEADLINE WARNING: task %r (id=%s) assigned to %s is due on %s",
                task.title, task.id, task.assigned_to.email, task.deadline.isoformat(),
            )
            self.mail.dispatch(
                deadline_warning_message(
                    email=task.assigned_to.email,
                    full_name=task.assigned_to.full_name,
                    task_title=task.title,
                    project_name=task.project.name,
                    deadline=task.deadline,
                )
            )
        logger.info("Checked %d task(s) for deadline warnings", len(due))
        return len(due)

    async def _run(self) -> None:
        while True:
            try:
                await self.check_deadlines()
            except Exception as exc:
                logger.error("Deadline check failed: %s", exc, exc_info=True)
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="taskhub-deadline-notifier")
        logger.info("Deadline notifier started interval=%ss window=%s", self.interval, self.window)

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Deadline notifier stopped")


__all__ = ["DeadlineNotifier"]
