"""Fire-and-forget mail dispatch.

Requests must not wait on (or fail because of) SMTP.  :meth:`MailDispatcher.dispatch`
schedules delivery as a detached :class:`asyncio.Task` and returns at once;
failures are logged and dropped.  The dispatcher keeps a strong reference to
every pending task so none is garbage-collected mid-flight, and
:meth:`MailDispatcher.wait_idle` lets shutdown and tests drain them.
"""

from __future__ import annotations

import asyncio
import logging

from taskhub.mail.base import Mailer, MailMessage

logger = logging.getLogger(__name__)


class MailDispatcher:
    def __init__(self, mailer: Mailer) -> None:
        self.mailer = mailer
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, message: MailMessage) -> asyncio.Task[None]:
        """Schedule delivery of *message* without awaiting it."""
        task = asyncio.create_task(
            self._deliver(message), name=f"mail:{message.subject[:40]}"
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, message: MailMessage) -> None:
        try:
            await self.mailer.send(message)
        except Exception as exc:
            logger.error(
                "Mail delivery to %s failed: %s", message.to, exc, exc_info=True
            )

    async def wait_idle(self, timeout: float | None = None) -> None:
        """Wait until every dispatched message has finished (or *timeout* passes)."""
        if not self._pending:
            return
        done, not_done = await asyncio.wait(set(self._pending), timeout=timeout)
        if not_done:
            logger.warning("%d mail deliveries still pending after %.1fs", len(not_done), timeout)

    async def close(self, timeout: float = 10.0) -> None:
        """Drain pending deliveries, cancel stragglers and close the mailer."""
        await self.wait_idle(timeout=timeout)
        stragglers = list(self._pending)
        for task in stragglers:
            task.cancel()
        if stragglers:
            await asyncio.gather(*stragglers, return_exceptions=True)
            logger.warning("Cancelled %d undelivered mail(s) on shutdown", len(stragglers))
        await self.mailer.close()


__all__ = ["MailDispatcher"]
