"""Outbound mail abstractions.

:class:`Mailer` is the delivery interface; the API and services never call
it directly but go through :class:`~taskhub.mail.dispatcher.MailDispatcher`
so that delivery happens off the request path.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class MailMessage(BaseModel):
    """A single outgoing message.

    Attributes:
        to: Recipient address
        subject: Subject line
        text_body: Plain-text body (always sent)
        html_body: Optional HTML alternative
        to_name: Optional recipient display name
    """

    model_config = ConfigDict(frozen=True)

    to: str
    subject: str
    text_body: str
    html_body: str | None = None
    to_name: str | None = None


class Mailer(ABC):
    """Abstract mail delivery backend.

    Implementations:
    - :class:`~taskhub.mail.smtp.SMTPMailer`: real delivery over SMTP
    - :class:`LoggingMailer`: development backend that only logs
    """

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver *message*.

        Raises:
            Exception: Any delivery failure; the dispatcher logs it.
        """

    async def close(self) -> None:  # noqa: B027
        """Release backend resources (no-op by default)."""


class LoggingMailer(Mailer):
    """Mailer used when no SMTP host is configured; writes each message to the log."""

    async def send(self, message: MailMessage) -> None:
        logger.info("Mail (not sent, no SMTP host) to=%s subject=%r", message.to, message.subject)
        logger.debug("Mail body:\n%s", message.text_body)


__all__ = ["LoggingMailer", "MailMessage", "Mailer"]
