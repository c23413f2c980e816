"""SMTP delivery backend built on :mod:`smtplib`.

``smtplib`` is blocking, so every send runs in a worker thread via
:func:`asyncio.to_thread`.  A fresh connection is opened per message.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import TYPE_CHECKING

from taskhub.core.exceptions import ConfigurationError
from taskhub.mail.base import Mailer, MailMessage

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig

logger = logging.getLogger(__name__)


class SMTPMailer(Mailer):
    """Send mail through an authenticated SMTP server (STARTTLS by default).

    Example:
        ```python
        mailer = SMTPMailer.from_config(config)
        await mailer.send(MailMessage(to="a@b.io", subject="Hi", text_body="..."))
        ```
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        from_address: str = "noreply@taskhub.local",
        from_name: str = "TaskHub",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.from_name = from_name
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: TaskHubConfig) -> SMTPMailer:
        if not config.smtp_host:
            raise ConfigurationError("smtp_host", "SMTPMailer requires an SMTP host")
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_address=config.mail_from_address,
            from_name=config.mail_from_name,
        )

    def build_mime(self, message: MailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = formataddr((self.from_name, self.from_address))
        mime["To"] = formataddr((message.to_name or "", message.to))
        mime.attach(MIMEText(message.text_body, "plain", "utf-8"))
        if message.html_body:
            mime.attach(MIMEText(message.html_body, "html", "utf-8"))
        return mime

    def _send_sync(self, message: MailMessage) -> None:
        mime = self.build_mime(message)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.from_address, [message.to], mime.as_string())

    async def send(self, message: MailMessage) -> None:
        logger.debug("Connecting to SMTP server %s:%d", self.host, self.port)
        await asyncio.to_thread(self._send_sync, message)
        logger.info("Mail sent to=%s subject=%r", message.to, message.subject)


__all__ = ["SMTPMailer"]
