"""Outbound mail: delivery backends, fire-and-forget dispatch and message builders."""

from taskhub.mail.base import LoggingMailer, Mailer, MailMessage
from taskhub.mail.dispatcher import MailDispatcher
from taskhub.mail.messages import (
    deadline_warning_message,
    invitation_message,
    welcome_message,
)
from taskhub.mail.smtp import SMTPMailer

__all__ = [
    "LoggingMailer",
    "MailDispatcher",
    "MailMessage",
    "Mailer",
    "SMTPMailer",
    "deadline_warning_message",
    "invitation_message",
    "welcome_message",
]
