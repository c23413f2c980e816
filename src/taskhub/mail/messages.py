"""Builders for the messages TaskHub sends."""

from __future__ import annotations

from datetime import datetime
from html import escape
from urllib.parse import quote

from taskhub.mail.base import MailMessage


def welcome_message(email: str, full_name: str) -> MailMessage:
    text = (
        f"Welcome {full_name}!\n\n"
        f"Your TaskHub account has been created for {email}.\n"
        "You can start creating projects and managing tasks right away.\n"
    )
    html = (
        f"<h2>Welcome {escape(full_name)}!</h2>"
        f"<p>Your TaskHub account has been created for <strong>{escape(email)}</strong>.</p>"
        "<p>You can start creating projects and managing tasks right away.</p>"
    )
    return MailMessage(
        to=email, to_name=full_name, subject="Welcome to TaskHub",
        text_body=text, html_body=html,
    )


def invitation_message(
    email: str,
    inviter_name: str,
    project_name: str,
    token: str,
    base_url: str,
    ttl_days: int,
) -> MailMessage:
    """Invitation with accept and decline links carrying the opaque token."""
    quoted = quote(token, safe="")
    accept_link = f"{base_url}/invitation/accept?token={quoted}"
    decline_link = f"{base_url}/invitation/decline?token={quoted}"
    text = (
        f"{inviter_name} has invited you to join the project {project_name}.\n\n"
        f"Accept:  {accept_link}\n"
        f"Decline: {decline_link}\n\n"
        f"This link expires in {ttl_days} days. "
        "If you do not have an account yet you will be asked to register first.\n"
    )
    html = (
        "<h2>Project invitation</h2>"
        f"<p><strong>{escape(inviter_name)}</strong> has invited you to join "
        f"<strong>{escape(project_name)}</strong>.</p>"
        f'<p><a href="{accept_link}">Accept</a> &middot; '
        f'<a href="{decline_link}">Decline</a></p>'
        f"<p>This link expires in {ttl_days} days.</p>"
    )
    return MailMessage(
        to=email, subject=f"Invitation to join project: {project_name}",
        text_body=text, html_body=html,
    )


def deadline_warning_message(
    email: str,
    full_name: str,
    task_title: str,
    project_name: str,
    deadline: datetime,
) -> MailMessage:
    due = deadline.strftime("%d/%m/%Y %H:%M UTC")
    text = (
        f"Hello {full_name},\n\n"
        f"Your task '{task_title}' in project {project_name} is due on {due}. "
        "Please complete it soon.\n"
    )
    return MailMessage(
        to=email, to_name=full_name, subject=f"Deadline warning: {task_title}",
        text_body=text,
    )


__all__ = ["deadline_warning_message", "invitation_message", "welcome_message"]
