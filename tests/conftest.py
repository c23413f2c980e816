"""Shared pytest fixtures for the TaskHub test suite.

Design philosophy
-----------------
- Every fixture that touches I/O uses SQLite in-memory, so the suite runs
  without PostgreSQL or an SMTP server.
- Outgoing mail is captured by :class:`RecordingMailer` instead of being sent.
- Fixtures are function scoped; each test gets a fresh database.
- The deadline notifier loop is disabled; tests drive
  ``check_deadlines()`` directly.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any

import httpx
import pytest
from sqlalchemy import update

from taskhub.api.app import create_app
from taskhub.core.config import TaskHubConfig
from taskhub.mail.base import Mailer, MailMessage
from taskhub.manager import TaskHubManager
from taskhub.utils.dates import utc_now

JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
PASSWORD = "correct-horse-battery"


def make_config(**kwargs: Any) -> TaskHubConfig:
    defaults: dict[str, Any] = dict(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=JWT_SECRET,
        enable_deadline_checker=False,
    )
    defaults.update(kwargs)
    return TaskHubConfig(**defaults)


class RecordingMailer(Mailer):
    """Mailer that keeps every message in memory."""

    def __init__(self) -> None:
        self.sent: list[MailMessage] = []
        self.closed = False

    async def send(self, message: MailMessage) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True

    def to(self, email: str) -> list[MailMessage]:
        return [m for m in self.sent if m.to == email]


class FailingMailer(Mailer):
    async def send(self, message: MailMessage) -> None:
        raise ConnectionError("SMTP server unreachable")


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> TaskHubConfig:
    return make_config()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
async def manager(config: TaskHubConfig, mailer: RecordingMailer):
    async with TaskHubManager(config, mailer=mailer) as m:
        yield m


@pytest.fixture
async def client(config: TaskHubConfig, manager: TaskHubManager):
    app = create_app(config, manager=manager)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------------------------------------------------------
# Service-level helpers
# ---------------------------------------------------------------------------

async def register(
    manager: TaskHubManager, email: str, full_name: str | None = None
) -> uuid.UUID:
    result = await manager.auth.register(email, PASSWORD, full_name or email.split("@")[0])
    return result.user_id


async def project_with_members(
    manager: TaskHubManager, leader_email: str, *member_emails: str
) -> tuple[uuid.UUID, uuid.UUID, list[uuid.UUID]]:
    """Create a project led by *leader_email* and join every member through an invitation.

    Returns ``(project_id, leader_id, member_ids)``.
    """
    leader_id = await register(manager, leader_email)
    project = await manager.projects.create_project("Apollo", "Moon shot", leader_id)
    member_ids = []
    for email in member_emails:
        member_id = await register(manager, email)
        invitation = await manager.projects.invite(project.id, email, leader_id)
        token = manager.tokens.issue_invitation_token(invitation.id)
        await manager.invitations.accept(token, member_id)
        member_ids.append(member_id)
    return project.id, leader_id, member_ids


async def set_columns(
    manager: TaskHubManager, model: type, row_id: uuid.UUID, **values: Any
) -> None:
    """Overwrite columns of one row directly, e.g. to move a timestamp into the past."""
    async with manager.database.session_factory() as session:
        await session.execute(update(model).where(model.id == row_id).values(**values))
        await session.commit()


def hours_from_now(hours: float) -> datetime:
    return utc_now() + timedelta(hours=hours)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------

async def api_register(
    client: httpx.AsyncClient, email: str, full_name: str = "Test User"
) -> httpx.Response:
    return await client.post(
        "/auth/register",
        json={"email": email, "password": PASSWORD, "fullName": full_name},
    )


async def api_login(client: httpx.AsyncClient, email: str) -> dict[str, str]:
    """Log an already registered user in and return bearer auth headers."""
    response = await client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


async def api_user(
    client: httpx.AsyncClient, email: str, full_name: str = "Test User"
) -> tuple[str, dict[str, str]]:
    """Register and log in; return ``(user_id, headers)``."""
    response = await api_register(client, email, full_name)
    assert response.status_code == 200, response.text
    headers = await api_login(client, email)
    return response.json()["userId"], headers
