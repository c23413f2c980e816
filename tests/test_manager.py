"""TaskHubManager: lifecycle, component wiring and health reporting."""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI

from conftest import RecordingMailer, make_config
from taskhub.mail.base import LoggingMailer
from taskhub.mail.smtp import SMTPMailer
from taskhub.manager import TaskHubManager


class TestLifecycle:

    def test_construction_does_no_io(self) -> None:
        manager = TaskHubManager(make_config())
        assert not manager.initialized

    @pytest.mark.asyncio
    async def test_initialize_and_shutdown(self) -> None:
        mailer = RecordingMailer()
        manager = TaskHubManager(make_config(), mailer=mailer)
        await manager.initialize()
        assert manager.initialized
        assert await manager.database.ping()
        await manager.shutdown()
        assert not manager.initialized
        assert mailer.closed

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self) -> None:
        async with TaskHubManager(make_config(), mailer=RecordingMailer()) as manager:
            database = manager.database
            await manager.initialize()
            assert manager.database is database

    @pytest.mark.asyncio
    async def test_shutdown_before_initialize_is_noop(self) -> None:
        await TaskHubManager(make_config()).shutdown()

    @pytest.mark.asyncio
    async def test_notifier_started_when_enabled(self) -> None:
        cfg = make_config(enable_deadline_checker=True, deadline_check_interval_seconds=3600)
        async with TaskHubManager(cfg, mailer=RecordingMailer()) as manager:
            assert manager.notifier.running
        assert not manager.notifier.running

    @pytest.mark.asyncio
    async def test_notifier_not_started_when_disabled(self) -> None:
        async with TaskHubManager(make_config(), mailer=RecordingMailer()) as manager:
            assert not manager.notifier.running


class TestMailerSelection:

    @pytest.mark.asyncio
    async def test_logging_mailer_without_smtp(self) -> None:
        async with TaskHubManager(make_config()) as manager:
            assert isinstance(manager.mail.mailer, LoggingMailer)

    @pytest.mark.asyncio
    async def test_smtp_mailer_with_host(self) -> None:
        cfg = make_config(smtp_host="smtp.example.com", smtp_username="u", smtp_password="p")
        async with TaskHubManager(cfg) as manager:
            assert isinstance(manager.mail.mailer, SMTPMailer)

    @pytest.mark.asyncio
    async def test_custom_mailer_wins(self) -> None:
        mailer = RecordingMailer()
        async with TaskHubManager(make_config(), mailer=mailer) as manager:
            assert manager.mail.mailer is mailer


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, manager: TaskHubManager) -> None:
        report = await manager.health_check()
        assert report["status"] == "healthy"
        assert report["components"]["database"]["dialect"] == "sqlite"
        assert report["components"]["deadline_notifier"]["status"] == "stopped"

    @pytest.mark.asyncio
    async def test_not_initialised(self) -> None:
        report = await TaskHubManager(make_config()).health_check()
        assert report["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_database_failure_reported(self, manager: TaskHubManager) -> None:
        manager.database.ping = AsyncMock(side_effect=RuntimeError("db down"))
        report = await manager.health_check()
        assert report["status"] == "unhealthy"
        assert "db down" in report["components"]["database"]["error"]


class TestLifespan:

    @pytest.mark.asyncio
    async def test_lifespan_exposes_manager(self) -> None:
        cfg = make_config()
        manager = TaskHubManager(cfg, mailer=RecordingMailer())
        app = FastAPI()
        lifespan = TaskHubManager.create_lifespan(cfg, manager=manager)
        async with lifespan(app):
            assert app.state.manager is manager
            assert app.state.config is cfg
            assert manager.initialized
        assert not manager.initialized
