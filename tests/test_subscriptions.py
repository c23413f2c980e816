"""SubscriptionService: purchase rules and the active-subscription check."""
from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import project_with_members, register, set_columns
from taskhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskhub.core.types import SubscriptionStatus
from taskhub.manager import TaskHubManager
from taskhub.storage.models import SubscriptionModel
from taskhub.utils.dates import add_months, utc_now


class TestCreateSubscription:

    @pytest.mark.asyncio
    async def test_create(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        project = await manager.projects.create_project("Apollo", "", ada)
        before = utc_now()

        sub = await manager.subscriptions.create_subscription(
            project.id, ada, "Pro", Decimal("29.90"), 3
        )
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.package_name == "Pro"
        assert sub.price == pytest.approx(29.90)
        assert sub.user_id == ada
        assert sub.start_date >= before
        assert sub.end_date == add_months(sub.start_date, 3)
        assert await manager.subscriptions.has_active_subscription(project.id)

    @pytest.mark.asyncio
    async def test_only_leader(self, manager: TaskHubManager) -> None:
        project_id, _, [bob] = await project_with_members(
            manager, "ada@example.com", "bob@example.com"
        )
        with pytest.raises(ForbiddenError):
            await manager.subscriptions.create_subscription(
                project_id, bob, "Pro", Decimal("9.99"), 1
            )

    @pytest.mark.asyncio
    async def test_missing_project(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        with pytest.raises(NotFoundError):
            await manager.subscriptions.create_subscription(
                uuid.uuid4(), ada, "Pro", Decimal("9.99"), 1
            )

    @pytest.mark.asyncio
    async def test_second_active_rejected(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        project = await manager.projects.create_project("Apollo", "", ada)
        await manager.subscriptions.create_subscription(project.id, ada, "Pro", Decimal("9.99"), 1)
        with pytest.raises(ConflictError, match="already has an active subscription"):
            await manager.subscriptions.create_subscription(
                project.id, ada, "Max", Decimal("19.99"), 1
            )

    @pytest.mark.asyncio
    async def test_lapsed_active_is_expired_and_replaced(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        project = await manager.projects.create_project("Apollo", "", ada)
        old = await manager.subscriptions.create_subscription(
            project.id, ada, "Pro", Decimal("9.99"), 1
        )
        await set_columns(
            manager, SubscriptionModel, old.id, end_date=utc_now() - timedelta(days=1)
        )
        assert not await manager.subscriptions.has_active_subscription(project.id)

        new = await manager.subscriptions.create_subscription(
            project.id, ada, "Max", Decimal("19.99"), 12
        )
        assert new.status == SubscriptionStatus.ACTIVE
        async with manager.database.session_factory() as session:
            lapsed = await session.get(SubscriptionModel, old.id)
        assert lapsed.status == SubscriptionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_no_subscription(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        project = await manager.projects.create_project("Apollo", "", ada)
        assert not await manager.subscriptions.has_active_subscription(project.id)

    @pytest.mark.asyncio
    async def test_cancelled_does_not_count(self, manager: TaskHubManager) -> None:
        ada = await register(manager, "ada@example.com")
        project = await manager.projects.create_project("Apollo", "", ada)
        sub = await manager.subscriptions.create_subscription(
            project.id, ada, "Pro", Decimal("9.99"), 1
        )
        await set_columns(
            manager, SubscriptionModel, sub.id, status=SubscriptionStatus.CANCELLED
        )
        assert not await manager.subscriptions.has_active_subscription(project.id)
