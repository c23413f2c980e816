"""Paid subscriptions that lift the free member limit."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from taskhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskhub.core.types import SubscriptionStatus, SubscriptionView, ensure_transition
from taskhub.services.base import BaseService
from taskhub.storage.models import SubscriptionModel
from taskhub.storage.repositories import ProjectStore, SubscriptionStore
from taskhub.utils.dates import add_months, utc_now

logger = logging.getLogger(__name__)


class SubscriptionService(BaseService):
    async def create_subscription(
        self,
        project_id: uuid.UUID,
        caller_id: uuid.UUID,
        package_name: str,
        price: Decimal,
        duration_months: int,
    ) -> SubscriptionView:
        """Start an Active subscription running *duration_months* calendar months.

        Active subscriptions whose end date has passed are marked Expired
        first; any other Active subscription blocks the purchase.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the caller is not the project's Leader.
            ConflictError: If the project already has a running subscription.
        """
        now = utc_now()
        async with self.database.session_factory() as session:
            projects = ProjectStore(session)
            subscriptions = SubscriptionStore(session)

            if await projects.get(project_id) is None:
                raise NotFoundError("Project", project_id)
            if not await projects.is_leader(project_id, caller_id):
                raise ForbiddenError("Only the project leader can create a subscription")

            for active in await subscriptions.list_active(project_id):
                if active.end_date > now:
                    raise ConflictError("Project already has an active subscription")
                ensure_transition("Subscription", active.status, SubscriptionStatus.EXPIRED)
                active.status = SubscriptionStatus.EXPIRED

            subscription = SubscriptionModel(
                project_id=project_id,
                user_id=caller_id,
                package_name=package_name,
                price=price,
                start_date=now,
                end_date=add_months(now, duration_months),
                status=SubscriptionStatus.ACTIVE,
            )
            subscriptions.add(subscription)
            await session.commit()

        logger.info(
            "Subscription id=%s package=%r started for project=%s until %s",
            subscription.id, package_name, project_id, subscription.end_date.isoformat(),
        )
        return subscription.to_view()

    async def has_active_subscription(self, project_id: uuid.UUID) -> bool:
        async with self.database.session_factory() as session:
            return await SubscriptionStore(session).has_active(project_id, utc_now())


__all__ = ["SubscriptionService"]
