"""Subscription purchase."""
from __future__ import annotations

from fastapi import APIRouter, status

from taskhub.api.dependencies import CurrentUserId, Manager
from taskhub.api.errors import status_overrides
from taskhub.api.schemas import CreateSubscriptionRequest
from taskhub.core.exceptions import NotFoundError
from taskhub.core.types import SubscriptionView

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("", response_model=SubscriptionView, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    body: CreateSubscriptionRequest, manager: Manager, user_id: CurrentUserId
) -> SubscriptionView:
    with status_overrides({NotFoundError: status.HTTP_400_BAD_REQUEST}):
        return await manager.subscriptions.create_subscription(
            project_id=body.project_id,
            caller_id=user_id,
            package_name=body.package_name,
            price=body.price,
            duration_months=body.duration_months,
        )
