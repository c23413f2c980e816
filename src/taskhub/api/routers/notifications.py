"""On-demand trigger for the deadline notifier."""
from __future__ import annotations

from fastapi import APIRouter

from taskhub.api.dependencies import Manager
from taskhub.api.schemas import DeadlineCheckResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post("/check-deadlines", response_model=DeadlineCheckResponse)
async def check_deadlines(manager: Manager) -> DeadlineCheckResponse:
    warned = await manager.notifier.check_deadlines()
    return DeadlineCheckResponse(message="Deadline warnings checked and sent", warned=warned)
