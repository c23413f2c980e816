"""Invitation lookup, acceptance and decline by token.

An unknown or malformed token is reported as 400 on every route here.
"""
from __future__ import annotations

from fastapi import APIRouter, status

from taskhub.api.dependencies import CurrentUserId, Manager
from taskhub.api.errors import status_overrides
from taskhub.api.schemas import MessageResponse
from taskhub.core.exceptions import NotFoundError
from taskhub.core.types import InvitationView

router = APIRouter(prefix="/invitations", tags=["Invitations"])

_INVALID_TOKEN = {NotFoundError: status.HTTP_400_BAD_REQUEST}


@router.get("/{token}", response_model=InvitationView)
async def get_invitation(token: str, manager: Manager) -> InvitationView:
    with status_overrides(_INVALID_TOKEN):
        return await manager.invitations.get_invitation(token)


@router.post("/{token}/accept", response_model=MessageResponse)
async def accept_invitation(
    token: str, manager: Manager, user_id: CurrentUserId
) -> MessageResponse:
    with status_overrides(_INVALID_TOKEN):
        await manager.invitations.accept(token, user_id)
    return MessageResponse(message="Invitation accepted successfully")


@router.post("/{token}/decline", response_model=MessageResponse)
async def decline_invitation(
    token: str, manager: Manager, user_id: CurrentUserId
) -> MessageResponse:
    with status_overrides(_INVALID_TOKEN):
        await manager.invitations.decline(token, user_id)
    return MessageResponse(message="Invitation declined successfully")
