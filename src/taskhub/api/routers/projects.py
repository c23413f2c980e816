"""Projects, invitations to them and leadership transfer."""
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from taskhub.api.dependencies import CurrentUserId, Manager
from taskhub.api.errors import status_overrides
from taskhub.api.schemas import (
    CreateProjectRequest,
    InviteMemberRequest,
    MessageResponse,
    TransferLeadershipRequest,
)
from taskhub.core.exceptions import NotFoundError
from taskhub.core.types import ProjectView

router = APIRouter(prefix="/projects", tags=["Projects"])

# Write endpoints report a missing project or member as a bad request.
_BAD_REQUEST_ON_MISSING = {NotFoundError: status.HTTP_400_BAD_REQUEST}


@router.post("", response_model=ProjectView, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: CreateProjectRequest, manager: Manager, user_id: CurrentUserId
) -> ProjectView:
    with status_overrides(_BAD_REQUEST_ON_MISSING):
        return await manager.projects.create_project(body.name, body.description, user_id)


@router.get("/my-projects", response_model=list[ProjectView])
async def my_projects(manager: Manager, user_id: CurrentUserId) -> list[ProjectView]:
    return await manager.projects.get_user_projects(user_id)


@router.get("/{project_id}", response_model=ProjectView)
async def get_project(project_id: uuid.UUID, manager: Manager) -> ProjectView:
    return await manager.projects.get_project(project_id)


@router.post("/invite", response_model=MessageResponse)
async def invite_member(
    body: InviteMemberRequest, manager: Manager, user_id: CurrentUserId
) -> MessageResponse:
    with status_overrides(_BAD_REQUEST_ON_MISSING):
        await manager.projects.invite(body.project_id, body.email, user_id)
    return MessageResponse(message="Member invited successfully")


@router.post("/transfer-leadership", response_model=MessageResponse)
async def transfer_leadership(
    body: TransferLeadershipRequest, manager: Manager, user_id: CurrentUserId
) -> MessageResponse:
    with status_overrides(_BAD_REQUEST_ON_MISSING):
        await manager.projects.transfer_leadership(
            body.project_id, body.new_leader_user_id, user_id
        )
    return MessageResponse(message="Leadership transferred successfully")
