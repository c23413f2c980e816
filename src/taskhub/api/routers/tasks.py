"""Task assignment, submission and activity."""
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from taskhub.api.dependencies import CurrentUserId, Manager
from taskhub.api.errors import status_overrides
from taskhub.api.schemas import CreateTaskRequest
from taskhub.core.exceptions import ForbiddenError, NotFoundError
from taskhub.core.types import TaskActivity, TaskView

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post("", response_model=TaskView, status_code=status.HTTP_201_CREATED)
async def assign_task(
    body: CreateTaskRequest, manager: Manager, user_id: CurrentUserId
) -> TaskView:
    with status_overrides({NotFoundError: status.HTTP_400_BAD_REQUEST}):
        return await manager.tasks.assign_task(
            project_id=body.project_id,
            assignee_id=body.assigned_to_user_id,
            title=body.title,
            description=body.description,
            deadline=body.deadline,
            assigner_id=user_id,
        )


@router.get("/my-tasks", response_model=list[TaskView])
async def my_tasks(manager: Manager, user_id: CurrentUserId) -> list[TaskView]:
    return await manager.tasks.get_user_tasks(user_id)


@router.get("/project/{project_id}/activity", response_model=TaskActivity)
async def project_activity(project_id: uuid.UUID, manager: Manager) -> TaskActivity:
    return await manager.tasks.get_project_activity(project_id)


@router.get("/{task_id}", response_model=TaskView)
async def get_task(task_id: uuid.UUID, manager: Manager) -> TaskView:
    return await manager.tasks.get_task(task_id)


@router.post("/{task_id}/submit", response_model=TaskView)
async def submit_task(task_id: uuid.UUID, manager: Manager, user_id: CurrentUserId) -> TaskView:
    # Submitting someone else's task is an authorisation failure here.
    with status_overrides({ForbiddenError: status.HTTP_401_UNAUTHORIZED}):
        return await manager.tasks.submit_task(task_id, user_id)
