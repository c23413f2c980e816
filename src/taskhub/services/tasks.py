"""Task assignment, submission and per-project activity."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime

from taskhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskhub.core.types import TaskActivity, TaskStatus, TaskView, ensure_transition
from taskhub.services.base import BaseService
from taskhub.storage.models import TaskModel
from taskhub.storage.repositories import ProjectStore, TaskStore
from taskhub.utils.dates import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class TaskService(BaseService):
    async def assign_task(
        self,
        project_id: uuid.UUID,
        assignee_id: uuid.UUID,
        title: str,
        description: str,
        deadline: datetime,
        assigner_id: uuid.UUID,
    ) -> TaskView:
        """Create a Pending task for a project member.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the assigner is not the project's Leader.
            ConflictError: If the assignee is not a member of the project.
        """
        async with self.database.session_factory() as session:
            projects = ProjectStore(session)
            tasks = TaskStore(session)

            if await projects.get(project_id) is None:
                raise NotFoundError("Project", project_id)
            if not await projects.is_leader(project_id, assigner_id):
                raise ForbiddenError("Only the project leader can assign tasks")
            if await projects.get_member(project_id, assignee_id) is None:
                raise ConflictError("Assigned user is not a member of this project")

            task = TaskModel(
                project_id=project_id,
                assigned_to_user_id=assignee_id,
                assigned_by_user_id=assigner_id,
                title=title.strip(),
                description=description or "",
                deadline=ensure_utc(deadline),
                status=TaskStatus.PENDING,
            )
            tasks.add(task)
            await session.commit()

            logger.info("Task id=%s assigned to user=%s in project=%s", task.id, assignee_id, project_id)
            return (await tasks.get(task.id)).to_view()

    async def submit_task(self, task_id: uuid.UUID, user_id: uuid.UUID) -> TaskView:
        """Mark the caller's task Completed.

        Raises:
            NotFoundError: If the task does not exist.
            ForbiddenError: If the caller is not the assignee.
            InvalidTransitionError: If the task is already Completed.
        """
        async with self.database.session_factory() as session:
            tasks = TaskStore(session)
            task = await tasks.get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            if task.assigned_to_user_id != user_id:
                raise ForbiddenError("You can only submit your own tasks")

            ensure_transition("Task", task.status, TaskStatus.COMPLETED)
            task.status = TaskStatus.COMPLETED
            task.completed_at = utc_now()
            await session.commit()

            logger.info("Task id=%s completed by user=%s", task_id, user_id)
            return (await tasks.get(task_id)).to_view()

    async def get_task(self, task_id: uuid.UUID) -> TaskView:
        async with self.database.session_factory() as session:
            task = await TaskStore(session).get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            return task.to_view()

    async def get_project_activity(self, project_id: uuid.UUID) -> TaskActivity:
        """Flag overdue tasks, then summarise the project's tasks by status.

        Every unfinished task whose deadline has passed is moved to Overdue
        and persisted before counting, so repeated calls with no intervening
        change return the same figures.

        Raises:
            NotFoundError: If the project does not exist.
        """
        now = utc_now()
        async with self.database.session_factory() as session:
            project = await ProjectStore(session).get(project_id)
            if project is None:
                raise NotFoundError("Project", project_id)

            tasks = await TaskStore(session).list_for_project(project_id)
            flagged = 0
            for task in tasks:
                if (
                    task.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
                    and task.deadline < now
                ):
                    ensure_transition("Task", task.status, TaskStatus.OVERDUE)
                    task.status = TaskStatus.OVERDUE
                    flagged += 1
            if flagged:
                await session.commit()
                logger.info("Marked %d task(s) overdue in project=%s", flagged, project_id)

            counts = Counter(task.status for task in tasks)
            total = len(tasks)
            completed = counts[TaskStatus.COMPLETED]
            return TaskActivity(
                project_id=project.id,
                project_name=project.name,
                total_tasks=total,
                completed_tasks=completed,
                pending_tasks=counts[TaskStatus.PENDING],
                in_progress_tasks=counts[TaskStatus.IN_PROGRESS],
                overdue_tasks=counts[TaskStatus.OVERDUE],
                completion_percentage=completed / total * 100 if total else 0.0,
                tasks=[task.to_view() for task in tasks],
            )

    async def get_user_tasks(self, user_id: uuid.UUID) -> list[TaskView]:
        async with self.database.session_factory() as session:
            tasks = await TaskStore(session).list_for_assignee(user_id)
            return [task.to_view() for task in tasks]


__all__ = ["TaskService"]
