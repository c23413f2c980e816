"""Per-aggregate stores bound to one :class:`~sqlalchemy.ext.asyncio.AsyncSession`.

A service operation opens a single session, builds the stores it needs on it
and commits once at the end, so every read and write of the operation shares
one transaction.  Stores never commit.

Lookups return ``None`` for missing rows; deciding which error that means is
the caller's business.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from taskhub.core.types import (
    InvitationStatus,
    ProjectRole,
    SubscriptionStatus,
    TaskStatus,
)
from taskhub.storage.models import (
    InvitationModel,
    ProjectMemberModel,
    ProjectModel,
    SubscriptionModel,
    TaskModel,
    UserModel,
)
from taskhub.utils.validation import normalize_email

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# Loader options shared by every query that produces a projection.
_PROJECT_ROSTER = (
    selectinload(ProjectModel.members).selectinload(ProjectMemberModel.user),
)
_TASK_REFS = (
    selectinload(TaskModel.project),
    selectinload(TaskModel.assigned_to),
    selectinload(TaskModel.assigned_by),
)
_INVITATION_REFS = (
    selectinload(InvitationModel.project),
    selectinload(InvitationModel.invited_by),
)


class _Store:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, model: object) -> None:
        self.session.add(model)


class UserStore(_Store):
    async def get(self, user_id: uuid.UUID) -> UserModel | None:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> UserModel | None:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == normalize_email(email))
        )
        return result.scalar_one_or_none()


class ProjectStore(_Store):
    async def get(
        self, project_id: uuid.UUID, *, with_members: bool = False
    ) -> ProjectModel | None:
        """Return the project, optionally with its roster and member users loaded."""
        query = select(ProjectModel).where(ProjectModel.id == project_id)
        if with_members:
            # Refresh rows already in the identity map so a roster changed
            # earlier in this session is reloaded.
            query = query.options(*_PROJECT_ROSTER).execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: uuid.UUID) -> list[ProjectModel]:
        member_of = select(ProjectMemberModel.project_id).where(
            ProjectMemberModel.user_id == user_id
        )
        result = await self.session.execute(
            select(ProjectModel)
            .where(ProjectModel.id.in_(member_of))
            .options(*_PROJECT_ROSTER)
            .order_by(ProjectModel.created_at)
        )
        return list(result.scalars().all())

    async def get_member(
        self, project_id: uuid.UUID, user_id: uuid.UUID
    ) -> ProjectMemberModel | None:
        result = await self.session.execute(
            select(ProjectMemberModel).where(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def is_leader(self, project_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        member = await self.get_member(project_id, user_id)
        return member is not None and member.role == ProjectRole.LEADER

    async def count_members(self, project_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count(ProjectMemberModel.id)).where(
                ProjectMemberModel.project_id == project_id
            )
        )
        return result.scalar() or 0

    async def has_member_with_email(self, project_id: uuid.UUID, email: str) -> bool:
        result = await self.session.execute(
            select(ProjectMemberModel.id)
            .join(UserModel, UserModel.id == ProjectMemberModel.user_id)
            .where(
                ProjectMemberModel.project_id == project_id,
                UserModel.email == normalize_email(email),
            )
        )
        return result.first() is not None


class InvitationStore(_Store):
    async def get(self, invitation_id: uuid.UUID) -> InvitationModel | None:
        result = await self.session.execute(
            select(InvitationModel)
            .where(InvitationModel.id == invitation_id)
            .options(*_INVITATION_REFS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def pending_for(self, project_id: uuid.UUID, email: str) -> list[InvitationModel]:
        """Every Pending invitation for the (project, email) pair, expired or not."""
        result = await self.session.execute(
            select(InvitationModel).where(
                InvitationModel.project_id == project_id,
                InvitationModel.invited_email == normalize_email(email),
                InvitationModel.status == InvitationStatus.PENDING,
            )
        )
        return list(result.scalars().all())


class SubscriptionStore(_Store):
    async def has_active(self, project_id: uuid.UUID, now: datetime) -> bool:
        """True if an Active subscription for the project ends after *now*."""
        result = await self.session.execute(
            select(SubscriptionModel.id).where(
                SubscriptionModel.project_id == project_id,
                SubscriptionModel.status == SubscriptionStatus.ACTIVE,
                SubscriptionModel.end_date > now,
            )
        )
        return result.first() is not None

    async def list_active(self, project_id: uuid.UUID) -> list[SubscriptionModel]:
        """Subscriptions whose status is Active, regardless of end date."""
        result = await self.session.execute(
            select(SubscriptionModel).where(
                SubscriptionModel.project_id == project_id,
                SubscriptionModel.status == SubscriptionStatus.ACTIVE,
            )
        )
        return list(result.scalars().all())


class TaskStore(_Store):
    async def get(self, task_id: uuid.UUID) -> TaskModel | None:
        result = await self.session.execute(
            select(TaskModel)
            .where(TaskModel.id == task_id)
            .options(*_TASK_REFS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: uuid.UUID) -> list[TaskModel]:
        result = await self.session.execute(
            select(TaskModel)
            .where(TaskModel.project_id == project_id)
            .options(*_TASK_REFS)
            .order_by(TaskModel.created_at)
        )
        return list(result.scalars().all())

    async def list_for_assignee(self, user_id: uuid.UUID) -> list[TaskModel]:
        result = await self.session.execute(
            select(TaskModel)
            .where(TaskModel.assigned_to_user_id == user_id)
            .options(*_TASK_REFS)
            .order_by(TaskModel.deadline)
        )
        return list(result.scalars().all())

    async def list_due_between(self, start: datetime, end: datetime) -> list[TaskModel]:
        """Unfinished tasks with ``start < deadline <= end``."""
        result = await self.session.execute(
            select(TaskModel)
            .where(
                TaskModel.status != TaskStatus.COMPLETED,
                TaskModel.deadline > start,
                TaskModel.deadline <= end,
            )
            .options(*_TASK_REFS)
            .order_by(TaskModel.deadline)
        )
        return list(result.scalars().all())


__all__ = [
    "InvitationStore",
    "ProjectStore",
    "SubscriptionStore",
    "TaskStore",
    "UserStore",
]
