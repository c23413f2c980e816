"""Core enums, transition tables and read models for TaskHub.

Status enums are closed :class:`~enum.StrEnum` sets.  Every status change
goes through :func:`ensure_transition`, which consults the explicit table for
that entity; anything not listed is rejected.

The read models are frozen Pydantic projections returned by the services.
They serialise with camelCase aliases (``userId``, ``fullName`` …) which is
the public JSON shape of the API; snake_case names are accepted on input.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskhub.core.exceptions import InvalidTransitionError


class ProjectRole(StrEnum):
    """Role of a user inside one project."""
    LEADER = "Leader"
    MEMBER = "Member"


class InvitationStatus(StrEnum):
    """Invitation lifecycle status."""
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    EXPIRED = "Expired"


class SubscriptionStatus(StrEnum):
    """Paid entitlement status."""
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


class TaskStatus(StrEnum):
    """Task lifecycle status."""
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    OVERDUE = "Overdue"


INVITATION_TRANSITIONS: dict[InvitationStatus, frozenset[InvitationStatus]] = {
    InvitationStatus.PENDING: frozenset(
        {InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.EXPIRED}
    ),
    InvitationStatus.ACCEPTED: frozenset(),
    InvitationStatus.DECLINED: frozenset(),
    InvitationStatus.EXPIRED: frozenset(),
}

TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.OVERDUE}
    ),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.OVERDUE}),
    TaskStatus.OVERDUE: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
}

SUBSCRIPTION_TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    SubscriptionStatus.ACTIVE: frozenset(
        {SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED}
    ),
    SubscriptionStatus.EXPIRED: frozenset(),
    SubscriptionStatus.CANCELLED: frozenset(),
}

ROLE_TRANSITIONS: dict[ProjectRole, frozenset[ProjectRole]] = {
    ProjectRole.LEADER: frozenset({ProjectRole.MEMBER}),
    ProjectRole.MEMBER: frozenset({ProjectRole.LEADER}),
}

_TABLES: dict[type[StrEnum], dict] = {
    InvitationStatus: INVITATION_TRANSITIONS,
    TaskStatus: TASK_TRANSITIONS,
    SubscriptionStatus: SUBSCRIPTION_TRANSITIONS,
    ProjectRole: ROLE_TRANSITIONS,
}


def can_transition(current: StrEnum, target: StrEnum) -> bool:
    """Return True if *current* may move to *target* under its entity's table."""
    table = _TABLES[type(current)]
    return target in table[current]


def ensure_transition(entity: str, current: StrEnum, target: StrEnum) -> None:
    """Raise :class:`InvalidTransitionError` unless *current* → *target* is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(entity, current.value, target.value)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

class _View(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RegisterResult(_View):
    user_id: uuid.UUID
    email: str
    full_name: str


class LoginResult(_View):
    token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    email: str
    full_name: str


class ProjectMemberView(_View):
    user_id: uuid.UUID
    full_name: str = ""
    email: str = ""
    role: ProjectRole


class ProjectView(_View):
    """Project with its full member roster."""

    id: uuid.UUID
    name: str
    description: str = ""
    created_by_user_id: uuid.UUID
    created_at: datetime
    members: list[ProjectMemberView] = Field(default_factory=list)

    def leader(self) -> ProjectMemberView | None:
        """Return the member currently holding the Leader role."""
        return next((m for m in self.members if m.role == ProjectRole.LEADER), None)


class InvitationView(_View):
    id: uuid.UUID
    project_id: uuid.UUID
    project_name: str = ""
    invited_by_user_name: str = ""
    invited_email: str
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


class SubscriptionView(_View):
    id: uuid.UUID
    project_id: uuid.UUID
    user_id: uuid.UUID
    package_name: str
    price: float
    start_date: datetime
    end_date: datetime
    status: SubscriptionStatus


class TaskView(_View):
    id: uuid.UUID
    project_id: uuid.UUID
    project_name: str = ""
    assigned_to_user_id: uuid.UUID
    assigned_to_user_name: str = ""
    assigned_by_user_id: uuid.UUID
    assigned_by_user_name: str = ""
    title: str
    description: str = ""
    status: TaskStatus
    deadline: datetime
    completed_at: datetime | None = None
    created_at: datetime


class TaskActivity(_View):
    """Aggregate task counts for one project."""

    project_id: uuid.UUID
    project_name: str
    total_tasks: int = Field(default=0, ge=0)
    completed_tasks: int = Field(default=0, ge=0)
    pending_tasks: int = Field(default=0, ge=0)
    in_progress_tasks: int = Field(default=0, ge=0)
    overdue_tasks: int = Field(default=0, ge=0)
    completion_percentage: float = Field(default=0.0, ge=0, le=100)
    tasks: list[TaskView] = Field(default_factory=list)


__all__ = [
    "INVITATION_TRANSITIONS",
    "ROLE_TRANSITIONS",
    "SUBSCRIPTION_TRANSITIONS",
    "TASK_TRANSITIONS",
    "InvitationStatus",
    "InvitationView",
    "LoginResult",
    "ProjectMemberView",
    "ProjectRole",
    "ProjectView",
    "RegisterResult",
    "SubscriptionStatus",
    "SubscriptionView",
    "TaskActivity",
    "TaskStatus",
    "TaskView",
    "can_transition",
    "ensure_transition",
]
