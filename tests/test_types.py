"""Status enums, transition tables and read-model serialisation."""
from __future__ import annotations

import uuid

import pytest

from taskhub.core.exceptions import InvalidTransitionError
from taskhub.core.types import (
    InvitationStatus,
    ProjectMemberView,
    ProjectRole,
    ProjectView,
    SubscriptionStatus,
    TaskStatus,
    can_transition,
    ensure_transition,
)
from taskhub.utils.dates import utc_now


class TestTransitions:

    @pytest.mark.parametrize(
        "target",
        [InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.EXPIRED],
    )
    def test_pending_invitation_can_resolve(self, target: InvitationStatus) -> None:
        assert can_transition(InvitationStatus.PENDING, target)

    @pytest.mark.parametrize(
        "current",
        [InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.EXPIRED],
    )
    def test_resolved_invitation_is_terminal(self, current: InvitationStatus) -> None:
        for target in InvitationStatus:
            assert not can_transition(current, target)

    def test_completed_task_is_terminal(self) -> None:
        for target in TaskStatus:
            assert not can_transition(TaskStatus.COMPLETED, target)

    def test_overdue_task_may_still_complete(self) -> None:
        assert can_transition(TaskStatus.OVERDUE, TaskStatus.COMPLETED)
        assert not can_transition(TaskStatus.OVERDUE, TaskStatus.PENDING)

    def test_task_never_returns_to_pending(self) -> None:
        for current in TaskStatus:
            assert not can_transition(current, TaskStatus.PENDING)

    def test_subscription_transitions(self) -> None:
        assert can_transition(SubscriptionStatus.ACTIVE, SubscriptionStatus.EXPIRED)
        assert can_transition(SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED)
        assert not can_transition(SubscriptionStatus.EXPIRED, SubscriptionStatus.ACTIVE)

    def test_roles_swap(self) -> None:
        assert can_transition(ProjectRole.LEADER, ProjectRole.MEMBER)
        assert can_transition(ProjectRole.MEMBER, ProjectRole.LEADER)

    def test_ensure_transition_raises(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            ensure_transition("Task", TaskStatus.COMPLETED, TaskStatus.COMPLETED)
        assert exc_info.value.entity == "Task"

    def test_ensure_transition_passes(self) -> None:
        ensure_transition("Task", TaskStatus.PENDING, TaskStatus.OVERDUE)


class TestEnumValues:

    def test_wire_values(self) -> None:
        assert TaskStatus.IN_PROGRESS == "InProgress"
        assert ProjectRole.LEADER == "Leader"
        assert InvitationStatus.PENDING.value == "Pending"


class TestViews:

    def _project(self) -> ProjectView:
        leader = ProjectMemberView(user_id=uuid.uuid4(), full_name="Ada", role=ProjectRole.LEADER)
        member = ProjectMemberView(user_id=uuid.uuid4(), full_name="Bob", role=ProjectRole.MEMBER)
        return ProjectView(
            id=uuid.uuid4(),
            name="Apollo",
            created_by_user_id=leader.user_id,
            created_at=utc_now(),
            members=[member, leader],
        )

    def test_leader_lookup(self) -> None:
        project = self._project()
        assert project.leader() is not None
        assert project.leader().full_name == "Ada"

    def test_camel_case_dump(self) -> None:
        data = self._project().model_dump(by_alias=True, mode="json")
        assert "createdByUserId" in data
        assert data["members"][0]["fullName"] == "Bob"

    def test_frozen(self) -> None:
        project = self._project()
        with pytest.raises(Exception):
            project.name = "Gemini"  # type: ignore[misc]
