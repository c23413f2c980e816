"""Tests for the TaskHubError family: status codes, codes and messages."""
from __future__ import annotations

import pytest

from taskhub.core.exceptions import (
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidInvitationTokenError,
    InvalidTransitionError,
    NotFoundError,
    TaskHubError,
    UnauthorizedError,
)


class TestHierarchy:

    @pytest.mark.parametrize(
        "exc",
        [
            NotFoundError("Project"),
            InvalidInvitationTokenError(),
            UnauthorizedError("nope"),
            InvalidCredentialsError("bad"),
            ForbiddenError("not leader"),
            ConflictError("dup"),
            InvalidTransitionError("Task", "Completed", "Completed"),
            ConfigurationError("smtp_host", "missing"),
        ],
    )
    def test_all_derive_from_base(self, exc: TaskHubError) -> None:
        assert isinstance(exc, TaskHubError)

    def test_subclasses_keep_parent_status(self) -> None:
        assert InvalidInvitationTokenError.status_code == NotFoundError.status_code
        assert InvalidCredentialsError.status_code == UnauthorizedError.status_code
        assert InvalidTransitionError.status_code == ConflictError.status_code

    def test_default_status_codes(self) -> None:
        assert NotFoundError.status_code == 404
        assert UnauthorizedError.status_code == 401
        assert ForbiddenError.status_code == 400
        assert ConflictError.status_code == 400
        assert ConfigurationError.status_code == 500


class TestMessages:

    def test_not_found_default_message(self) -> None:
        exc = NotFoundError("Project", "p-1")
        assert exc.message == "Project not found"
        assert exc.entity == "Project"
        assert exc.identifier == "p-1"

    def test_not_found_custom_message(self) -> None:
        exc = NotFoundError("Member", message="New leader is not a member of this project")
        assert str(exc) == "New leader is not a member of this project"

    def test_invalid_token_message(self) -> None:
        exc = InvalidInvitationTokenError()
        assert exc.message == "Invalid invitation token"
        assert exc.code == "invalid_invitation_token"

    def test_transition_message_names_states(self) -> None:
        exc = InvalidTransitionError("Task", "Completed", "Overdue")
        assert "Completed" in exc.message
        assert "Overdue" in exc.message
        assert exc.current == "Completed"
        assert exc.target == "Overdue"

    def test_details_in_str(self) -> None:
        exc = ConflictError("limit", {"members": 4})
        assert "members" in str(exc)
        assert exc.details == {"members": 4}

    def test_details_default_empty(self) -> None:
        assert ForbiddenError("x").details == {}

    def test_repr(self) -> None:
        assert repr(ConflictError("dup")) == "ConflictError(message='dup')"

    def test_configuration_error_fields(self) -> None:
        exc = ConfigurationError("smtp_host", "missing")
        assert exc.parameter == "smtp_host"
        assert "smtp_host" in exc.message
