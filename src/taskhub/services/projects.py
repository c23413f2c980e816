"""Projects, membership roles and issuing invitations."""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from taskhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskhub.core.types import (
    InvitationStatus,
    InvitationView,
    ProjectRole,
    ProjectView,
    ensure_transition,
)
from taskhub.mail.messages import invitation_message
from taskhub.services.base import BaseService
from taskhub.storage.models import InvitationModel, ProjectMemberModel, ProjectModel
from taskhub.storage.repositories import InvitationStore, ProjectStore, UserStore
from taskhub.utils.dates import utc_now
from taskhub.utils.validation import normalize_email, validate_email

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig
    from taskhub.mail.dispatcher import MailDispatcher
    from taskhub.services.tokens import TokenIssuer
    from taskhub.storage.database import Database

logger = logging.getLogger(__name__)


class ProjectService(BaseService):
    """Project lifecycle and the single-Leader role model.

    Every project has exactly one Leader at all times: creation inserts the
    creator as Leader and :meth:`transfer_leadership` swaps both roles in the
    same commit.
    """

    def __init__(
        self,
        database: Database,
        config: TaskHubConfig,
        tokens: TokenIssuer,
        mail: MailDispatcher,
    ) -> None:
        super().__init__(database, config)
        self.tokens = tokens
        self.mail = mail

    async def create_project(
        self, name: str, description: str, creator_id: uuid.UUID
    ) -> ProjectView:
        """Create a project with *creator_id* as its Leader.

        Raises:
            NotFoundError: If the creator does not exist.
        """
        async with self.database.session_factory() as session:
            users = UserStore(session)
            projects = ProjectStore(session)
            if await users.get(creator_id) is None:
                raise NotFoundError("User", creator_id)

            project = ProjectModel(
                name=name.strip(),
                description=description or "",
                created_by_user_id=creator_id,
            )
            project.members.append(
                ProjectMemberModel(user_id=creator_id, role=ProjectRole.LEADER)
            )
            projects.add(project)
            await session.commit()

            logger.info("Created project id=%s leader=%s", project.id, creator_id)
            hydrated = await projects.get(project.id, with_members=True)
            return hydrated.to_view()

    async def get_project(self, project_id: uuid.UUID) -> ProjectView:
        async with self.database.session_factory() as session:
            project = await ProjectStore(session).get(project_id, with_members=True)
            if project is None:
                raise NotFoundError("Project", project_id)
            return project.to_view()

    async def get_user_projects(self, user_id: uuid.UUID) -> list[ProjectView]:
        """Every project the user belongs to, each with its full roster."""
        async with self.database.session_factory() as session:
            projects = await ProjectStore(session).list_for_user(user_id)
            return [p.to_view() for p in projects]

    async def invite(
        self, project_id: uuid.UUID, email: str, inviter_id: uuid.UUID
    ) -> InvitationView:
        """Create a Pending invitation for *email* and mail it in the background.

        Pending invitations for the same address whose expiry has passed are
        marked Expired first, so at most one live Pending invitation exists
        per (project, email).

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the inviter is not the project's Leader.
            ConflictError: If the address is invalid, already belongs to a
                member, or has a live Pending invitation.
        """
        email = normalize_email(email)
        if not validate_email(email):
            raise ConflictError("Invalid email address", {"field": "email"})

        now = utc_now()
        async with self.database.session_factory() as session:
            projects = ProjectStore(session)
            invitations = InvitationStore(session)

            project = await projects.get(project_id)
            if project is None:
                raise NotFoundError("Project", project_id)
            if not await projects.is_leader(project_id, inviter_id):
                logger.warning(
                    "Invite rejected: user=%s is not leader of project=%s",
                    inviter_id, project_id,
                )
                raise ForbiddenError("Only the project leader can invite members")
            if await projects.has_member_with_email(project_id, email):
                raise ConflictError("User is already a member of this project")

            for pending in await invitations.pending_for(project_id, email):
                if pending.expires_at < now:
                    ensure_transition("Invitation", pending.status, InvitationStatus.EXPIRED)
                    pending.status = InvitationStatus.EXPIRED
                else:
                    raise ConflictError("An invitation has already been sent to this email")

            invitation = InvitationModel(
                project_id=project_id,
                invited_by_user_id=inviter_id,
                invited_email=email,
                status=InvitationStatus.PENDING,
                expires_at=now + timedelta(days=self.config.invitation_ttl_days),
                created_at=now,
            )
            invitations.add(invitation)
            await session.commit()

            view = (await invitations.get(invitation.id)).to_view()

        logger.info("Invitation id=%s issued for project=%s", view.id, project_id)
        self.mail.dispatch(
            invitation_message(
                email=email,
                inviter_name=view.invited_by_user_name,
                project_name=view.project_name,
                token=self.tokens.issue_invitation_token(view.id),
                base_url=self.config.base_url,
                ttl_days=self.config.invitation_ttl_days,
            )
        )
        return view

    async def transfer_leadership(
        self, project_id: uuid.UUID, new_leader_id: uuid.UUID, caller_id: uuid.UUID
    ) -> None:
        """Demote the caller and promote *new_leader_id* in one commit.

        Transferring to oneself changes nothing.

        Raises:
            NotFoundError: If the project does not exist or the target is not
                a member.
            ForbiddenError: If the caller is not the current Leader.
        """
        async with self.database.session_factory() as session:
            projects = ProjectStore(session)
            if await projects.get(project_id) is None:
                raise NotFoundError("Project", project_id)

            current = await projects.get_member(project_id, caller_id)
            if current is None or current.role != ProjectRole.LEADER:
                raise ForbiddenError("Only the project leader can transfer leadership")

            target = await projects.get_member(project_id, new_leader_id)
            if target is None:
                raise NotFoundError(
                    "Member", new_leader_id,
                    message="New leader is not a member of this project",
                )
            if target.user_id == current.user_id:
                return

            ensure_transition("Project role", current.role, ProjectRole.MEMBER)
            ensure_transition("Project role", target.role, ProjectRole.LEADER)
            current.role = ProjectRole.MEMBER
            target.role = ProjectRole.LEADER
            await session.commit()

        logger.info(
            "Leadership of project=%s moved from %s to %s",
            project_id, caller_id, new_leader_id,
        )


__all__ = ["ProjectService"]
