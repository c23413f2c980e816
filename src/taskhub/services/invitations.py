"""Invitation lookup, acceptance and decline.

An invitation is addressed by an opaque signed token (see
:class:`~taskhub.services.tokens.TokenIssuer`).  Every entry point resolves
the token the same way:

1. undecodable token or unknown invitation: :class:`NotFoundError`;
2. status other than Pending: :class:`ConflictError`;
3. ``expires_at < now``: the invitation is marked Expired and that change is
   committed *before* :class:`ConflictError` is raised.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from taskhub.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from taskhub.core.types import (
    InvitationStatus,
    InvitationView,
    ProjectRole,
    ensure_transition,
)
from taskhub.services.base import BaseService
from taskhub.storage.models import InvitationModel, ProjectMemberModel, UserModel
from taskhub.storage.repositories import (
    InvitationStore,
    ProjectStore,
    SubscriptionStore,
    UserStore,
)
from taskhub.utils.dates import utc_now
from taskhub.utils.validation import emails_match

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from taskhub.core.config import TaskHubConfig
    from taskhub.services.tokens import TokenIssuer
    from taskhub.storage.database import Database

logger = logging.getLogger(__name__)


class InvitationService(BaseService):
    def __init__(
        self,
        database: Database,
        config: TaskHubConfig,
        tokens: TokenIssuer,
    ) -> None:
        super().__init__(database, config)
        self.tokens = tokens

    async def _resolve(
        self, session: AsyncSession, token: str, now: datetime
    ) -> InvitationModel:
        invitation_id = self.tokens.decode_invitation_token(token)
        invitation = await InvitationStore(session).get(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError("Invitation has already been processed")
        if invitation.expires_at < now:
            ensure_transition("Invitation", invitation.status, InvitationStatus.EXPIRED)
            invitation.status = InvitationStatus.EXPIRED
            await session.commit()
            logger.info("Invitation id=%s expired", invitation.id)
            raise ConflictError("Invitation has expired")
        return invitation

    async def _addressed_user(
        self, session: AsyncSession, invitation: InvitationModel, user_id: uuid.UUID
    ) -> UserModel:
        user = await UserStore(session).get(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        if not emails_match(user.email, invitation.invited_email):
            logger.warning(
                "User id=%s tried to answer invitation id=%s addressed to another email",
                user_id, invitation.id,
            )
            raise UnauthorizedError("Email does not match invitation")
        return user

    async def get_invitation(self, token: str) -> InvitationView:
        """Return the projection of a live Pending invitation.

        Raises:
            NotFoundError: Malformed token or unknown invitation.
            ConflictError: Already processed or expired.
        """
        async with self.database.session_factory() as session:
            invitation = await self._resolve(session, token, utc_now())
            return invitation.to_view()

    async def accept(self, token: str, user_id: uuid.UUID) -> None:
        """Join the project as a Member and mark the invitation Accepted.

        An acceptance that would take the project past the free member limit
        requires an Active subscription that has not yet ended.

        Raises:
            NotFoundError: Bad token, unknown invitation or deleted project.
            ConflictError: Not Pending, expired, already a member (the
                invitation is then Declined) or subscription required.
            UnauthorizedError: Unknown user or email mismatch.
        """
        now = utc_now()
        async with self.database.session_factory() as session:
            invitation = await self._resolve(session, token, now)
            await self._addressed_user(session, invitation, user_id)

            projects = ProjectStore(session)
            project_id = invitation.project_id
            if await projects.get(project_id) is None:
                raise NotFoundError("Project", project_id)

            if await projects.get_member(project_id, user_id) is not None:
                ensure_transition("Invitation", invitation.status, InvitationStatus.DECLINED)
                invitation.status = InvitationStatus.DECLINED
                await session.commit()
                raise ConflictError("User is already a member of this project")

            member_count = await projects.count_members(project_id)
            if member_count >= self.config.free_member_limit and not await SubscriptionStore(
                session
            ).has_active(project_id, now):
                logger.warning(
                    "Acceptance blocked: project=%s has %d members and no active subscription",
                    project_id, member_count,
                )
                raise ConflictError(
                    f"Project with more than {self.config.free_member_limit} members "
                    "requires an active subscription",
                    {"members": member_count},
                )

            ensure_transition("Invitation", invitation.status, InvitationStatus.ACCEPTED)
            projects.add(
                ProjectMemberModel(
                    project_id=project_id, user_id=user_id, role=ProjectRole.MEMBER
                )
            )
            invitation.status = InvitationStatus.ACCEPTED
            invitation.accepted_by_user_id = user_id
            try:
                await session.commit()
            except IntegrityError as exc:
                # A concurrent acceptance inserted the membership first
                await session.rollback()
                raise ConflictError("User is already a member of this project") from exc

        logger.info("User id=%s joined project=%s via invitation", user_id, project_id)

    async def decline(self, token: str, user_id: uuid.UUID) -> None:
        """Mark the invitation Declined.

        Raises:
            NotFoundError: Bad token or unknown invitation.
            ConflictError: Not Pending or expired.
            UnauthorizedError: Unknown user or email mismatch.
        """
        async with self.database.session_factory() as session:
            invitation = await self._resolve(session, token, utc_now())
            await self._addressed_user(session, invitation, user_id)
            ensure_transition("Invitation", invitation.status, InvitationStatus.DECLINED)
            invitation.status = InvitationStatus.DECLINED
            await session.commit()

        logger.info("Invitation id=%s declined", invitation.id)


__all__ = ["InvitationService"]
