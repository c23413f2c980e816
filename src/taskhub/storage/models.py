"""SQLAlchemy ORM models for TaskHub: multi-database compatible.

The models use pure SQLAlchemy 2.0 ``Mapped[T]`` syntax and portable column
types (``Uuid``, ``Numeric``, non-native enums) so the same schema runs on
PostgreSQL in production and SQLite in development and CI.

Relationships are declared ``lazy="raise"``: every query states the related
rows it needs with ``selectinload`` so no implicit I/O happens on attribute
access inside the async session.
"""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from taskhub.core.types import (
    InvitationStatus,
    InvitationView,
    ProjectMemberView,
    ProjectRole,
    ProjectView,
    SubscriptionStatus,
    SubscriptionView,
    TaskStatus,
    TaskView,
)
from taskhub.utils.dates import utc_now


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC timestamp on every backend.

    SQLite drops ``tzinfo`` on the way back; values read without one are
    tagged as UTC and aware values are converted to UTC before binding.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def _enum_column(enum_cls: type[StrEnum]) -> Enum:
    # Stored as VARCHAR holding the enum *value* ("InProgress"), not the name.
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)


class ProjectModel(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    members: Mapped[list[ProjectMemberModel]] = relationship(
        back_populates="project", cascade="all, delete-orphan", lazy="raise"
    )
    tasks: Mapped[list[TaskModel]] = relationship(
        back_populates="project", cascade="all, delete-orphan", lazy="raise"
    )
    invitations: Mapped[list[InvitationModel]] = relationship(
        back_populates="project", cascade="all, delete-orphan", lazy="raise"
    )
    subscriptions: Mapped[list[SubscriptionModel]] = relationship(
        back_populates="project", cascade="all, delete-orphan", lazy="raise"
    )

    def to_view(self) -> ProjectView:
        """Project projection; ``members`` and each ``member.user`` must be loaded."""
        return ProjectView(
            id=self.id,
            name=self.name,
            description=self.description or "",
            created_by_user_id=self.created_by_user_id,
            created_at=self.created_at,
            members=[m.to_view() for m in self.members],
        )


class ProjectMemberModel(Base):
    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[ProjectRole] = mapped_column(_enum_column(ProjectRole), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    project: Mapped[ProjectModel] = relationship(back_populates="members", lazy="raise")
    user: Mapped[UserModel] = relationship(lazy="raise")

    def to_view(self) -> ProjectMemberView:
        return ProjectMemberView(
            user_id=self.user_id,
            full_name=self.user.full_name,
            email=self.user.email,
            role=self.role,
        )


class InvitationModel(Base):
    __tablename__ = "invitations"
    __table_args__ = (
        Index("ix_invitation_project_email_status", "project_id", "invited_email", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    invited_by_user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    invited_email: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[InvitationStatus] = mapped_column(
        _enum_column(InvitationStatus), nullable=False, default=InvitationStatus.PENDING
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    accepted_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    project: Mapped[ProjectModel] = relationship(back_populates="invitations", lazy="raise")
    invited_by: Mapped[UserModel] = relationship(
        foreign_keys=[invited_by_user_id], lazy="raise"
    )

    def to_view(self) -> InvitationView:
        return InvitationView(
            id=self.id,
            project_id=self.project_id,
            project_name=self.project.name,
            invited_by_user_name=self.invited_by.full_name,
            invited_email=self.invited_email,
            status=self.status,
            expires_at=self.expires_at,
            created_at=self.created_at,
        )


class SubscriptionModel(Base):
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    package_name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        _enum_column(SubscriptionStatus), nullable=False, default=SubscriptionStatus.ACTIVE
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    project: Mapped[ProjectModel] = relationship(back_populates="subscriptions", lazy="raise")

    def to_view(self) -> SubscriptionView:
        return SubscriptionView(
            id=self.id,
            project_id=self.project_id,
            user_id=self.user_id,
            package_name=self.package_name,
            price=float(self.price),
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
        )


class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_to_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    assigned_by_user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[TaskStatus] = mapped_column(
        _enum_column(TaskStatus), nullable=False, default=TaskStatus.PENDING, index=True
    )
    deadline: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    project: Mapped[ProjectModel] = relationship(back_populates="tasks", lazy="raise")
    assigned_to: Mapped[UserModel] = relationship(
        foreign_keys=[assigned_to_user_id], lazy="raise"
    )
    assigned_by: Mapped[UserModel] = relationship(
        foreign_keys=[assigned_by_user_id], lazy="raise"
    )

    def to_view(self) -> TaskView:
        """Task projection; ``project``, ``assigned_to`` and ``assigned_by`` must be loaded."""
        return TaskView(
            id=self.id,
            project_id=self.project_id,
            project_name=self.project.name,
            assigned_to_user_id=self.assigned_to_user_id,
            assigned_to_user_name=self.assigned_to.full_name,
            assigned_by_user_id=self.assigned_by_user_id,
            assigned_by_user_name=self.assigned_by.full_name,
            title=self.title,
            description=self.description or "",
            status=self.status,
            deadline=self.deadline,
            completed_at=self.completed_at,
            created_at=self.created_at,
        )


__all__ = [
    "Base",
    "InvitationModel",
    "ProjectMemberModel",
    "ProjectModel",
    "SubscriptionModel",
    "TaskModel",
    "UTCDateTime",
    "UserModel",
]
