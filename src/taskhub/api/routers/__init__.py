"""HTTP routers, one per functional area."""

from taskhub.api.routers import (
    auth,
    health,
    invitations,
    notifications,
    projects,
    subscriptions,
    tasks,
)

__all__ = [
    "auth",
    "health",
    "invitations",
    "notifications",
    "projects",
    "subscriptions",
    "tasks",
]
