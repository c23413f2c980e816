"""Persistence layer for TaskHub.

- :mod:`taskhub.storage.models`: SQLAlchemy ORM models
- :mod:`taskhub.storage.database`: engine and session factory
- :mod:`taskhub.storage.repositories`: per-aggregate stores used by services

Example:
    ```python
    from taskhub.storage import Database, ProjectStore

    db = Database("sqlite+aiosqlite:///./taskhub.db")
    await db.initialize()

    async with db.session_factory() as session:
        project = await ProjectStore(session).get(project_id, with_members=True)
    ```
"""

from taskhub.storage.database import Database
from taskhub.storage.models import Base
from taskhub.storage.repositories import (
    InvitationStore,
    ProjectStore,
    SubscriptionStore,
    TaskStore,
    UserStore,
)

__all__ = [
    "Base",
    "Database",
    "InvitationStore",
    "ProjectStore",
    "SubscriptionStore",
    "TaskStore",
    "UserStore",
]
