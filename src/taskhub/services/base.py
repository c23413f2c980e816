"""Shared plumbing for the service layer.

Every public coroutine on a service is one unit of work: it opens a session
from :attr:`Database.session_factory`, builds the stores it needs on that
session, and commits once.  Leaving the ``async with`` block without a commit
(an exception or a cancelled caller) rolls the transaction back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig
    from taskhub.storage.database import Database


class BaseService:
    def __init__(self, database: Database, config: TaskHubConfig) -> None:
        self.database = database
        self.config = config


__all__ = ["BaseService"]
