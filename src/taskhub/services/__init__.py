"""Service layer: one class per functional area, each operation one transaction."""

from taskhub.services.auth import AuthService
from taskhub.services.invitations import InvitationService
from taskhub.services.notifications import DeadlineNotifier
from taskhub.services.projects import ProjectService
from taskhub.services.subscriptions import SubscriptionService
from taskhub.services.tasks import TaskService
from taskhub.services.tokens import TokenIssuer

__all__ = [
    "AuthService",
    "DeadlineNotifier",
    "InvitationService",
    "ProjectService",
    "SubscriptionService",
    "TaskService",
    "TokenIssuer",
]
