"""Core TaskHub components: configuration, exceptions and types."""

from taskhub.core.config import TaskHubConfig
from taskhub.core.exceptions import *  # noqa: F403
from taskhub.core.exceptions import __all__ as exceptions__all__
from taskhub.core.types import *  # noqa: F403
from taskhub.core.types import __all__ as types__all__

__all__ = ["TaskHubConfig"]

__all__ += exceptions__all__
__all__ += types__all__
