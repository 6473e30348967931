"""ProjectBoard - in-memory project and task tracking core."""

from .controller import BoardController
from .config import Settings
from .errors import (
    AuthenticationFailed,
    NotFoundError,
    PermissionDenied,
    ProjectBoardError,
    ValidationError,
)
from .models import (
    Comment,
    Priority,
    Project,
    ProjectStatus,
    Role,
    Snapshot,
    Task,
    TaskStatus,
    User,
)
from .navigation import View
from .store import AppStore

__all__ = [
    "AppStore",
    "BoardController",
    "Settings",
    "Snapshot",
    "View",
    "User",
    "Project",
    "Task",
    "Comment",
    "Role",
    "ProjectStatus",
    "TaskStatus",
    "Priority",
    "ProjectBoardError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationFailed",
    "PermissionDenied",
]
