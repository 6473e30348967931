"""Data models for ProjectBoard.

This module contains the entity records held by the application state
store (users, projects, tasks, comments), the enumerations they use, and
the immutable Snapshot handed to every view.

Records are frozen: the store replaces them instead of mutating them, so a
snapshot taken before an action never changes afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from .errors import ValidationError
from .navigation import NavigationState, View


class Role(str, Enum):
    ADMIN = "Admin"
    MEMBER = "Member"


class ProjectStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    SUSPENDED = "Suspended"


class TaskStatus(str, Enum):
    """Kanban column of a task, declared in board order."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# camelCase wire names -> attribute names.
FIELD_ALIASES: Dict[str, str] = {
    "startDate": "start_date",
    "endDate": "end_date",
    "teamMembers": "team_members",
    "dueDate": "due_date",
    "projectId": "project_id",
    "assignedTo": "assigned_to",
    "taskId": "task_id",
    "userId": "user_id",
    "createdAt": "created_at",
}


def normalize_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate camelCase keys into attribute names."""
    return {FIELD_ALIASES.get(key, key): value for key, value in data.items()}


E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected one of: {allowed})") from e


def _coerce_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError(f"Invalid {field_name}: {value!r} (expected YYYY-MM-DD)") from e
    raise ValidationError(f"Invalid {field_name}: {value!r} (expected a date)")


def _coerce_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"Invalid {field_name}: {value!r} (expected ISO-8601)") from e
    else:
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected a timestamp)")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with a trailing Z."""
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _member_ids(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValidationError("team_members must be a list of user ids, not a string")
    return tuple(str(member) for member in value)


def _known_values(cls: type, data: Mapping[str, Any]) -> Dict[str, Any]:
    values = normalize_fields(data)
    unknown = sorted(set(values) - {f.name for f in fields(cls)})
    if unknown:
        raise ValidationError(f"Unknown {cls.__name__} field(s): {', '.join(unknown)}")
    return values


def _required(cls: type, values: Mapping[str, Any], name: str) -> Any:
    if values.get(name) is None:
        raise ValidationError(f"{cls.__name__} is missing required field '{name}'")
    return values[name]


def _text(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected text)")
    return value


def _optional_text(value: Any, field_name: str) -> Optional[str]:
    return None if value is None else _text(value, field_name)


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class _Record:
    """Partial-update support shared by the entity records."""

    __slots__ = ()

    _immutable_fields = ("id",)

    def with_updates(self, updates: Mapping[str, Any]):
        """Return a copy with ``updates`` merged in; id (and any other immutable field) is kept."""
        values = _known_values(type(self), updates)
        locked = sorted(set(values) & set(self._immutable_fields))
        if locked:
            raise ValidationError(f"{type(self).__name__} field(s) cannot be changed: {', '.join(locked)}")
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(values)
        return type(self).from_dict(current)


@dataclass(frozen=True, slots=True)
class User(_Record):
    """A board account."""

    id: str
    name: str
    email: str
    role: Role = Role.MEMBER
    avatar: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "avatar": self.avatar,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        values = _known_values(cls, data)
        return cls(
            id=str(_required(cls, values, "id")),
            name=_text(_required(cls, values, "name"), "name"),
            email=_text(_required(cls, values, "email"), "email"),
            role=_coerce_enum(Role, values.get("role", Role.MEMBER), "role"),
            avatar=_optional_text(values.get("avatar"), "avatar"),
        )

    def validate(self) -> List[str]:
        issues = []
        if _blank(self.id):
            issues.append("User ID is required")
        if _blank(self.name):
            issues.append("Name is required")
        if _blank(self.email):
            issues.append("Email is required")
        elif "@" not in self.email:
            issues.append(f"Email is not valid: {self.email}")
        return issues


@dataclass(frozen=True, slots=True)
class Project(_Record):
    """A project and the ids of its team members."""

    id: str
    name: str
    start_date: date
    end_date: date
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    team_members: Tuple[str, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.status is ProjectStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "status": self.status.value,
            "teamMembers": list(self.team_members),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        values = _known_values(cls, data)
        return cls(
            id=str(_required(cls, values, "id")),
            name=_text(_required(cls, values, "name"), "name"),
            description=_text(values.get("description") or "", "description"),
            start_date=_coerce_date(_required(cls, values, "start_date"), "start_date"),
            end_date=_coerce_date(_required(cls, values, "end_date"), "end_date"),
            status=_coerce_enum(ProjectStatus, values.get("status", ProjectStatus.ACTIVE), "status"),
            team_members=_member_ids(values.get("team_members")),
        )

    def validate(self) -> List[str]:
        # end_date before start_date is accepted on purpose.
        issues = []
        if _blank(self.id):
            issues.append("Project ID is required")
        if _blank(self.name):
            issues.append("Project name is required")
        return issues


@dataclass(frozen=True, slots=True)
class Task(_Record):
    """A unit of work inside a project."""

    id: str
    title: str
    due_date: date
    project_id: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    assigned_to: str = ""
    priority: Priority = Priority.MEDIUM

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "dueDate": self.due_date.isoformat(),
            "projectId": self.project_id,
            "assignedTo": self.assigned_to,
            "priority": self.priority.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        values = _known_values(cls, data)
        return cls(
            id=str(_required(cls, values, "id")),
            title=_text(_required(cls, values, "title"), "title"),
            description=_text(values.get("description") or "", "description"),
            status=_coerce_enum(TaskStatus, values.get("status", TaskStatus.TODO), "status"),
            due_date=_coerce_date(_required(cls, values, "due_date"), "due_date"),
            project_id=str(_required(cls, values, "project_id")),
            assigned_to=str(values.get("assigned_to") or ""),
            priority=_coerce_enum(Priority, values.get("priority", Priority.MEDIUM), "priority"),
        )

    def validate(self) -> List[str]:
        # project_id and assigned_to are not checked against other collections.
        issues = []
        if _blank(self.id):
            issues.append("Task ID is required")
        if _blank(self.title):
            issues.append("Task title is required")
        if _blank(self.project_id):
            issues.append("Project ID is required")
        return issues


@dataclass(frozen=True, slots=True)
class Comment(_Record):
    """A remark left on a task. created_at is fixed when the comment is added."""

    id: str
    content: str
    task_id: str
    user_id: str
    created_at: datetime

    _immutable_fields = ("id", "created_at")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "taskId": self.task_id,
            "userId": self.user_id,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Comment":
        values = _known_values(cls, data)
        return cls(
            id=str(_required(cls, values, "id")),
            content=_text(_required(cls, values, "content"), "content"),
            task_id=str(_required(cls, values, "task_id")),
            user_id=str(_required(cls, values, "user_id")),
            created_at=_coerce_datetime(_required(cls, values, "created_at"), "created_at"),
        )

    def validate(self) -> List[str]:
        issues = []
        if _blank(self.id):
            issues.append("Comment ID is required")
        if _blank(self.content):
            issues.append("Comment content cannot be empty")
        if _blank(self.task_id):
            issues.append("Task ID is required")
        if _blank(self.user_id):
            issues.append("Author ID is required")
        return issues


def _find(items: Iterable[Any], entity_id: Optional[str]) -> Optional[Any]:
    if entity_id is None:
        return None
    return next((item for item in items if item.id == entity_id), None)


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable view of the whole board at one revision.

    Collections are tuples in insertion order. Views derive filtered and
    sorted data from it (see ``projectboard.queries``) and never modify it.
    """

    users: Tuple[User, ...] = ()
    projects: Tuple[Project, ...] = ()
    tasks: Tuple[Task, ...] = ()
    comments: Tuple[Comment, ...] = ()
    current_user: Optional[User] = None
    current_view: View = View.DASHBOARD
    selected_project_id: Optional[str] = None
    selected_task_id: Optional[str] = None
    revision: int = field(default=0, compare=False)

    @property
    def navigation(self) -> NavigationState:
        return NavigationState(
            view=self.current_view,
            selected_project_id=self.selected_project_id,
            selected_task_id=self.selected_task_id,
        )

    @property
    def selected_project(self) -> Optional[Project]:
        return self.find_project(self.selected_project_id)

    @property
    def selected_task(self) -> Optional[Task]:
        return self.find_task(self.selected_task_id)

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        return _find(self.users, user_id)

    def find_project(self, project_id: Optional[str]) -> Optional[Project]:
        return _find(self.projects, project_id)

    def find_task(self, task_id: Optional[str]) -> Optional[Task]:
        return _find(self.tasks, task_id)

    def find_comment(self, comment_id: Optional[str]) -> Optional[Comment]:
        return _find(self.comments, comment_id)

    def user_by_email(self, email: str) -> Optional[User]:
        """Exact, case-sensitive email lookup used by login."""
        return next((user for user in self.users if user.email == email), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revision": self.revision,
            "currentUser": self.current_user.to_dict() if self.current_user else None,
            "currentView": self.current_view.value,
            "selectedProjectId": self.selected_project_id,
            "selectedTaskId": self.selected_task_id,
            "users": [user.to_dict() for user in self.users],
            "projects": [project.to_dict() for project in self.projects],
            "tasks": [task.to_dict() for task in self.tasks],
            "comments": [comment.to_dict() for comment in self.comments],
        }
