"""Read-only selectors over a Snapshot.

Screens derive everything they show from these helpers ("my tasks",
"active projects", kanban columns, search results) instead of keeping
their own copies of the collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .models import Comment, Project, ProjectStatus, Snapshot, Task, TaskStatus, User

UNKNOWN_USER = "Unknown"
ALL = "all"


def _matches(term: str, *values: str) -> bool:
    needle = term.strip().lower()
    return not needle or any(needle in value.lower() for value in values)


def _status_filter(status: Union[None, str, TaskStatus, ProjectStatus]) -> Optional[str]:
    if status is None or status == ALL or status == "":
        return None
    return status.value if isinstance(status, (TaskStatus, ProjectStatus)) else str(status)


def percentage(part: int, total: int) -> int:
    """Whole-number percentage, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    value = Decimal(part * 100) / Decimal(total)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------

def display_name(snapshot: Snapshot, user_id: Optional[str]) -> str:
    """Name of a user, or "Unknown" for a dangling or empty reference."""
    user = snapshot.find_user(user_id) if user_id else None
    return user.name if user else UNKNOWN_USER


def initials(name: str) -> str:
    """ "Alice Martin" -> "AM"; "?" when there is nothing to abbreviate."""
    letters = "".join(part[0] for part in name.split() if part)
    return letters.upper() or "?"


def filter_users(users: Iterable[User], search: str = "") -> List[User]:
    return [user for user in users if _matches(search, user.name, user.email)]


# ---------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------

def active_projects(snapshot: Snapshot) -> List[Project]:
    return [project for project in snapshot.projects if project.is_active]


def filter_projects(
    projects: Iterable[Project],
    search: str = "",
    status: Union[None, str, ProjectStatus] = None,
) -> List[Project]:
    """Match search text against name or description, and an optional status ("all" matches every status)."""
    wanted = _status_filter(status)
    return [
        project
        for project in projects
        if _matches(search, project.name, project.description)
        and (wanted is None or project.status.value == wanted)
    ]


def team_members(snapshot: Snapshot, project: Project) -> List[User]:
    """Known users on the project's team, in collection order. Dangling ids are skipped."""
    member_ids = set(project.team_members)
    return [user for user in snapshot.users if user.id in member_ids]


def project_progress(snapshot: Snapshot, project_id: str) -> Tuple[int, int]:
    """(done, total) task counts for a project."""
    tasks = project_tasks(snapshot, project_id)
    return sum(1 for task in tasks if task.is_done), len(tasks)


# ---------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------

def my_tasks(snapshot: Snapshot, user: Optional[User]) -> List[Task]:
    if user is None:
        return []
    return [task for task in snapshot.tasks if task.assigned_to == user.id]


def upcoming_tasks(snapshot: Snapshot, user: Optional[User], limit: int = 5) -> List[Task]:
    """The user's tasks ordered by due date, soonest first."""
    return sorted(my_tasks(snapshot, user), key=lambda task: task.due_date)[:limit]


def project_tasks(
    snapshot: Snapshot,
    project_id: str,
    status: Union[None, str, TaskStatus] = None,
) -> List[Task]:
    wanted = _status_filter(status)
    return [
        task
        for task in snapshot.tasks
        if task.project_id == project_id and (wanted is None or task.status.value == wanted)
    ]


def kanban_columns(tasks: Sequence[Task]) -> Dict[TaskStatus, List[Task]]:
    """Group tasks by status; every column is present, in board order."""
    columns: Dict[TaskStatus, List[Task]] = {status: [] for status in TaskStatus}
    for task in tasks:
        columns[task.status].append(task)
    return columns


def task_comments(snapshot: Snapshot, task_id: str) -> List[Comment]:
    return [comment for comment in snapshot.comments if comment.task_id == task_id]


# ---------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DashboardStats:
    active_projects: int
    my_tasks: int
    team_size: int
    completed_tasks: int
    total_tasks: int

    @property
    def progress(self) -> int:
        return percentage(self.completed_tasks, self.total_tasks)

    def to_dict(self) -> Dict[str, int]:
        return {
            "active_projects": self.active_projects,
            "my_tasks": self.my_tasks,
            "team_size": self.team_size,
            "completed_tasks": self.completed_tasks,
            "total_tasks": self.total_tasks,
            "progress": self.progress,
        }


def dashboard_stats(snapshot: Snapshot, user: Optional[User]) -> DashboardStats:
    return DashboardStats(
        active_projects=len(active_projects(snapshot)),
        my_tasks=len(my_tasks(snapshot, user)),
        team_size=len(snapshot.users),
        completed_tasks=sum(1 for task in snapshot.tasks if task.is_done),
        total_tasks=len(snapshot.tasks),
    )
