"""Screen view models and guarded actions for ProjectBoard.

BoardController sits between the consumers (the MCP tools in ``main.py``,
tests, any other front end) and the AppStore. Each screen method reads one
snapshot and returns a plain dictionary. Each action checks the current
user's capabilities before calling the store, and reports failures as
``{"error": ..., "suggestion": ...}`` dictionaries instead of raising.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

from .errors import AuthenticationFailed, NotFoundError, PermissionDenied, ProjectBoardError, ValidationError
from .models import Comment, Project, Snapshot, Task, TaskStatus, User, format_timestamp
from .navigation import View, resolve_view
from .permissions import (
    Capabilities,
    can_delete_user,
    can_edit_comment,
    can_delete_comment,
    visible_views,
)
from .queries import (
    active_projects,
    dashboard_stats,
    display_name,
    filter_projects,
    filter_users,
    initials,
    kanban_columns,
    percentage,
    project_progress,
    project_tasks,
    task_comments,
    team_members,
    upcoming_tasks,
)
from .seed import SEED_ADMIN_EMAIL
from .store import AppStore

logger = logging.getLogger("projectboard.controller")


def _error_response(error: ProjectBoardError) -> Dict[str, Any]:
    return {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
        "suggestion": error.suggestion,
    }


def _guarded(operation: str):
    """Turn ProjectBoardError raised by ``operation`` into an error dictionary."""
    def decorator(func: Callable[..., Dict[str, Any]]):
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> Dict[str, Any]:
            try:
                return func(self, *args, **kwargs)
            except ProjectBoardError as e:
                logger.warning(f"{operation} rejected: {e}")
                return _error_response(e)
        return wrapper
    return decorator


def _require(allowed: bool, action: str) -> None:
    if not allowed:
        raise PermissionDenied(f"You are not allowed to {action}")


def _clean_content(content: Optional[str]) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment content cannot be empty")
    return text


class BoardController:
    """View models and capability-checked actions over an injected store."""

    def __init__(self, store: AppStore):
        self.store = store

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def require_user(self, snapshot: Optional[Snapshot] = None) -> User:
        """Return the logged-in user or raise AuthenticationFailed."""
        snapshot = snapshot or self.store.snapshot
        if snapshot.current_user is None:
            raise AuthenticationFailed("Not logged in", suggestion="Call login with the email of a known user")
        return snapshot.current_user

    def _resolve_view(self, snapshot: Snapshot) -> View:
        view = resolve_view(
            snapshot.navigation,
            project_exists=snapshot.selected_project is not None,
            task_exists=snapshot.selected_task is not None,
        )
        if view is not snapshot.current_view:
            logger.info(f"Selection no longer resolves; falling back from {snapshot.current_view.value} to {view.value}")
            self.store.set_current_view(view)
        return view

    def _user_card(self, user: User) -> Dict[str, Any]:
        return {**user.to_dict(), "initials": initials(user.name)}

    def _project_card(self, snapshot: Snapshot, project: Project) -> Dict[str, Any]:
        done, total = project_progress(snapshot, project.id)
        return {
            **project.to_dict(),
            "team": [self._user_card(user) for user in team_members(snapshot, project)],
            "progress": {"done": done, "total": total, "percent": percentage(done, total)},
        }

    def _task_card(self, snapshot: Snapshot, task: Task) -> Dict[str, Any]:
        assignee = display_name(snapshot, task.assigned_to)
        return {**task.to_dict(), "assignee": assignee, "assignee_initials": initials(assignee)}

    def _comment_card(self, snapshot: Snapshot, comment: Comment, user: User) -> Dict[str, Any]:
        author = display_name(snapshot, comment.user_id)
        return {
            **comment.to_dict(),
            "author": author,
            "author_initials": initials(author),
            "can_edit": can_edit_comment(user, comment),
            "can_delete": can_delete_comment(user, comment),
        }

    # ------------------------------------------------------------------
    # Session and navigation
    # ------------------------------------------------------------------

    def session(self) -> Dict[str, Any]:
        """Who is logged in, where they are, and what they may do."""
        snapshot = self.store.snapshot
        user = snapshot.current_user
        return {
            "logged_in": user is not None,
            "current_user": user.to_dict() if user else None,
            "current_view": snapshot.current_view.value,
            "selected_project_id": snapshot.selected_project_id,
            "selected_task_id": snapshot.selected_task_id,
            "navigation": [view.value for view in visible_views(user)],
            "capabilities": Capabilities.for_user(user).to_dict(),
        }

    @_guarded("login")
    def login(self, email: str, password: str) -> Dict[str, Any]:
        if not self.store.login(email, password):
            raise AuthenticationFailed(
                "Invalid email or password",
                suggestion=f"Use the email of a known user, for example {SEED_ADMIN_EMAIL}",
            )
        return {"success": True, **self.session()}

    def logout(self) -> Dict[str, Any]:
        self.store.logout()
        return {"success": True, **self.session()}

    @_guarded("navigate")
    def navigate(self, view: str) -> Dict[str, Any]:
        self.require_user()
        self.store.set_current_view(view)
        return self.render()

    @_guarded("render")
    def render(self) -> Dict[str, Any]:
        """View model of the current screen, after dangling-selection fallback."""
        snapshot = self.store.snapshot
        self.require_user(snapshot)
        screens = {
            View.DASHBOARD: self.dashboard,
            View.PROJECTS: self.project_list,
            View.PROJECT_DETAIL: self.project_detail,
            View.TASK_DETAIL: self.task_detail,
            View.USERS: self.user_management,
        }
        return screens[self._resolve_view(snapshot)]()

    @_guarded("open_project")
    def open_project(self, project_id: str) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        self.require_user(snapshot)
        if snapshot.find_project(project_id) is None:
            raise NotFoundError("Project", project_id)
        self.store.select_project(project_id)
        return self.project_detail()

    @_guarded("close_project")
    def close_project(self) -> Dict[str, Any]:
        self.require_user()
        self.store.select_project(None)
        return self.render()

    @_guarded("open_task")
    def open_task(self, task_id: str) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        self.require_user(snapshot)
        if snapshot.find_task(task_id) is None:
            raise NotFoundError("Task", task_id)
        self.store.select_task(task_id)
        return self.task_detail()

    @_guarded("close_task")
    def close_task(self) -> Dict[str, Any]:
        self.require_user()
        self.store.select_task(None)
        return self.render()

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    @_guarded("dashboard")
    def dashboard(self) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        return {
            "view": View.DASHBOARD.value,
            "greeting": f"Hello, {user.name}",
            "stats": dashboard_stats(snapshot, user).to_dict(),
            "active_projects": [self._project_card(snapshot, p) for p in active_projects(snapshot)[:3]],
            "upcoming_tasks": [self._task_card(snapshot, t) for t in upcoming_tasks(snapshot, user)],
        }

    @_guarded("project_list")
    def project_list(self, search: str = "", status: Optional[str] = None) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        projects = filter_projects(snapshot.projects, search, status)

        result: Dict[str, Any] = {
            "view": View.PROJECTS.value,
            "projects": [self._project_card(snapshot, p) for p in projects],
            "total_count": len(projects),
            "filters_applied": {"search": search, "status": status or "all"},
            "capabilities": Capabilities.for_user(user).to_dict(),
        }
        if not projects:
            filtered = bool(search.strip()) or (status not in (None, "", "all"))
            result["empty_message"] = (
                "Try adjusting your search criteria" if filtered else "Start by creating your first project"
            )
        return result

    @_guarded("project_detail")
    def project_detail(self, status: Optional[str] = None) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        project = snapshot.selected_project
        if project is None:
            raise NotFoundError("Project", snapshot.selected_project_id)

        columns = kanban_columns(project_tasks(snapshot, project.id, status))
        return {
            "view": View.PROJECT_DETAIL.value,
            "project": self._project_card(snapshot, project),
            "columns": {
                column.value: [self._task_card(snapshot, task) for task in tasks]
                for column, tasks in columns.items()
            },
            "filters_applied": {"status": status or "all"},
            "capabilities": Capabilities.for_user(user).to_dict(),
        }

    @_guarded("task_detail")
    def task_detail(self) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        task = snapshot.selected_task
        if task is None:
            raise NotFoundError("Task", snapshot.selected_task_id)

        project = snapshot.find_project(task.project_id)
        comments = task_comments(snapshot, task.id)
        return {
            "view": View.TASK_DETAIL.value,
            "task": self._task_card(snapshot, task),
            "project_name": project.name if project else None,
            "comments": [self._comment_card(snapshot, c, user) for c in comments],
            "comment_count": len(comments),
            "statuses": [s.value for s in TaskStatus],
            "capabilities": Capabilities.for_user(user).to_dict(),
        }

    @_guarded("user_management")
    def user_management(self, search: str = "") -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        capabilities = Capabilities.for_user(user)
        _require(capabilities.manage_users, "manage users (administrators only)")

        users = filter_users(snapshot.users, search)
        result: Dict[str, Any] = {
            "view": View.USERS.value,
            "users": [
                {**self._user_card(u), "can_delete": can_delete_user(user, u)}
                for u in users
            ],
            "total_count": len(users),
            "filters_applied": {"search": search},
        }
        if not users:
            result["empty_message"] = (
                "Try adjusting your search" if search.strip() else "Start by adding users"
            )
        return result

    # ------------------------------------------------------------------
    # Project actions
    # ------------------------------------------------------------------

    @_guarded("create_project")
    def create_project(
        self,
        name: str,
        start_date: str,
        end_date: str,
        description: str = "",
        status: str = "Active",
        team_members: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).create_project, "create projects")
        project = self.store.add_project(
            name=name,
            description=description,
            start_date=start_date,
            end_date=end_date,
            status=status,
            team_members=team_members or [],
        )
        return {"success": True, "project": project.to_dict(), "message": f"Created project {project.id}"}

    @_guarded("edit_project")
    def edit_project(self, project_id: str, **updates) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).edit_project, "edit projects")
        project = self.store.update_project(project_id, updates)
        if project is None:
            raise NotFoundError("Project", project_id)
        return {"success": True, "project": project.to_dict(), "message": f"Updated project {project_id}"}

    @_guarded("remove_project")
    def remove_project(self, project_id: str) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).delete_project, "delete projects")
        before = self.store.snapshot
        if not self.store.delete_project(project_id):
            raise NotFoundError("Project", project_id)
        after = self.store.snapshot
        return {
            "success": True,
            "project_id": project_id,
            "removed_tasks": len(before.tasks) - len(after.tasks),
            "removed_comments": len(before.comments) - len(after.comments),
            "message": f"Deleted project {project_id}",
        }

    # ------------------------------------------------------------------
    # Task actions
    # ------------------------------------------------------------------

    @_guarded("create_task")
    def create_task(
        self,
        project_id: str,
        title: str,
        due_date: str,
        description: str = "",
        assigned_to: str = "",
        priority: str = "Medium",
        status: str = "To Do",
    ) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).create_task, "create tasks")
        task = self.store.add_task(
            project_id=project_id,
            title=title,
            description=description,
            due_date=due_date,
            assigned_to=assigned_to,
            priority=priority,
            status=status,
        )
        return {"success": True, "task": task.to_dict(), "message": f"Created task {task.id}"}

    @_guarded("edit_task")
    def edit_task(self, task_id: str, **updates) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).edit_task, "edit tasks")
        task = self.store.update_task(task_id, updates)
        if task is None:
            raise NotFoundError("Task", task_id)
        return {"success": True, "task": task.to_dict(), "message": f"Updated task {task_id}"}

    @_guarded("change_task_status")
    def change_task_status(self, task_id: str, status: str) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).update_task_status, "change task status")
        task = self.store.update_task(task_id, status=status)
        if task is None:
            raise NotFoundError("Task", task_id)
        return {"success": True, "task": task.to_dict(), "message": f"Task {task_id} is now {task.status.value}"}

    @_guarded("toggle_task_done")
    def toggle_task_done(self, task_id: str) -> Dict[str, Any]:
        """Mark a task done, or reopen a done task as in progress."""
        task = self.store.snapshot.find_task(task_id)
        if task is None:
            self.require_user()
            raise NotFoundError("Task", task_id)
        target = TaskStatus.IN_PROGRESS if task.is_done else TaskStatus.DONE
        return self.change_task_status(task_id, target.value)

    @_guarded("remove_task")
    def remove_task(self, task_id: str) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).delete_task, "delete tasks")
        before = self.store.snapshot
        if not self.store.delete_task(task_id):
            raise NotFoundError("Task", task_id)
        return {
            "success": True,
            "task_id": task_id,
            "removed_comments": len(before.comments) - len(self.store.snapshot.comments),
            "message": f"Deleted task {task_id}",
        }

    # ------------------------------------------------------------------
    # Comment actions
    # ------------------------------------------------------------------

    @_guarded("add_comment")
    def add_comment(self, task_id: str, content: str) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).comment, "comment")
        comment = self.store.add_comment(content=_clean_content(content), task_id=task_id, user_id=user.id)
        return {
            "success": True,
            "comment": comment.to_dict(),
            "message": f"Comment posted at {format_timestamp(comment.created_at)}",
        }

    @_guarded("edit_comment")
    def edit_comment(self, comment_id: str, content: str) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        comment = snapshot.find_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        _require(can_edit_comment(user, comment), "edit someone else's comment")
        updated = self.store.update_comment(comment_id, content=_clean_content(content))
        if updated is None:
            raise NotFoundError("Comment", comment_id)
        return {"success": True, "comment": updated.to_dict(), "message": f"Updated comment {comment_id}"}

    @_guarded("remove_comment")
    def remove_comment(self, comment_id: str) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        comment = snapshot.find_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        _require(can_delete_comment(user, comment), "delete someone else's comment")
        self.store.delete_comment(comment_id)
        return {"success": True, "comment_id": comment_id, "message": f"Deleted comment {comment_id}"}

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    @_guarded("create_user")
    def create_user(
        self,
        name: str,
        email: str,
        role: str = "Member",
        avatar: Optional[str] = None,
    ) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).manage_users, "manage users")
        created = self.store.add_user(name=name, email=email, role=role, avatar=avatar)
        return {"success": True, "user": created.to_dict(), "message": f"Created user {created.id}"}

    @_guarded("edit_user")
    def edit_user(self, user_id: str, **updates) -> Dict[str, Any]:
        user = self.require_user()
        _require(Capabilities.for_user(user).manage_users, "manage users")
        updated = self.store.update_user(user_id, updates)
        if updated is None:
            raise NotFoundError("User", user_id)
        return {"success": True, "user": updated.to_dict(), "message": f"Updated user {user_id}"}

    @_guarded("remove_user")
    def remove_user(self, user_id: str) -> Dict[str, Any]:
        snapshot = self.store.snapshot
        user = self.require_user(snapshot)
        _require(Capabilities.for_user(user).manage_users, "manage users")
        target = snapshot.find_user(user_id)
        if target is None:
            raise NotFoundError("User", user_id)
        _require(can_delete_user(user, target), "delete your own account")
        self.store.delete_user(user_id)
        return {"success": True, "user_id": user_id, "message": f"Deleted user {user_id}"}
