"""Application state store for ProjectBoard.

AppStore is the single owner of the four collections (users, projects,
tasks, comments) and of the session fields (current user, current view,
selected project and task). Views read ``store.snapshot`` and call the
action methods; nothing else replaces a collection.

Every action runs to completion under one lock, publishes a new Snapshot,
and notifies subscribers with it. Update and delete on an unknown id
change nothing and report the miss through their return value.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .board_logging import StoreEvents, log_error_with_context, log_operation, log_performance
from .config import Settings
from .errors import ValidationError
from .models import Comment, Project, Snapshot, Task, User, normalize_fields
from .navigation import NavigationEvent, View
from .seed import SeedData, demo_dataset

logger = logging.getLogger("projectboard.store")

Subscriber = Callable[[Snapshot], None]
Payload = Optional[Mapping[str, Any]]

COLLECTIONS = ("users", "projects", "tasks", "comments")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _merge_payload(data: Payload, fields: Mapping[str, Any]) -> Dict[str, Any]:
    values = normalize_fields(data or {})
    values.update(normalize_fields(fields))
    return values


def _ensure_valid(record: Any) -> None:
    issues = record.validate()
    if issues:
        raise ValidationError("; ".join(issues))


def _index_of(items: Tuple[Any, ...], entity_id: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    return None


def _replace_at(items: Tuple[Any, ...], index: int, item: Any) -> Tuple[Any, ...]:
    return items[:index] + (item,) + items[index + 1:]


def _check_unique_ids(snapshot: Snapshot) -> None:
    for name in COLLECTIONS:
        seen = set()
        for item in getattr(snapshot, name):
            if item.id in seen:
                raise ValidationError(f"Duplicate id '{item.id}' in {name}")
            seen.add(item.id)


def _id_counter(items: Iterable[Any]) -> Iterator[int]:
    """Count upwards from the highest numeric id already present."""
    highest = 0
    for item in items:
        if item.id.isdigit():
            highest = max(highest, int(item.id))
    return itertools.count(highest + 1)


class AppStore:
    """Owns the board state and applies every action to it."""

    def __init__(
        self,
        *,
        users: Iterable[User] = (),
        projects: Iterable[Project] = (),
        tasks: Iterable[Task] = (),
        comments: Iterable[Comment] = (),
        current_user: Optional[User] = None,
        clock: Optional[Callable[[], datetime]] = None,
        events: Optional[StoreEvents] = None,
    ):
        self._lock = threading.RLock()
        self._clock = clock or _utc_now
        self.events = events or StoreEvents()
        self._subscribers: List[Subscriber] = []
        self._pending: Deque[Snapshot] = deque()
        self._broadcasting = False

        initial = Snapshot(
            users=tuple(users),
            projects=tuple(projects),
            tasks=tuple(tasks),
            comments=tuple(comments),
            current_user=current_user,
        )
        _check_unique_ids(initial)

        self._initial = initial
        self._snapshot = initial
        self._counters = {name: _id_counter(getattr(initial, name)) for name in COLLECTIONS}

        logger.info(
            f"Store initialized with {len(initial.users)} users, {len(initial.projects)} projects, "
            f"{len(initial.tasks)} tasks, {len(initial.comments)} comments"
        )

    @classmethod
    def from_seed(cls, settings: Optional[Settings] = None, **kwargs) -> "AppStore":
        """Build a store from the demo dataset and log in the configured seed user."""
        settings = settings or Settings()
        with log_operation("load_seed", seed=settings.seed):
            data = demo_dataset() if settings.seed else SeedData()

        current_user = None
        if settings.auto_login_email:
            current_user = next((u for u in data.users if u.email == settings.auto_login_email), None)
            if current_user is None:
                logger.warning(f"Auto-login email '{settings.auto_login_email}' matches no seeded user")

        return cls(
            users=data.users,
            projects=data.projects,
            tasks=data.tasks,
            comments=data.comments,
            current_user=current_user,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Reading and subscriptions
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        """The current immutable state."""
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` with every new snapshot. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def reset(self) -> Snapshot:
        """Restore the state the store was constructed with."""
        with self._lock:
            return self._commit("store_reset", dict(
                users=self._initial.users,
                projects=self._initial.projects,
                tasks=self._initial.tasks,
                comments=self._initial.comments,
                current_user=self._initial.current_user,
                current_view=self._initial.current_view,
                selected_project_id=self._initial.selected_project_id,
                selected_task_id=self._initial.selected_task_id,
            ))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self, event_type: str, changes: Dict[str, Any], **details) -> Snapshot:
        snapshot = replace(self._snapshot, revision=self._snapshot.revision + 1, **changes)
        self._snapshot = snapshot
        self.events.emit(event_type, revision=snapshot.revision, **details)
        self._broadcast(snapshot)
        return snapshot

    def _broadcast(self, snapshot: Snapshot) -> None:
        """Deliver ``snapshot`` to every subscriber, in revision order.

        A subscriber may call back into the store. Snapshots committed while
        a broadcast is running are queued and delivered after the current one
        reached every subscriber.
        """
        self._pending.append(snapshot)
        if self._broadcasting:
            return

        self._broadcasting = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for callback in list(self._subscribers):
                    try:
                        callback(current)
                    except Exception as e:
                        log_error_with_context(e, {"operation": "broadcast", "revision": current.revision})
        finally:
            self._broadcasting = False
            self._pending.clear()

    def _next_id(self, collection: str) -> str:
        existing = {item.id for item in getattr(self._snapshot, collection)}
        candidate = str(next(self._counters[collection]))
        while candidate in existing:
            candidate = str(next(self._counters[collection]))
        return candidate

    def _new_record(self, record_cls: type, collection: str, values: Dict[str, Any], **stamped) -> Any:
        for name in ("id", *stamped):
            if name in values:
                raise ValidationError(f"'{name}' is assigned by the store")
        record = record_cls.from_dict({**values, **stamped, "id": self._next_id(collection)})
        _ensure_valid(record)
        return record

    def _updated_record(self, collection: str, entity_id: str, updates: Dict[str, Any]) -> Optional[Tuple[int, Any]]:
        items = getattr(self._snapshot, collection)
        index = _index_of(items, entity_id)
        if index is None:
            logger.warning(f"Update ignored: no {collection[:-1]} with id '{entity_id}'")
            return None
        record = items[index].with_updates(updates)
        _ensure_valid(record)
        return index, record

    def _check_email_free(self, email: str, *, exclude_id: Optional[str] = None) -> None:
        owner = self._snapshot.user_by_email(email)
        if owner is not None and owner.id != exclude_id:
            raise ValidationError(f"Email '{email}' is already used by user '{owner.id}'")

    def _missing(self, kind: str, entity_id: str) -> bool:
        logger.warning(f"Delete ignored: no {kind} with id '{entity_id}'")
        return False

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> bool:
        """Log in the user with exactly this email.

        The password is accepted but not checked: any password succeeds
        once the email matches a known user. On failure nothing changes.
        """
        with self._lock:
            user = self._snapshot.user_by_email(email)
            if user is None:
                logger.warning(f"Login failed: unknown email '{email}'")
                self.events.emit("login_failed", email=email)
                return False
            self._commit("logged_in", {"current_user": user}, user_id=user.id)
            return True

    def logout(self) -> None:
        """Clear the current user and return to the dashboard. Selections are kept."""
        with self._lock:
            previous = self._snapshot.current_user
            navigation = self._snapshot.navigation.apply(NavigationEvent.LOGOUT)
            self._commit(
                "logged_out",
                {"current_user": None, "current_view": navigation.view},
                user_id=previous.id if previous else None,
            )

    def set_current_view(self, view: Union[View, str]) -> None:
        with self._lock:
            navigation = self._snapshot.navigation.apply(NavigationEvent.NAVIGATE, View.parse(view))
            self._commit("view_changed", {"current_view": navigation.view}, view=navigation.view.value)

    def select_project(self, project_id: Optional[str]) -> None:
        """Select a project (project-detail) or clear the selection (projects)."""
        with self._lock:
            navigation = self._snapshot.navigation.apply(NavigationEvent.SELECT_PROJECT, project_id)
            self._commit(
                "project_selected",
                {"selected_project_id": navigation.selected_project_id, "current_view": navigation.view},
                project_id=navigation.selected_project_id,
                view=navigation.view.value,
            )

    def select_task(self, task_id: Optional[str]) -> None:
        """Select a task (task-detail) or clear the selection (project-detail)."""
        with self._lock:
            navigation = self._snapshot.navigation.apply(NavigationEvent.SELECT_TASK, task_id)
            self._commit(
                "task_selected",
                {"selected_task_id": navigation.selected_task_id, "current_view": navigation.view},
                task_id=navigation.selected_task_id,
                view=navigation.view.value,
            )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @log_performance("add_project")
    def add_project(self, data: Payload = None, **fields) -> Project:
        values = _merge_payload(data, fields)
        with self._lock:
            project = self._new_record(Project, "projects", values)
            self._commit("project_added", {"projects": self._snapshot.projects + (project,)}, project_id=project.id)
            return project

    @log_performance("update_project")
    def update_project(self, project_id: str, updates: Payload = None, **fields) -> Optional[Project]:
        values = _merge_payload(updates, fields)
        with self._lock:
            found = self._updated_record("projects", project_id, values)
            if found is None:
                return None
            index, project = found
            self._commit(
                "project_updated",
                {"projects": _replace_at(self._snapshot.projects, index, project)},
                project_id=project_id,
                fields=sorted(values),
            )
            return project

    @log_performance("delete_project")
    def delete_project(self, project_id: str) -> bool:
        """Delete a project, its tasks, and the comments on those tasks."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot.find_project(project_id) is None:
                return self._missing("project", project_id)

            removed_tasks = {t.id for t in snapshot.tasks if t.project_id == project_id}
            comments = tuple(c for c in snapshot.comments if c.task_id not in removed_tasks)
            self._commit(
                "project_deleted",
                {
                    "projects": tuple(p for p in snapshot.projects if p.id != project_id),
                    "tasks": tuple(t for t in snapshot.tasks if t.id not in removed_tasks),
                    "comments": comments,
                },
                project_id=project_id,
                removed_tasks=len(removed_tasks),
                removed_comments=len(snapshot.comments) - len(comments),
            )
            return True

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @log_performance("add_task")
    def add_task(self, data: Payload = None, **fields) -> Task:
        values = _merge_payload(data, fields)
        with self._lock:
            task = self._new_record(Task, "tasks", values)
            self._commit(
                "task_added",
                {"tasks": self._snapshot.tasks + (task,)},
                task_id=task.id,
                project_id=task.project_id,
            )
            return task

    @log_performance("update_task")
    def update_task(self, task_id: str, updates: Payload = None, **fields) -> Optional[Task]:
        values = _merge_payload(updates, fields)
        with self._lock:
            found = self._updated_record("tasks", task_id, values)
            if found is None:
                return None
            index, task = found
            self._commit(
                "task_updated",
                {"tasks": _replace_at(self._snapshot.tasks, index, task)},
                task_id=task_id,
                fields=sorted(values),
            )
            return task

    @log_performance("delete_task")
    def delete_task(self, task_id: str) -> bool:
        """Delete a task and its comments."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot.find_task(task_id) is None:
                return self._missing("task", task_id)

            comments = tuple(c for c in snapshot.comments if c.task_id != task_id)
            self._commit(
                "task_deleted",
                {"tasks": tuple(t for t in snapshot.tasks if t.id != task_id), "comments": comments},
                task_id=task_id,
                removed_comments=len(snapshot.comments) - len(comments),
            )
            return True

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    @log_performance("add_comment")
    def add_comment(self, data: Payload = None, **fields) -> Comment:
        """Append a comment; created_at comes from the store clock."""
        values = _merge_payload(data, fields)
        with self._lock:
            comment = self._new_record(Comment, "comments", values, created_at=self._clock())
            self._commit(
                "comment_added",
                {"comments": self._snapshot.comments + (comment,)},
                comment_id=comment.id,
                task_id=comment.task_id,
            )
            return comment

    @log_performance("update_comment")
    def update_comment(self, comment_id: str, updates: Payload = None, **fields) -> Optional[Comment]:
        values = _merge_payload(updates, fields)
        with self._lock:
            found = self._updated_record("comments", comment_id, values)
            if found is None:
                return None
            index, comment = found
            self._commit(
                "comment_updated",
                {"comments": _replace_at(self._snapshot.comments, index, comment)},
                comment_id=comment_id,
            )
            return comment

    @log_performance("delete_comment")
    def delete_comment(self, comment_id: str) -> bool:
        with self._lock:
            snapshot = self._snapshot
            if snapshot.find_comment(comment_id) is None:
                return self._missing("comment", comment_id)
            self._commit(
                "comment_deleted",
                {"comments": tuple(c for c in snapshot.comments if c.id != comment_id)},
                comment_id=comment_id,
            )
            return True

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @log_performance("add_user")
    def add_user(self, data: Payload = None, **fields) -> User:
        values = _merge_payload(data, fields)
        with self._lock:
            user = self._new_record(User, "users", values)
            self._check_email_free(user.email)
            self._commit("user_added", {"users": self._snapshot.users + (user,)}, user_id=user.id)
            return user

    @log_performance("update_user")
    def update_user(self, user_id: str, updates: Payload = None, **fields) -> Optional[User]:
        """Update a user; the logged-in user is refreshed when it is the target."""
        values = _merge_payload(updates, fields)
        with self._lock:
            found = self._updated_record("users", user_id, values)
            if found is None:
                return None
            index, user = found
            self._check_email_free(user.email, exclude_id=user_id)

            changes: Dict[str, Any] = {"users": _replace_at(self._snapshot.users, index, user)}
            current = self._snapshot.current_user
            if current is not None and current.id == user_id:
                changes["current_user"] = user
            self._commit("user_updated", changes, user_id=user_id, fields=sorted(values))
            return user

    @log_performance("delete_user")
    def delete_user(self, user_id: str) -> bool:
        """Delete a user. Their comments and assignments are left in place."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot.find_user(user_id) is None:
                return self._missing("user", user_id)
            self._commit(
                "user_deleted",
                {"users": tuple(u for u in snapshot.users if u.id != user_id)},
                user_id=user_id,
            )
            return True
