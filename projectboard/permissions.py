"""Centralized capability checks.

Screens ask these predicates instead of comparing roles inline. Every
predicate accepts ``None`` for a logged-out session and answers False.
These are UI-level checks only; the store itself does not enforce them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .models import Comment, Role, User
from .navigation import View


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role is Role.ADMIN


def is_logged_in(user: Optional[User]) -> bool:
    return user is not None


# ---------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------

def can_manage_users(user: Optional[User]) -> bool:
    return is_admin(user)


def can_delete_user(actor: Optional[User], target: Optional[User]) -> bool:
    """Admins may delete any account except their own."""
    if not is_admin(actor) or target is None:
        return False
    return target.id != actor.id


# ---------------------------------------------------------------------
# Projects and tasks
# ---------------------------------------------------------------------

def can_create_project(user: Optional[User]) -> bool:
    return is_admin(user)


def can_edit_project(user: Optional[User]) -> bool:
    return is_admin(user)


def can_delete_project(user: Optional[User]) -> bool:
    return is_admin(user)


def can_create_task(user: Optional[User]) -> bool:
    return is_admin(user)


def can_edit_task(user: Optional[User]) -> bool:
    return is_admin(user)


def can_delete_task(user: Optional[User]) -> bool:
    return is_admin(user)


def can_update_task_status(user: Optional[User]) -> bool:
    """Anyone on the board can move a task between columns."""
    return is_logged_in(user)


# ---------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------

def can_comment(user: Optional[User]) -> bool:
    return is_logged_in(user)


def can_edit_comment(user: Optional[User], comment: Optional[Comment]) -> bool:
    """Only the author may edit or delete a comment."""
    if user is None or comment is None:
        return False
    return comment.user_id == user.id


def can_delete_comment(user: Optional[User], comment: Optional[Comment]) -> bool:
    return can_edit_comment(user, comment)


# ---------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------

def visible_views(user: Optional[User]) -> List[View]:
    """Entries of the top navigation bar."""
    if user is None:
        return []
    views = [View.DASHBOARD, View.PROJECTS]
    if can_manage_users(user):
        views.append(View.USERS)
    return views


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Capabilities of one user, evaluated once per render."""

    manage_users: bool = False
    create_project: bool = False
    edit_project: bool = False
    delete_project: bool = False
    create_task: bool = False
    edit_task: bool = False
    delete_task: bool = False
    update_task_status: bool = False
    comment: bool = False

    @classmethod
    def for_user(cls, user: Optional[User]) -> "Capabilities":
        return cls(
            manage_users=can_manage_users(user),
            create_project=can_create_project(user),
            edit_project=can_edit_project(user),
            delete_project=can_delete_project(user),
            create_task=can_create_task(user),
            edit_task=can_edit_task(user),
            delete_task=can_delete_task(user),
            update_task_status=can_update_task_status(user),
            comment=can_comment(user),
        )

    def to_dict(self) -> dict:
        return {
            "manage_users": self.manage_users,
            "create_project": self.create_project,
            "edit_project": self.edit_project,
            "delete_project": self.delete_project,
            "create_task": self.create_task,
            "edit_task": self.edit_task,
            "delete_task": self.delete_task,
            "update_task_status": self.update_task_status,
            "comment": self.comment,
        }
