"""View state machine for ProjectBoard.

The active view is not set arbitrarily by selection actions. Each
navigation event maps to a target view through TRANSITIONS:

    select_project(id)   -> project-detail
    select_project(None) -> projects
    select_task(id)      -> task-detail
    select_task(None)    -> project-detail
    logout()             -> dashboard

Only an explicit NAVIGATE event may move to any view. Detail views whose
selection no longer resolves fall back to their parent (FALLBACKS).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .errors import ValidationError


class View(str, Enum):
    """Screens the board can display."""

    DASHBOARD = "dashboard"
    PROJECTS = "projects"
    PROJECT_DETAIL = "project-detail"
    TASK_DETAIL = "task-detail"
    USERS = "users"

    @classmethod
    def parse(cls, value: Union["View", str]) -> "View":
        """Return the View for an enum member or its string value."""
        try:
            return cls(value)
        except ValueError as e:
            allowed = ", ".join(v.value for v in cls)
            raise ValidationError(f"Unknown view '{value}' (expected one of: {allowed})") from e


class NavigationEvent(str, Enum):
    NAVIGATE = "navigate"
    SELECT_PROJECT = "select_project"
    SELECT_TASK = "select_task"
    LOGOUT = "logout"


# (event, has_selection) -> target view
TRANSITIONS: Dict[Tuple[NavigationEvent, bool], View] = {
    (NavigationEvent.SELECT_PROJECT, True): View.PROJECT_DETAIL,
    (NavigationEvent.SELECT_PROJECT, False): View.PROJECTS,
    (NavigationEvent.SELECT_TASK, True): View.TASK_DETAIL,
    (NavigationEvent.SELECT_TASK, False): View.PROJECT_DETAIL,
    (NavigationEvent.LOGOUT, False): View.DASHBOARD,
}

# Parent view shown when a detail view's selection is dangling.
FALLBACKS: Dict[View, View] = {
    View.TASK_DETAIL: View.PROJECT_DETAIL,
    View.PROJECT_DETAIL: View.PROJECTS,
}


def next_view(event: NavigationEvent, has_selection: bool) -> View:
    """Look up the target view for a selection or logout event."""
    try:
        return TRANSITIONS[(event, has_selection)]
    except KeyError as e:
        raise ValueError(f"No transition for event '{event.value}'") from e


@dataclass(frozen=True, slots=True)
class NavigationState:
    """Current view plus the selections it depends on."""

    view: View = View.DASHBOARD
    selected_project_id: Optional[str] = None
    selected_task_id: Optional[str] = None

    def apply(self, event: NavigationEvent, target: Optional[str] = None) -> "NavigationState":
        """Return the state reached by applying ``event``.

        For NAVIGATE, ``target`` is the view. For the selection events it is
        the selected id, where an empty string counts as no selection.
        Selections survive LOGOUT.
        """
        if event is NavigationEvent.NAVIGATE:
            if target is None:
                raise ValidationError("A target view is required")
            return replace(self, view=View.parse(target))

        selection = target or None
        if event is NavigationEvent.SELECT_PROJECT:
            return replace(
                self,
                selected_project_id=selection,
                view=next_view(event, selection is not None),
            )
        if event is NavigationEvent.SELECT_TASK:
            return replace(
                self,
                selected_task_id=selection,
                view=next_view(event, selection is not None),
            )
        return replace(self, view=next_view(event, False))


def resolve_view(state: NavigationState, *, project_exists: bool, task_exists: bool) -> View:
    """Return the view to render, walking FALLBACKS past dangling selections."""
    view = state.view
    if view is View.TASK_DETAIL and not task_exists:
        view = FALLBACKS[view]
    if view is View.PROJECT_DETAIL and not project_exists:
        view = FALLBACKS[view]
    return view
