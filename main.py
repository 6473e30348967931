"""MCP server exposing the ProjectBoard screens and actions as tools."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from projectboard import AppStore, BoardController, Settings
from projectboard.board_logging import setup_logging

logger = logging.getLogger("projectboard.server")

SNAPSHOT_URI = "projectboard://snapshot"


def _given(**fields: Any) -> Dict[str, Any]:
    """Drop parameters the caller left out."""
    return {key: value for key, value in fields.items() if value is not None}


def build_server(controller: BoardController) -> FastMCP:
    """Register every board tool against ``controller``."""

    mcp = FastMCP("projectboard")

    # ------------------------------------------------------------------
    # Session and navigation
    # ------------------------------------------------------------------

    @mcp.tool()
    def login(email: str, password: str) -> Dict[str, Any]:
        """Log in with a known email. Passwords are not checked."""
        return controller.login(email, password)

    @mcp.tool()
    def logout() -> Dict[str, Any]:
        """Log out and return to the dashboard."""
        return controller.logout()

    @mcp.tool()
    def session() -> Dict[str, Any]:
        """Current user, view, selections and capabilities."""
        return controller.session()

    @mcp.tool()
    def navigate(view: str) -> Dict[str, Any]:
        """Switch to a view (dashboard, projects, project-detail, task-detail, users) and render it."""
        return controller.navigate(view)

    @mcp.tool()
    def current_screen() -> Dict[str, Any]:
        """Render the current view, falling back to a parent view if its selection was deleted."""
        return controller.render()

    @mcp.tool()
    def open_project(project_id: str) -> Dict[str, Any]:
        """Select a project and show its kanban board."""
        return controller.open_project(project_id)

    @mcp.tool()
    def close_project() -> Dict[str, Any]:
        """Clear the project selection and go back to the project list."""
        return controller.close_project()

    @mcp.tool()
    def open_task(task_id: str) -> Dict[str, Any]:
        """Select a task and show its details and comments."""
        return controller.open_task(task_id)

    @mcp.tool()
    def close_task() -> Dict[str, Any]:
        """Clear the task selection and go back to the project board."""
        return controller.close_task()

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    @mcp.tool()
    def dashboard() -> Dict[str, Any]:
        """Statistics, active projects and the user's upcoming tasks."""
        return controller.dashboard()

    @mcp.tool()
    def list_projects(search: str = "", status: Optional[str] = None) -> Dict[str, Any]:
        """Projects matching the search text and status (Active, Completed, Suspended or all)."""
        return controller.project_list(search=search, status=status)

    @mcp.tool()
    def project_board(status: Optional[str] = None) -> Dict[str, Any]:
        """Kanban columns of the selected project, optionally filtered by task status."""
        return controller.project_detail(status=status)

    @mcp.tool()
    def task_details() -> Dict[str, Any]:
        """The selected task with its comments."""
        return controller.task_detail()

    @mcp.tool()
    def list_users(search: str = "") -> Dict[str, Any]:
        """User management screen (administrators only)."""
        return controller.user_management(search=search)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @mcp.tool()
    def create_project(
        name: str,
        start_date: str,
        end_date: str,
        description: str = "",
        status: str = "Active",
        team_members: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Create a project. Dates are YYYY-MM-DD."""
        return controller.create_project(
            name=name,
            start_date=start_date,
            end_date=end_date,
            description=description,
            status=status,
            team_members=team_members,
        )

    @mcp.tool()
    def update_project(
        project_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        status: Optional[str] = None,
        team_members: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Change only the given project fields."""
        return controller.edit_project(project_id, **_given(
            name=name,
            description=description,
            start_date=start_date,
            end_date=end_date,
            status=status,
            team_members=team_members,
        ))

    @mcp.tool()
    def delete_project(project_id: str) -> Dict[str, Any]:
        """Delete a project together with its tasks and their comments."""
        return controller.remove_project(project_id)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @mcp.tool()
    def create_task(
        project_id: str,
        title: str,
        due_date: str,
        description: str = "",
        assigned_to: str = "",
        priority: str = "Medium",
        status: str = "To Do",
    ) -> Dict[str, Any]:
        """Create a task in a project."""
        return controller.create_task(
            project_id=project_id,
            title=title,
            due_date=due_date,
            description=description,
            assigned_to=assigned_to,
            priority=priority,
            status=status,
        )

    @mcp.tool()
    def update_task(
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
        assigned_to: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Change only the given task fields."""
        return controller.edit_task(task_id, **_given(
            title=title,
            description=description,
            due_date=due_date,
            assigned_to=assigned_to,
            priority=priority,
            status=status,
        ))

    @mcp.tool()
    def move_task(task_id: str, status: str) -> Dict[str, Any]:
        """Move a task to another column (To Do, In Progress, Done)."""
        return controller.change_task_status(task_id, status)

    @mcp.tool()
    def toggle_task_done(task_id: str) -> Dict[str, Any]:
        """Mark a task done, or reopen a done task."""
        return controller.toggle_task_done(task_id)

    @mcp.tool()
    def delete_task(task_id: str) -> Dict[str, Any]:
        """Delete a task and its comments."""
        return controller.remove_task(task_id)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    @mcp.tool()
    def add_comment(task_id: str, content: str) -> Dict[str, Any]:
        """Post a comment on a task as the current user."""
        return controller.add_comment(task_id, content)

    @mcp.tool()
    def edit_comment(comment_id: str, content: str) -> Dict[str, Any]:
        """Edit one of your own comments."""
        return controller.edit_comment(comment_id, content)

    @mcp.tool()
    def delete_comment(comment_id: str) -> Dict[str, Any]:
        """Delete one of your own comments."""
        return controller.remove_comment(comment_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @mcp.tool()
    def create_user(name: str, email: str, role: str = "Member", avatar: Optional[str] = None) -> Dict[str, Any]:
        """Add a user account (administrators only)."""
        return controller.create_user(name=name, email=email, role=role, avatar=avatar)

    @mcp.tool()
    def update_user(
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Change only the given user fields (administrators only)."""
        return controller.edit_user(user_id, **_given(name=name, email=email, role=role, avatar=avatar))

    @mcp.tool()
    def delete_user(user_id: str) -> Dict[str, Any]:
        """Delete another user account (administrators only)."""
        return controller.remove_user(user_id)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @mcp.resource(SNAPSHOT_URI)
    def resource_snapshot() -> str:
        """The whole board state as JSON."""
        return json.dumps(controller.store.snapshot.to_dict(), indent=2)

    return mcp


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    store = AppStore.from_seed(settings)
    server = build_server(BoardController(store))
    logger.info("Starting ProjectBoard MCP server on stdio")
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
