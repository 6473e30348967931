"""Error taxonomy for ProjectBoard.

The store never raises for a missing id: update and delete report a miss
through their return value. These exceptions cover malformed input and the
checks the controller applies on behalf of the screens.
"""

from __future__ import annotations

from typing import Optional


class ProjectBoardError(Exception):
    """Base class for every error raised by ProjectBoard."""

    suggestion: str = ""

    def __init__(self, message: str, *, suggestion: Optional[str] = None):
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion


class ValidationError(ProjectBoardError):
    """Input data is malformed. Raised before any state change."""

    suggestion = "Check the field names and values you provided"


class NotFoundError(ProjectBoardError):
    """An update or delete target does not exist."""

    suggestion = "List the collection again; the item may have been deleted"

    def __init__(self, kind: str, entity_id: Optional[str]):
        super().__init__(f"{kind} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id


class AuthenticationFailed(ProjectBoardError):
    """No user is logged in, or the login email is unknown."""

    suggestion = "Log in with the email of a known user"


class PermissionDenied(ProjectBoardError):
    """The current user lacks the capability for an action."""

    suggestion = "Ask an administrator to perform this action"
