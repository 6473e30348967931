"""Demo dataset loaded when the board starts.

Four users (two admins), three projects, five tasks and four comments.
The first admin is the account logged in automatically unless the
configuration says otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .models import Comment, Project, Task, User

SEED_ADMIN_EMAIL = "alice@company.com"

_USERS = [
    {"id": "1", "name": "Alice Martin", "email": "alice@company.com", "role": "Admin"},
    {"id": "2", "name": "Bob Dubois", "email": "bob@company.com", "role": "Member"},
    {"id": "3", "name": "Claire Laurent", "email": "claire@company.com", "role": "Member"},
    {"id": "4", "name": "David Rodriguez", "email": "david@company.com", "role": "Admin"},
]

_PROJECTS = [
    {
        "id": "1",
        "name": "E-commerce Website",
        "description": "Build a modern e-commerce platform with React and Node.js",
        "startDate": "2024-01-15",
        "endDate": "2024-06-30",
        "status": "Active",
        "teamMembers": ["1", "2", "3"],
    },
    {
        "id": "2",
        "name": "Mobile App",
        "description": "Cross-platform mobile application for order management",
        "startDate": "2024-02-01",
        "endDate": "2024-08-15",
        "status": "Active",
        "teamMembers": ["2", "3", "4"],
    },
    {
        "id": "3",
        "name": "Infrastructure Overhaul",
        "description": "Cloud migration and infrastructure modernization",
        "startDate": "2023-11-01",
        "endDate": "2024-03-31",
        "status": "Completed",
        "teamMembers": ["1", "4"],
    },
]

_TASKS = [
    {
        "id": "1",
        "title": "User interface design",
        "description": "Create mockups and prototypes for the main interface",
        "status": "Done",
        "dueDate": "2024-02-15",
        "projectId": "1",
        "assignedTo": "3",
        "priority": "High",
    },
    {
        "id": "2",
        "title": "Database setup",
        "description": "Set up the data structure and relations",
        "status": "In Progress",
        "dueDate": "2024-02-20",
        "projectId": "1",
        "assignedTo": "2",
        "priority": "High",
    },
    {
        "id": "3",
        "title": "Payment system integration",
        "description": "Implement Stripe for transactions",
        "status": "To Do",
        "dueDate": "2024-03-10",
        "projectId": "1",
        "assignedTo": "1",
        "priority": "Medium",
    },
    {
        "id": "4",
        "title": "Interface tests",
        "description": "Unit and integration tests for the mobile application",
        "status": "In Progress",
        "dueDate": "2024-02-25",
        "projectId": "2",
        "assignedTo": "4",
        "priority": "Medium",
    },
    {
        "id": "5",
        "title": "Production deployment",
        "description": "Server configuration and deployment",
        "status": "Done",
        "dueDate": "2024-03-25",
        "projectId": "3",
        "assignedTo": "1",
        "priority": "High",
    },
]

_COMMENTS = [
    {
        "id": "1",
        "content": "First version of the mockups is done. They are on Figma.",
        "taskId": "1",
        "userId": "3",
        "createdAt": "2024-02-10T10:30:00Z",
    },
    {
        "id": "2",
        "content": "Great start! I have a few suggestions to improve the UX.",
        "taskId": "1",
        "userId": "1",
        "createdAt": "2024-02-11T14:15:00Z",
    },
    {
        "id": "3",
        "content": "The database is configured. Working on the API now.",
        "taskId": "2",
        "userId": "2",
        "createdAt": "2024-02-18T09:45:00Z",
    },
    {
        "id": "4",
        "content": "Need help with the iOS regression tests.",
        "taskId": "4",
        "userId": "4",
        "createdAt": "2024-02-22T16:20:00Z",
    },
]


@dataclass(frozen=True, slots=True)
class SeedData:
    users: Tuple[User, ...] = ()
    projects: Tuple[Project, ...] = ()
    tasks: Tuple[Task, ...] = ()
    comments: Tuple[Comment, ...] = ()


def demo_dataset() -> SeedData:
    """Build fresh records for the demo board."""
    return SeedData(
        users=tuple(User.from_dict(item) for item in _USERS),
        projects=tuple(Project.from_dict(item) for item in _PROJECTS),
        tasks=tuple(Task.from_dict(item) for item in _TASKS),
        comments=tuple(Comment.from_dict(item) for item in _COMMENTS),
    )
