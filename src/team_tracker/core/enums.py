from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role stored on user_profiles."""

    SUPER_ADMIN = "super_admin"
    MANAGER = "manager"
    MEMBER = "member"


class AccessMode(str, Enum):
    """How the current request was authenticated."""

    ANONYMOUS = "anonymous"
    USER = "user"
    MANAGER = "manager"
    PC = "pc"


class TaskStatus(str, Enum):
    YET_TO_START = "Yet to Start"
    BEING_DEVELOPED = "Being Developed"
    READY_FOR_QA = "Ready for QA"
    ASSIGNED_TO_QA = "Assigned to QA"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    FORECAST = "Forecast"
    REJECTED = "Rejected"


# Derived at read time, never stored.
OVERDUE = "Overdue"


class NotificationAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    ASSIGNED = "assigned"


class Capability(str, Enum):
    READ_TASKS = "read_tasks"
    WRITE_TASKS = "write_tasks"
    DELETE_TASKS = "delete_tasks"
    ANY_TEAM = "any_team"
    READ_NOTIFICATIONS = "read_notifications"
    READ_ALL_NOTIFICATIONS = "read_all_notifications"
    MANAGE_TEAM = "manage_team"
    VIEW_ACTIVITY = "view_activity"
