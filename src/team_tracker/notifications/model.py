from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import NotificationAction
from ..database.mysql_base import load_json


@dataclass(frozen=True)
class Notification:
    """In-app notice for a project coordinator about one task event."""

    notification_id: int
    pc_name: str
    task_id: Optional[int]
    project_name: str
    task_name: Optional[str]
    action: NotificationAction
    changes: Optional[Dict[str, Dict[str, Any]]] = None
    is_read: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.notification_id,
            "pc_name": self.pc_name,
            "task_id": self.task_id,
            "project_name": self.project_name,
            "task_name": self.task_name,
            "action": self.action.value,
            "changes": self.changes,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class NewNotification:
    pc_name: str
    task_id: Optional[int]
    project_name: str
    task_name: Optional[str]
    action: NotificationAction
    changes: Optional[Dict[str, Dict[str, Any]]] = None


@dataclass(frozen=True)
class NotificationQuery:
    pc_name: str
    is_read: Optional[bool] = None
    action: Optional[NotificationAction] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class NotificationPage:
    items: Sequence[Notification]
    total: int
    unread_count: int
    page: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "notifications": [n.to_dict() for n in self.items],
            "total": self.total,
            "unreadCount": self.unread_count,
            "page": self.page,
            "pageSize": self.page_size,
        }


def notification_from_row(row: Dict[str, Any]) -> Notification:
    return Notification(
        notification_id=int(row["id"]),
        pc_name=row["pc_name"],
        task_id=row.get("task_id"),
        project_name=row["project_name"],
        task_name=row.get("task_name"),
        action=NotificationAction(row["action"]),
        changes=load_json(row.get("changes")),
        is_read=bool(row.get("is_read")),
        created_at=row.get("created_at"),
    )
