from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewNotification, Notification, NotificationQuery


class NotificationRepository(Protocol):
    def insert(self, item: NewNotification) -> Notification:
        raise NotImplementedError

    def search(self, query: NotificationQuery) -> tuple[Sequence[Notification], int]:
        """Newest first. Returns (page, total matching)."""

        raise NotImplementedError

    def count(self, *, pc_name: Optional[str] = None, unread_only: bool = False) -> int:
        raise NotImplementedError

    def mark_read(self, *, pc_name: str, notification_id: Optional[int] = None) -> int:
        """Mark one notification (or all of the PC's) read. Returns rows touched."""

        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def delete(self, notification_id: int) -> bool:
        raise NotImplementedError
