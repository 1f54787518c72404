from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..auth.policy import Capabilities
from ..common.datetime_utils import parse_optional_date
from ..common.validators import clamp_page
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import NotificationAction
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewNotification, NotificationPage, NotificationQuery
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def _action_filter(value: Optional[str]) -> Optional[NotificationAction]:
    v = (value or "").strip().lower()
    if not v or v == "all":
        return None
    try:
        return NotificationAction(v)
    except ValueError:
        raise ValidationError(f"Invalid action: {value}")


class NotificationService:
    """PC inbox: listing, unread counts, mark-read."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def list_for_pc(
        self,
        caps: Capabilities,
        *,
        pc_name: Optional[str],
        is_read: Optional[bool] = None,
        action: Optional[str] = None,
        date_from: Any = None,
        date_to: Any = None,
        search: Optional[str] = None,
        page: Any = None,
        page_size: Any = None,
    ) -> NotificationPage:
        scope = caps.notification_scope(pc_name)
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        if start and end and start > end:
            raise ValidationError("'from' must be on or before 'to'")
        page_no, size = clamp_page(page, page_size, default_size=DEFAULT_PAGE_SIZE, max_size=MAX_PAGE_SIZE)

        query = NotificationQuery(
            pc_name=scope,
            is_read=is_read,
            action=_action_filter(action),
            date_from=start,
            date_to=end,
            search=(search or "").strip() or None,
            page=page_no,
            page_size=size,
        )
        items, total = self._notifications.search(query)
        unread = self._notifications.count(pc_name=scope, unread_only=True)
        return NotificationPage(items=items, total=total, unread_count=unread, page=page_no, page_size=size)

    def mark_read(self, caps: Capabilities, *, pc_name: Optional[str], notification_id: Any = None) -> int:
        scope = caps.notification_scope(pc_name)
        nid: Optional[int] = None
        if notification_id not in (None, ""):
            try:
                nid = int(notification_id)
            except (TypeError, ValueError):
                raise ValidationError("Invalid notification id")
            existing = self._notifications.get(nid)
            if existing is None or existing.pc_name.lower() != scope.lower():
                raise NotFoundError("Notification not found")
        return self._notifications.mark_read(pc_name=scope, notification_id=nid)

    def diagnose(self, pc_name: Optional[str]) -> Dict[str, Any]:
        """Self-check of the notifications store: reachability, counts, write/read-back."""
        pc = (pc_name or "").strip() or "TestPC"
        results: Dict[str, Any] = {"pc_name": pc}

        try:
            results["total_rows"] = self._notifications.count()
            results["table_exists"] = True
            results["table_error"] = None
        except Exception as e:
            logger.exception("Notification table check failed")
            results["table_exists"] = False
            results["table_error"] = str(e)

        try:
            results["pc_row_count"] = self._notifications.count(pc_name=pc)
            results["pc_count_error"] = None
        except Exception as e:
            logger.exception("Notification count failed for %r", pc)
            results["pc_row_count"] = None
            results["pc_count_error"] = str(e)

        try:
            probe = self._notifications.insert(
                NewNotification(
                    pc_name=pc,
                    task_id=None,
                    project_name="Debug Test Project",
                    task_name="Test Task",
                    action=NotificationAction.UPDATED,
                )
            )
            results["insert_success"] = True
            results["insert_error"] = None
            results["inserted_id"] = probe.notification_id
            results["read_back"] = self._notifications.get(probe.notification_id) is not None
            if self._notifications.delete(probe.notification_id):
                results["cleanup"] = "test row deleted"
        except Exception as e:
            logger.exception("Notification insert probe failed for %r", pc)
            results["insert_success"] = False
            results["insert_error"] = str(e)

        return results
