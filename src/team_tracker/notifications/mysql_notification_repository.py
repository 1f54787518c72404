from __future__ import annotations

from datetime import datetime, time
from typing import Any, List, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, like_pattern
from .model import NewNotification, Notification, NotificationQuery, notification_from_row
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, item: NewNotification) -> Notification:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pc_notifications (pc_name, task_id, project_name, task_name, action, changes, is_read)
                VALUES (%s, %s, %s, %s, %s, %s, 0)
                """,
                (
                    item.pc_name,
                    item.task_id,
                    item.project_name,
                    item.task_name,
                    item.action.value,
                    dump_json(item.changes) if item.changes else None,
                ),
            )
            cur.execute("SELECT * FROM pc_notifications WHERE id=%s", (int(cur.lastrowid),))
            return notification_from_row(fetchone(cur))

    def search(self, query: NotificationQuery) -> tuple[Sequence[Notification], int]:
        clauses: List[str] = ["pc_name=%s"]
        params: List[Any] = [query.pc_name]

        if query.is_read is not None:
            clauses.append("is_read=%s")
            params.append(1 if query.is_read else 0)
        if query.action is not None:
            clauses.append("action=%s")
            params.append(query.action.value)
        if query.date_from is not None:
            clauses.append("created_at>=%s")
            params.append(datetime.combine(query.date_from, time.min))
        if query.date_to is not None:
            clauses.append("created_at<=%s")
            params.append(datetime.combine(query.date_to, time(23, 59, 59)))
        if query.search:
            pattern = like_pattern(query.search.strip())
            clauses.append("(project_name LIKE %s OR task_name LIKE %s)")
            params.extend([pattern, pattern])

        where = " WHERE " + " AND ".join(clauses)
        offset = (query.page - 1) * query.page_size

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM pc_notifications{where}", tuple(params))
            total = int((fetchone(cur) or {}).get("n") or 0)
            cur.execute(
                f"SELECT * FROM pc_notifications{where} ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s",
                tuple(params) + (int(query.page_size), int(offset)),
            )
            return [notification_from_row(r) for r in fetchall(cur)], total

    def count(self, *, pc_name: Optional[str] = None, unread_only: bool = False) -> int:
        sql = "SELECT COUNT(*) AS n FROM pc_notifications WHERE 1=1"
        params: List[Any] = []
        if pc_name is not None:
            sql += " AND pc_name=%s"
            params.append(pc_name)
        if unread_only:
            sql += " AND is_read=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int((fetchone(cur) or {}).get("n") or 0)

    def mark_read(self, *, pc_name: str, notification_id: Optional[int] = None) -> int:
        sql = "UPDATE pc_notifications SET is_read=1 WHERE pc_name=%s"
        params: List[Any] = [pc_name]
        if notification_id is not None:
            sql += " AND id=%s"
            params.append(int(notification_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int(cur.rowcount or 0)

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM pc_notifications WHERE id=%s", (int(notification_id),))
            row = fetchone(cur)
            return notification_from_row(row) if row else None

    def delete(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pc_notifications WHERE id=%s", (int(notification_id),))
            return cur.rowcount > 0
