from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, like_pattern
from .model import Task, WRITABLE_FIELDS, task_from_row
from .repository import TaskQuery, TaskRepository

_SEARCH_COLUMNS = ("project_name", "assigned_to", "sub_phase", "status", "priority", "comments")


def _db_value(name: str, value: Any) -> Any:
    if isinstance(value, TaskStatus):
        return value.value
    if name == "additional_assignees":
        return dump_json(list(value or ()))
    if isinstance(value, bool):
        return int(value)
    return value


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM tasks WHERE id=%s", (int(task_id),))
            row = fetchone(cur)
            return task_from_row(row) if row else None

    @staticmethod
    def _where(query: TaskQuery) -> tuple[str, List[Any]]:
        clauses: List[str] = []
        params: List[Any] = []

        if query.team_id is not None:
            clauses.append("team_id=%s")
            params.append(int(query.team_id))
        if query.search:
            pattern = like_pattern(query.search.strip())
            clauses.append("(" + " OR ".join(f"{c} LIKE %s" for c in _SEARCH_COLUMNS) + ")")
            params.extend([pattern] * len(_SEARCH_COLUMNS))
        if query.pc:
            clauses.append("pc=%s")
            params.append(query.pc)
        if query.status:
            clauses.append("status=%s")
            params.append(query.status)
        if query.statuses:
            clauses.append("status IN (" + ",".join(["%s"] * len(query.statuses)) + ")")
            params.extend(query.statuses)
        if query.view == "forecast":
            clauses.append("status=%s")
            params.append(TaskStatus.FORECAST.value)
        elif query.view == "active":
            clauses.append("status<>%s")
            params.append(TaskStatus.FORECAST.value)

        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        return where, params

    def search(self, query: TaskQuery) -> tuple[Sequence[Task], int]:
        where, params = self._where(query)
        offset = (query.page - 1) * query.page_size

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM tasks{where}", tuple(params))
            total = int((fetchone(cur) or {}).get("n") or 0)

            cur.execute(
                f"SELECT * FROM tasks{where} ORDER BY start_date DESC, id DESC LIMIT %s OFFSET %s",
                tuple(params) + (int(query.page_size), int(offset)),
            )
            return [task_from_row(r) for r in fetchall(cur)], total

    def list_all(self, *, team_id: Optional[int] = None) -> Sequence[Task]:
        sql = "SELECT * FROM tasks"
        params: tuple = ()
        if team_id is not None:
            sql += " WHERE team_id=%s"
            params = (int(team_id),)
        sql += " ORDER BY start_date DESC, id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [task_from_row(r) for r in fetchall(cur)]

    def insert(self, values: Dict[str, Any]) -> Task:
        cols = [c for c in WRITABLE_FIELDS if c in values]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO tasks ({', '.join(cols)}) VALUES ({', '.join(['%s'] * len(cols))})",
                tuple(_db_value(c, values[c]) for c in cols),
            )
            new_id = int(cur.lastrowid)
            cur.execute("SELECT * FROM tasks WHERE id=%s", (new_id,))
            return task_from_row(fetchone(cur))

    def update(self, task_id: int, values: Dict[str, Any]) -> bool:
        cols = [c for c in WRITABLE_FIELDS if c in values]
        if not cols:
            return True
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE tasks SET {', '.join(f'{c}=%s' for c in cols)} WHERE id=%s",
                tuple(_db_value(c, values[c]) for c in cols) + (int(task_id),),
            )
            # MySQL reports 0 affected rows when nothing changed; existence is checked by the service.
            return cur.rowcount >= 0

    def delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE id=%s", (int(task_id),))
            return cur.rowcount > 0
