from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_TASK_PAGE_SIZE
from .model import Task


@dataclass(frozen=True)
class TaskQuery:
    team_id: Optional[int] = None
    search: Optional[str] = None
    pc: Optional[str] = None
    status: Optional[str] = None
    statuses: tuple[str, ...] = ()
    view: Optional[str] = None  # "active" | "forecast" | None
    page: int = 1
    page_size: int = DEFAULT_TASK_PAGE_SIZE


class TaskRepository(Protocol):
    def get(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def search(self, query: TaskQuery) -> tuple[Sequence[Task], int]:
        """Return (page of tasks ordered by start_date desc, total matching)."""

        raise NotImplementedError

    def list_all(self, *, team_id: Optional[int] = None) -> Sequence[Task]:
        raise NotImplementedError

    def insert(self, values: Dict[str, Any]) -> Task:
        raise NotImplementedError

    def update(self, task_id: int, values: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:
        raise NotImplementedError
