from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..auth.policy import Capabilities
from ..common.validators import clamp_page, optional_int
from ..core.constants import DEFAULT_TASK_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import Capability, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.dispatch import NotificationDispatcher
from .effort import apply_effort, stamp_completion
from .model import Task, TaskPage, coerce_payload, status_of
from .repository import TaskQuery, TaskRepository

logger = logging.getLogger(__name__)

_VIEWS = {"active", "forecast"}


class TaskService:
    """Task use cases. The write always commits before notifications are handed off."""

    def __init__(
        self,
        tasks: TaskRepository,
        dispatcher: NotificationDispatcher,
        *,
        clock: Callable[[], date] = date.today,
    ):
        self._tasks = tasks
        self._dispatcher = dispatcher
        self._clock = clock

    def _load(self, task_id: Any) -> Task:
        if task_id is None or task_id == "":
            raise ValidationError("Task ID is required")
        try:
            tid = int(task_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid task ID")
        task = self._tasks.get(tid)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def get_task(self, caps: Capabilities, task_id: Any) -> Task:
        caps.require(Capability.READ_TASKS)
        task = self._load(task_id)
        if not caps.can_read_task(task):
            raise AuthorizationError("You can only view tasks of your own team")
        return task

    def list_tasks(
        self,
        caps: Capabilities,
        *,
        team_id: Any = None,
        search: Optional[str] = None,
        pc: Optional[str] = None,
        status: Optional[str] = None,
        statuses: Iterable[str] = (),
        view: Optional[str] = None,
        page: Any = None,
        page_size: Any = None,
    ) -> TaskPage:
        scope = caps.team_scope(optional_int(team_id, "team_id"))

        view = (view or "").strip().lower() or None
        if view == "all":
            view = None
        if view is not None and view not in _VIEWS:
            raise ValidationError(f"Invalid view: {view}")

        page_no, size = clamp_page(page, page_size, default_size=DEFAULT_TASK_PAGE_SIZE, max_size=MAX_PAGE_SIZE)
        query = TaskQuery(
            team_id=scope,
            search=(search or "").strip() or None,
            pc=(pc or "").strip() or None,
            status=status_of(status).value if status else None,
            statuses=tuple(status_of(s).value for s in statuses if s),
            view=view,
            page=page_no,
            page_size=size,
        )
        items, total = self._tasks.search(query)
        return TaskPage(items=items, total=total, page=page_no, page_size=size)

    def all_tasks(self, caps: Capabilities, *, team_id: Any = None) -> Sequence[Task]:
        """Every task in scope, unpaginated (reports and exports)."""
        scope = caps.team_scope(optional_int(team_id, "team_id"))
        return self._tasks.list_all(team_id=scope)

    def _prepare_new(self, caps: Capabilities, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, Mapping):
            raise ValidationError("Each task must be a JSON object")

        raw = {k: v for k, v in payload.items() if k not in {"id", "team_id", "created_at"}}
        values = coerce_payload(raw)
        if not values.get("project_name"):
            raise ValidationError("project_name is required")
        values.setdefault("status", TaskStatus.YET_TO_START)
        values["team_id"] = caps.team_for_create(optional_int(payload.get("team_id"), "team_id"))

        values = apply_effort(values)
        return stamp_completion(values, today=self._clock())

    def create_task(self, caps: Capabilities, payload: Any) -> Task:
        return self.create_tasks(caps, [payload])[0]

    def create_tasks(self, caps: Capabilities, payloads: Any) -> List[Task]:
        """Insert one or more tasks (a split task arrives as a list). All are validated before any insert."""
        caps.require(Capability.WRITE_TASKS)
        if not isinstance(payloads, list) or not payloads:
            raise ValidationError("At least one task is required")

        prepared = [self._prepare_new(caps, p) for p in payloads]
        created: List[Task] = []
        for values in prepared:
            task = self._tasks.insert(values)
            logger.info("Task %s created in team %s", task.task_id, task.team_id)
            created.append(task)

        for task in created:
            self._dispatcher.task_created(task.to_dict())
        return created

    def update_task(self, caps: Capabilities, task_id: Any, updates: Mapping[str, Any]) -> Task:
        caps.require(Capability.WRITE_TASKS)
        task = self._load(task_id)
        if not caps.can_edit_task(task):
            raise AuthorizationError("Unauthorized to edit this task")

        raw = {k: v for k, v in updates.items() if k not in {"id", "created_at"}}
        if "team_id" in raw:
            new_team = optional_int(raw["team_id"], "team_id")
            if new_team != task.team_id and not caps.has(Capability.ANY_TEAM):
                raise AuthorizationError("You cannot move tasks to another team")

        values = coerce_payload(raw)
        if "team_id" in values:
            values["team_id"] = optional_int(raw["team_id"], "team_id")
        if "project_name" in values and not values["project_name"]:
            raise ValidationError("project_name cannot be empty")
        values = apply_effort(values, current=task)
        values = stamp_completion(values, today=self._clock(), current=task)

        self._tasks.update(task.task_id, values)
        logger.info("Task %s updated (%s)", task.task_id, ", ".join(sorted(values)) or "no fields")

        self._dispatcher.task_updated(task.to_dict(), raw)
        return self._tasks.get(task.task_id) or task

    def delete_task(self, caps: Capabilities, task_id: Any) -> None:
        caps.require(Capability.WRITE_TASKS)
        task = self._load(task_id)
        if not caps.can_delete_task(task):
            raise AuthorizationError("Unauthorized to delete this task")
        if not self._tasks.delete(task.task_id):
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted", task.task_id)
