"""Fan-out of task events to project coordinators.

The task write has already committed when these functions run. Nothing in
here may raise into the caller: every failure is logged and swallowed, and
the actual deliveries, including the PC email lookup, go through the outbox.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_TASK_NAME, UNASSIGNED
from ..core.enums import NotificationAction
from ..teams.repository import PCRepository
from .diff import compute_changes
from .mailer import EmailSender, SendResult, render_pc_email
from .model import NewNotification
from .outbox import DispatchAttempt, Outbox
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class DispatchDecision(str, Enum):
    NO_PC = "NoPC"
    PC_ASSIGNED_NO_EMAIL = "PCAssignedNoEmail"
    PC_ASSIGNED_WITH_EMAIL = "PCAssignedWithEmail"


def decide(pc_name: Optional[str], pc_email: Optional[str]) -> DispatchDecision:
    if not (pc_name or "").strip():
        return DispatchDecision.NO_PC
    if not (pc_email or "").strip():
        return DispatchDecision.PC_ASSIGNED_NO_EMAIL
    return DispatchDecision.PC_ASSIGNED_WITH_EMAIL


@dataclass
class DispatchOutcome:
    decision: Optional[DispatchDecision]
    action: Optional[NotificationAction] = None
    changes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    attempts: List[DispatchAttempt] = field(default_factory=list)
    skipped: Optional[str] = None


def _id_of(record: Any) -> Any:
    return record.get("id") if isinstance(record, Mapping) else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = getattr(value, "value", value)
    s = str(value).strip()
    return s or None


class NotificationDispatcher:
    def __init__(
        self,
        notifications: NotificationRepository,
        pcs: PCRepository,
        email_sender: EmailSender,
        outbox: Outbox,
        *,
        tracker_url: str = "",
        cc: Sequence[str] = (),
    ):
        self._notifications = notifications
        self._pcs = pcs
        self._email = email_sender
        self._outbox = outbox
        self._tracker_url = tracker_url
        self._cc = tuple(cc)

    def _lookup_email(self, pc_name: str) -> Optional[str]:
        try:
            pc = self._pcs.find_by_name(pc_name)
        except Exception:
            logger.exception("PC email lookup failed for %r", pc_name)
            return None
        return pc.email if pc else None

    def task_created(self, task: Mapping[str, Any]) -> Optional[DispatchOutcome]:
        """`task` is the stored record as returned by Task.to_dict()."""
        try:
            return self._dispatch(task, {}, NotificationAction.CREATED, {})
        except Exception:
            logger.exception("Notification dispatch failed for new task %s", _id_of(task))
            return None

    def task_updated(self, previous: Mapping[str, Any], updates: Mapping[str, Any]) -> Optional[DispatchOutcome]:
        """`previous` is the record before the write, `updates` the payload as the client sent it."""
        try:
            target_pc = _text(updates.get("pc")) or _text(previous.get("pc"))
            if not target_pc:
                logger.info("Task %s has no PC; no notification", previous.get("id"))
                return DispatchOutcome(decision=DispatchDecision.NO_PC)

            changes = compute_changes(previous, updates)
            if not changes:
                logger.info("Task %s saved without tracked changes; no notification", previous.get("id"))
                return DispatchOutcome(decision=None, skipped="no changes")

            # Clearing the PC is an update sent to the PC on record, not an assignment.
            reassigned = "pc" in changes and _text(updates.get("pc")) is not None
            action = NotificationAction.ASSIGNED if reassigned else NotificationAction.UPDATED
            return self._dispatch(previous, updates, action, changes)
        except Exception:
            logger.exception("Notification dispatch failed for task %s", _id_of(previous))
            return None

    def _dispatch(
        self,
        stored: Mapping[str, Any],
        updates: Mapping[str, Any],
        action: NotificationAction,
        changes: Dict[str, Dict[str, Any]],
    ) -> DispatchOutcome:
        def current(name: str) -> Optional[str]:
            return _text(updates.get(name)) or _text(stored.get(name))

        pc_name = current("pc")
        if not pc_name:
            logger.info("Task %s has no PC; no notification", stored.get("id"))
            return DispatchOutcome(decision=DispatchDecision.NO_PC, action=action)

        # Filled in by the email job once the PC's address has been looked up.
        outcome = DispatchOutcome(decision=None, action=action, changes=changes)

        project_name = current("project_name") or ""
        task_name = current("sub_phase") or DEFAULT_TASK_NAME
        task_id = stored.get("id")

        record = NewNotification(
            pc_name=pc_name,
            task_id=task_id,
            project_name=project_name,
            task_name=task_name,
            action=action,
            changes=changes or None,
        )
        outcome.attempts.append(
            self._outbox.submit("in_app", lambda: self._notifications.insert(record), pc=pc_name, task_id=task_id, action=action.value)
        )

        summary = dict(
            action=action,
            pc_name=pc_name,
            project_name=project_name,
            task_name=task_name,
            assignee=current("assigned_to") or UNASSIGNED,
            status=current("status") or "",
            priority=current("priority"),
            start_date=current("start_date"),
            end_date=current("end_date"),
            changes=changes,
            tracker_url=self._tracker_url,
        )
        outcome.attempts.append(
            self._outbox.submit(
                "email",
                lambda: self._email_pc(outcome, summary),
                pc=pc_name,
                task_id=task_id,
                action=action.value,
            )
        )
        return outcome

    def _email_pc(self, outcome: DispatchOutcome, summary: Dict[str, Any]) -> SendResult:
        pc_name = summary["pc_name"]
        pc_email = self._lookup_email(pc_name)
        outcome.decision = decide(pc_name, pc_email)
        if outcome.decision != DispatchDecision.PC_ASSIGNED_WITH_EMAIL:
            logger.warning("No email found for PC %r; in-app notification only", pc_name)
            return SendResult(False, "No email on file", skipped=True)

        email = render_pc_email(**summary)
        return self._email.send(to_email=pc_email, to_name=pc_name, subject=email.subject, html=email.html, cc=self._cc)
