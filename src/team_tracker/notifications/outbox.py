"""In-process outbox for best-effort side effects.

Jobs are submitted with a kind and some metadata; every submission is
recorded as a DispatchAttempt so callers (and tests) can see what was
attempted and how it ended. Job failures are logged, never raised.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol

from ..core.constants import OUTBOX_HISTORY

logger = logging.getLogger(__name__)

PENDING = "pending"
SENT = "sent"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class DispatchAttempt:
    kind: str
    meta: Dict[str, Any]
    status: str = PENDING
    error: Optional[str] = None
    submitted_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "meta": dict(self.meta),
            "status": self.status,
            "error": self.error,
            "submitted_at": self.submitted_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


class Outbox(Protocol):
    def submit(self, kind: str, fn: Callable[[], Any], **meta: Any) -> DispatchAttempt:
        raise NotImplementedError

    def attempts(self) -> List[DispatchAttempt]:
        raise NotImplementedError


class _RecordingOutbox:
    def __init__(self, *, history: int = OUTBOX_HISTORY):
        self._attempts: Deque[DispatchAttempt] = deque(maxlen=history)
        self._lock = threading.Lock()

    def _record(self, kind: str, meta: Dict[str, Any]) -> DispatchAttempt:
        attempt = DispatchAttempt(kind=kind, meta=meta)
        with self._lock:
            self._attempts.append(attempt)
        return attempt

    def _run(self, attempt: DispatchAttempt, fn: Callable[[], Any]) -> None:
        try:
            result = fn()
        except Exception as e:
            attempt.status = FAILED
            attempt.error = str(e) or e.__class__.__name__
            logger.exception("Dispatch %s failed %s", attempt.kind, attempt.meta)
        else:
            # A job may report a soft failure by returning an object with success=False,
            # or that it had nothing to do with skipped=True.
            if getattr(result, "skipped", False) is True:
                attempt.status = SKIPPED
                attempt.error = getattr(result, "error", None)
                logger.info("Dispatch %s skipped %s: %s", attempt.kind, attempt.meta, attempt.error)
            elif getattr(result, "success", True) is False:
                attempt.status = FAILED
                attempt.error = getattr(result, "error", None) or "unknown error"
                logger.warning("Dispatch %s failed %s: %s", attempt.kind, attempt.meta, attempt.error)
            else:
                attempt.status = SENT
                logger.info("Dispatch %s sent %s", attempt.kind, attempt.meta)
        finally:
            attempt.finished_at = datetime.now()

    def attempts(self) -> List[DispatchAttempt]:
        with self._lock:
            return list(self._attempts)


class InlineOutbox(_RecordingOutbox):
    """Runs each job immediately on the calling thread."""

    def submit(self, kind: str, fn: Callable[[], Any], **meta: Any) -> DispatchAttempt:
        attempt = self._record(kind, meta)
        self._run(attempt, fn)
        return attempt


class ThreadPoolOutbox(_RecordingOutbox):
    """Runs jobs on a small worker pool so the HTTP response does not wait for them."""

    def __init__(self, *, workers: int = 2, history: int = OUTBOX_HISTORY):
        super().__init__(history=history)
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(workers)), thread_name_prefix="outbox")
        self._futures: List[Future] = []

    def submit(self, kind: str, fn: Callable[[], Any], **meta: Any) -> DispatchAttempt:
        attempt = self._record(kind, meta)
        try:
            future = self._executor.submit(self._run, attempt, fn)
        except RuntimeError as e:
            # Executor already shut down.
            attempt.status = FAILED
            attempt.error = str(e)
            attempt.finished_at = datetime.now()
            logger.error("Dispatch %s rejected %s: %s", kind, meta, e)
            return attempt
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)
        return attempt

    def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every job submitted so far."""
        with self._lock:
            pending = list(self._futures)
        for f in pending:
            f.result(timeout=timeout)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def build_outbox(workers: int) -> Outbox:
    if int(workers or 0) <= 0:
        return InlineOutbox()
    return ThreadPoolOutbox(workers=int(workers))
