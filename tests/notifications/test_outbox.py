from __future__ import annotations

import threading

from team_tracker.notifications.mailer import SendResult
from team_tracker.notifications.outbox import FAILED, SENT, SKIPPED, InlineOutbox, ThreadPoolOutbox, build_outbox


def test_inline_outbox_runs_immediately_and_records():
    box = InlineOutbox()
    calls = []

    attempt = box.submit("email", lambda: calls.append(1), to="a@example.com")

    assert calls == [1]
    assert attempt.status == SENT
    assert attempt.meta == {"to": "a@example.com"}
    assert box.attempts() == [attempt]


def test_failures_are_recorded_not_raised():
    box = InlineOutbox()

    def boom():
        raise RuntimeError("network down")

    attempt = box.submit("in_app", boom)
    assert attempt.status == FAILED
    assert attempt.error == "network down"
    assert attempt.finished_at is not None


def test_soft_failure_result_marks_attempt_failed():
    box = InlineOutbox()
    attempt = box.submit("email", lambda: SendResult(False, "API Key missing"))
    assert attempt.status == FAILED
    assert attempt.error == "API Key missing"


def test_skipped_result_is_not_a_failure():
    box = InlineOutbox()
    attempt = box.submit("email", lambda: SendResult(False, "No email on file", skipped=True))
    assert attempt.status == SKIPPED
    assert attempt.error == "No email on file"


def test_history_is_bounded():
    box = InlineOutbox(history=3)
    for i in range(5):
        box.submit("in_app", lambda: None, n=i)
    assert [a.meta["n"] for a in box.attempts()] == [2, 3, 4]


def test_thread_pool_outbox_runs_off_the_calling_thread():
    box = ThreadPoolOutbox(workers=1)
    seen = []
    try:
        attempt = box.submit("email", lambda: seen.append(threading.current_thread().name))
        box.drain(timeout=5)
    finally:
        box.shutdown()

    assert attempt.status == SENT
    assert seen and seen[0] != threading.current_thread().name


def test_thread_pool_outbox_after_shutdown_records_failure():
    box = ThreadPoolOutbox(workers=1)
    box.shutdown()
    attempt = box.submit("email", lambda: None)
    assert attempt.status == FAILED


def test_build_outbox_picks_inline_for_zero_workers():
    assert isinstance(build_outbox(0), InlineOutbox)
    pool = build_outbox(2)
    try:
        assert isinstance(pool, ThreadPoolOutbox)
    finally:
        pool.shutdown()
