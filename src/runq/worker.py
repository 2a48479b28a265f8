"""
worker.py — Unit-of-Work Wrapper

Wraps one caller-supplied task and tracks its lifecycle:

    idle ──start()──▶ running ──task returns──▶ completed
                              └─task raises───▶ failed

Both terminal states are absorbing. ``future`` is the settle handle the
caller awaits; it is resolved or rejected exactly once with the task's own
result or exception. Timestamps use time.monotonic() and exist for
diagnostics only.
"""

from __future__ import annotations

import asyncio
import time
from typing import Generic, Optional

from runq.exceptions import WorkerStateError
from runq.types import T, Task, WorkerStatus


class Worker(Generic[T]):
    """
    Lifecycle tracker for a single task.

    Must be created while an event loop is running: the settle handle is
    bound to that loop.
    """

    def __init__(self, task: Task[T]) -> None:
        self._task = task
        self.status = WorkerStatus.IDLE
        self.created_at: float = time.monotonic()
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self._loop = asyncio.get_running_loop()
        self.future: asyncio.Future[T] = self._loop.create_future()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> asyncio.Future:
        """
        Invoke the task once and return a future for its raw outcome.

        The outcome is also forwarded to ``self.future``. A task that is not
        callable, raises synchronously, or returns something that is not
        awaitable fails immediately with that error.
        """
        if self.status is not WorkerStatus.IDLE:
            raise WorkerStateError(self.status.value)

        self.status = WorkerStatus.RUNNING
        self.started_at = time.monotonic()

        try:
            outcome = asyncio.ensure_future(self._task())
        except Exception as exc:
            outcome = self._loop.create_future()
            outcome.set_exception(exc)
        except BaseException:
            # KeyboardInterrupt, SystemExit: leave no worker stuck in RUNNING.
            self.finished_at = time.monotonic()
            self.status = WorkerStatus.FAILED
            self.future.cancel()
            raise

        outcome.add_done_callback(self._settle)
        return outcome

    def _settle(self, outcome: asyncio.Future) -> None:
        if self.status.is_terminal:
            return
        self.finished_at = time.monotonic()

        if outcome.cancelled():
            self.status = WorkerStatus.FAILED
            self.future.cancel()
            return

        exc = outcome.exception()
        if exc is not None:
            self.status = WorkerStatus.FAILED
            if not self.future.done():
                self.future.set_exception(exc)
            return

        self.status = WorkerStatus.COMPLETED
        if not self.future.done():
            self.future.set_result(outcome.result())

    # ── Timing ────────────────────────────────────────────────────────────────

    @property
    def idle_time_s(self) -> float:
        end = self.started_at if self.started_at is not None else time.monotonic()
        return end - self.created_at

    @property
    def run_time_s(self) -> Optional[float]:
        if self.started_at is None:
            return None
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    # ── Diagnostics ───────────────────────────────────────────────────────────

    def describe(self) -> str:
        """One-line status with idle time and, once started, run time."""
        result = f"Task {self.status.value}; idle time: {_ms(self.idle_time_s)}ms;"
        run_time = self.run_time_s
        if run_time is not None:
            result += f" run time: {_ms(run_time)}ms;"
        return result

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<Worker status={self.status.value}>"


def _ms(seconds: float) -> int:
    return int(round(seconds * 1000))
