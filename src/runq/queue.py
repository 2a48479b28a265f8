"""
queue.py — RunQ bounded-concurrency task queue

Accepts async tasks one at a time or in batches and runs at most
``concurrency`` of them at once.

Design
------
* Pure asyncio, single event loop. enqueue/enqueue_batch/pause/resume are
  plain synchronous methods: queue mutation and the dispatch pass complete
  before they return, so no locks are needed.
* Pending work is a deque of Worker objects. FIFO appends to the tail, LIFO
  prepends to the head; dispatch always pops from the head.
* A worker leaves the deque at the instant it is started and is counted in
  running_count until its task settles. Settlement (success or failure)
  frees the slot and re-runs dispatch.
* Failures are never caught here. Each task's exception reaches its own
  handle; a batch handle fails with the first failure from that batch only.
* No cancellation or timeout: a task that never settles holds its slot.

Usage::

    queue = RunQ(concurrency=3)
    result = await queue.enqueue(fetch_page)
    results = await queue.enqueue_batch([job_a, job_b], "LIFO")

    queue.pause()     # running tasks finish; nothing new starts
    queue.resume()
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Generic, Iterable, Mapping, Optional, Union

from runq.observability.logger import DiagnosticLog, default_diagnostic_log, null_log, portable_log
from runq.types import QueueStats, QueueingBehavior, RunQOptions, T, Task, WorkerStatus
from runq.worker import Worker

OrderArg = Union[QueueingBehavior, str]


class RunQ(Generic[T]):
    """
    Task queue with a fixed concurrency ceiling and pause/resume.

    Introspection::

        queue.running_count   # tasks currently executing
        queue.pending_count   # tasks waiting for a slot
        queue.is_paused
        queue.stats           # QueueStats counters
    """

    def __init__(
        self,
        options: Optional[Union[RunQOptions, Mapping[str, Any]]] = None,
        *,
        log: Optional[DiagnosticLog] = None,
        **overrides: Any,
    ) -> None:
        if isinstance(options, RunQOptions):
            merged = options.model_dump()
        else:
            merged = dict(options or {})
        merged.update(overrides)
        self.options = RunQOptions(**merged)

        self._pending: deque[Worker[T]] = deque()
        self._running_count = 0
        self._dispatch_enabled = True
        self._log: DiagnosticLog = log if log is not None else default_diagnostic_log()
        self.stats = QueueStats()

        self._log("debug", "runq.created", concurrency=self.options.concurrency)

    # ── Factory ───────────────────────────────────────────────────────────────

    @classmethod
    def from_settings(cls, settings, log: Optional[DiagnosticLog] = None) -> "RunQ":
        if log is None:
            log = portable_log("runq") if settings.debug else null_log
        return cls(RunQOptions(concurrency=settings.concurrency), log=log)

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def concurrency(self) -> int:
        return self.options.concurrency

    @property
    def running_count(self) -> int:
        return self._running_count

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_paused(self) -> bool:
        return not self._dispatch_enabled

    # ── Public API ────────────────────────────────────────────────────────────

    def enqueue(self, task: Task[T], queueing_behavior: OrderArg = QueueingBehavior.FIFO) -> asyncio.Future:
        """
        Enqueue a single task.

        Returns a future that settles with the task's own result or exception.
        """
        (worker,) = self._insert([task], queueing_behavior)
        self._flush()
        return worker.future

    def enqueue_batch(
        self,
        tasks: Iterable[Task[T]],
        queueing_behavior: OrderArg = QueueingBehavior.FIFO,
    ) -> asyncio.Future:
        """
        Enqueue several tasks at once.

        With LIFO each task is prepended in input order, so the last task of
        the batch ends up at the head of the queue.

        Returns a future resolving to the results in input order, or failing
        with the first exception raised by a task of this batch. Other
        batches never affect it.
        """
        workers = self._insert(list(tasks), queueing_behavior)
        self._flush()
        return asyncio.gather(*(w.future for w in workers))

    def pause(self) -> None:
        """Stop starting new tasks. Tasks already running are unaffected."""
        self._dispatch_enabled = False
        self._log("debug", "runq.paused", running=self._running_count, pending=len(self._pending))

    def resume(self) -> None:
        """Allow new tasks to start again and dispatch immediately."""
        self._dispatch_enabled = True
        self._log("debug", "runq.resumed", pending=len(self._pending))
        self._flush()

    # ── Queue mutation ────────────────────────────────────────────────────────

    def _insert(self, tasks: list[Task[T]], queueing_behavior: OrderArg) -> list[Worker[T]]:
        behavior = QueueingBehavior(queueing_behavior)
        workers = [Worker(task) for task in tasks]

        for worker in workers:
            if behavior is QueueingBehavior.FIFO:
                self._pending.append(worker)
            else:
                self._pending.appendleft(worker)

        self.stats.enqueued += len(workers)
        self._log(
            "debug",
            "runq.enqueued",
            count=len(workers),
            behavior=behavior.value,
            queue_length=len(self._pending),
        )
        return workers

    # ── Dispatch ──────────────────────────────────────────────────────────────

    def _flush(self) -> None:
        """Start pending workers while a slot is free and dispatch is enabled."""
        while (
            self._dispatch_enabled
            and self._pending
            and self._running_count < self.options.concurrency
        ):
            self._run_worker(self._pending.popleft())

    def _run_worker(self, worker: Worker[T]) -> None:
        # Slot is counted only once start() returns; the task body runs on a
        # later loop iteration.
        outcome = worker.start()
        self._running_count += 1
        self.stats.started += 1
        self._log("debug", "runq.task_starting", running=self._running_count)

        outcome.add_done_callback(lambda _: self._complete_worker(worker))

    def _complete_worker(self, worker: Worker[T]) -> None:
        self._running_count -= 1
        if worker.status is WorkerStatus.FAILED:
            self.stats.failed += 1
        else:
            self.stats.completed += 1
        self._log("debug", "runq.task_settled", worker=worker.describe())

        self._flush()

        if not self._pending:
            self._log("debug", "runq.drained", running=self._running_count)
