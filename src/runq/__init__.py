"""
runq — bounded-concurrency asyncio task queue

Public API:
    RunQ             — the queue (enqueue, enqueue_batch, pause, resume)
    RunQOptions      — construction options (concurrency, default 5)
    QueueingBehavior — FIFO / LIFO insertion discipline
    Worker           — per-task lifecycle wrapper
    WorkerStatus     — idle / running / completed / failed
"""

from runq.exceptions import ConfigError, RunQError, WorkerError, WorkerStateError
from runq.queue import RunQ
from runq.types import QueueingBehavior, QueueStats, RunQOptions, Task, WorkerStatus
from runq.worker import Worker

__version__ = "1.0.0"

__all__ = [
    "RunQ",
    "RunQOptions",
    "QueueingBehavior",
    "QueueStats",
    "Task",
    "Worker",
    "WorkerStatus",
    "RunQError",
    "WorkerError",
    "WorkerStateError",
    "ConfigError",
]
