"""
types.py — runq Data Contracts

Enums, the task alias and the options model shared by the queue and the
worker. Nothing here imports from queue.py or worker.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

T = TypeVar("T")

Task = Callable[[], Awaitable[T]]

DEFAULT_CONCURRENCY = 5


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────

class QueueingBehavior(str, Enum):
    """Insertion discipline for the pending queue."""
    FIFO = "FIFO"   # append to the tail
    LIFO = "LIFO"   # prepend to the head


class WorkerStatus(str, Enum):
    IDLE      = "idle"
    RUNNING   = "running"
    COMPLETED = "completed"
    FAILED    = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkerStatus.COMPLETED, WorkerStatus.FAILED)


# ─────────────────────────────────────────────────────────────────────────────
# Options
# ─────────────────────────────────────────────────────────────────────────────

class RunQOptions(BaseModel):
    """
    Construction options for RunQ.

    concurrency   Maximum number of tasks running at once (default 5).
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    concurrency: int = DEFAULT_CONCURRENCY

    @field_validator("concurrency")
    @classmethod
    def _positive_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("concurrency must be >= 1")
        return v


# ─────────────────────────────────────────────────────────────────────────────
# QueueStats
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class QueueStats:
    enqueued: int = 0
    started: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def settled(self) -> int:
        return self.completed + self.failed
