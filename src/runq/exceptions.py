"""
exceptions.py — runq Unified Error Hierarchy

All runq-specific exceptions live here. Task failures are never wrapped:
a task's own exception reaches the caller unchanged.

Hierarchy:
    RunQError
    ├── WorkerError
    │   └── WorkerStateError
    └── ConfigError
"""

from __future__ import annotations


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────

class RunQError(Exception):
    """Base class for all runq exceptions."""


# ─────────────────────────────────────────────────────────────────────────────
# Worker layer
# ─────────────────────────────────────────────────────────────────────────────

class WorkerError(RunQError):
    """Base for unit-of-work wrapper errors."""


class WorkerStateError(WorkerError):
    """A worker was asked to make a lifecycle transition it cannot make."""

    def __init__(self, status: str, action: str = "start") -> None:
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} a worker in status '{status}'.")


# ─────────────────────────────────────────────────────────────────────────────
# Config layer
# ─────────────────────────────────────────────────────────────────────────────

class ConfigError(RunQError):
    """Raised when the settings file cannot be read or has the wrong shape."""


__all__ = [
    "RunQError",
    "WorkerError",
    "WorkerStateError",
    "ConfigError",
]
