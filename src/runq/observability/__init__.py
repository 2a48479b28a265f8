"""
observability/ — Logging setup and the queue's diagnostic log capability.
"""

from runq.observability.logger import (
    DiagnosticLog,
    default_diagnostic_log,
    get_logger,
    null_log,
    portable_log,
    setup_logging,
    setup_logging_from_settings,
)

__all__ = [
    "DiagnosticLog",
    "default_diagnostic_log",
    "get_logger",
    "null_log",
    "portable_log",
    "setup_logging",
    "setup_logging_from_settings",
]
