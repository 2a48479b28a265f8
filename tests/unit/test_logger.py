"""
tests/unit/test_logger.py — structlog setup and the diagnostic log capability

Covers:
  - setup_logging(): JSON file output, level filtering, console output
  - setup_logging_from_settings(): the logging section drives level and log_dir
  - portable_log / null_log / default_diagnostic_log selection, including
    the fallback when settings cannot be loaded
"""

from __future__ import annotations

import json
import logging
import logging.handlers

import pytest
import structlog
from structlog.testing import capture_logs

from runq.config.settings import RunQSettings
from runq.observability.logger import (
    default_diagnostic_log,
    get_logger,
    null_log,
    portable_log,
    setup_logging,
    setup_logging_from_settings,
)


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


class TestSetupLogging:

    def test_writes_json_file(self, tmp_path):
        setup_logging(level="DEBUG", log_dir=tmp_path, console_output=False)
        get_logger("runq.test").info("runq.test_event", answer=42)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (tmp_path / "runq.log").read_text(encoding="utf-8").splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "runq.test_event"
        assert record["answer"] == 42
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filters(self, tmp_path):
        setup_logging(level="WARNING", log_dir=tmp_path, console_output=False)
        get_logger("runq.test").info("runq.hidden")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "runq.hidden" not in (tmp_path / "runq.log").read_text(encoding="utf-8")

    def test_no_handlers_requested_is_silent(self, capsys):
        setup_logging(console_output=False)
        get_logger("runq.test").error("runq.silent")
        captured = capsys.readouterr()
        assert "runq.silent" not in captured.out + captured.err

    def test_console_output(self, capsys):
        setup_logging(level="INFO", json_format=True)
        get_logger("runq.test").info("runq.visible", n=1)
        assert "runq.visible" in capsys.readouterr().err


class TestDiagnosticLog:

    def test_null_log_accepts_anything(self):
        assert null_log("debug", "runq.anything", a=1, b="x") is None

    def test_portable_log_routes_to_structlog(self):
        with capture_logs() as captured:
            log = portable_log("runq.test", component="queue")
            log("warning", "runq.sample", size=3)
        assert captured == [
            {"event": "runq.sample", "log_level": "warning", "size": 3, "component": "queue"}
        ]

    def test_default_is_null_without_debug(self):
        assert default_diagnostic_log() is null_log

    def test_default_is_structlog_with_debug(self, monkeypatch):
        monkeypatch.setenv("RUNQ_DEBUG", "1")
        log = default_diagnostic_log()
        assert log is not null_log
        with capture_logs() as captured:
            log("debug", "runq.debugging")
        assert captured[0]["event"] == "runq.debugging"

    def test_default_is_null_when_settings_file_is_broken(self, tmp_path):
        (tmp_path / "runq.yaml").write_text("- not a mapping\n", encoding="utf-8")
        assert default_diagnostic_log() is null_log

    def test_default_is_null_when_env_is_invalid(self, monkeypatch):
        monkeypatch.setenv("RUNQ_DEBUG", "1")
        monkeypatch.setenv("RUNQ_CONCURRENCY", "0")
        assert default_diagnostic_log() is null_log


class TestSetupLoggingFromSettings:

    def test_level_and_log_dir_applied(self, tmp_path):
        settings = RunQSettings(logging={
            "level": "warning",
            "log_dir": str(tmp_path),
            "console_output": False,
        })
        setup_logging_from_settings(settings)

        log = get_logger("runq.test")
        log.info("runq.below_threshold")
        log.warning("runq.above_threshold", code=7)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (tmp_path / "runq.log").read_text(encoding="utf-8").splitlines()
        events = [json.loads(line)["event"] for line in lines]
        assert "runq.below_threshold" not in events
        assert "runq.above_threshold" in events

    def test_rotation_size_converted_to_bytes(self, tmp_path):
        settings = RunQSettings(logging={
            "log_dir": str(tmp_path),
            "max_file_size_mb": 2,
            "backup_count": 3,
            "console_output": False,
        })
        setup_logging_from_settings(settings)

        rotating = [
            h for h in logging.getLogger().handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2 * 1024 * 1024
        assert rotating[0].backupCount == 3
