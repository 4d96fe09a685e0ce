"""
Tests for logging setup and terminal progress output.
"""

import logging

import pytest

from restbase.adapters.mock import MockOperation
from restbase.core.engine.executor import Phase, PhaseExecutor
from restbase.core.observability.logging_config import (
    ENV_FILE,
    ENV_LEVEL,
    resolve_level,
    setup_logging,
    setup_logging_from_env,
)
from restbase.core.observability.progress import ClickProgressReporter


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_flags_win_over_environment(self, monkeypatch):
        monkeypatch.setenv(ENV_LEVEL, "ERROR")
        assert resolve_level(debug=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"

    def test_environment_then_default(self, monkeypatch):
        monkeypatch.delenv(ENV_LEVEL, raising=False)
        assert resolve_level() == "WARNING"
        monkeypatch.setenv(ENV_LEVEL, "INFO")
        assert resolve_level() == "INFO"

    def test_quiet(self):
        assert resolve_level(quiet=True) == "ERROR"


class TestSetupLogging:
    def test_console_only(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_log_file_from_env(self, tmp_path, monkeypatch):
        log_file = tmp_path / "restbase.log"
        monkeypatch.setenv(ENV_FILE, str(log_file))
        monkeypatch.setenv("RESTBASE_LOG_FILE_LEVEL", "DEBUG")
        setup_logging_from_env()

        logging.getLogger("restbase.test").debug("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "hello file" in log_file.read_text(encoding="utf-8")


class TestClickProgressReporter:
    def test_reports_phases_failures_and_rollback(self, capsys):
        reporter = ClickProgressReporter(verbose=True)
        phases = [
            Phase("first", [MockOperation("ok")]),
            Phase("second", [MockOperation("boom", fail=True)]),
        ]
        PhaseExecutor(reporter=reporter).run(phases)

        err = capsys.readouterr().err
        assert "[1/2] first (1 ops)" in err
        assert "✓ mock ok" in err
        assert "❌ mock boom" in err
        assert "Rolling back 1 operation(s)" in err
        assert "↩ mock ok" in err

    def test_quiet_unless_verbose(self, capsys):
        PhaseExecutor(reporter=ClickProgressReporter()).run(
            [Phase("only", [MockOperation("ok")])]
        )
        assert "mock ok" not in capsys.readouterr().err
