"""Unit tests for logging utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from repokit.utils._logging import (
    _create_logger,
    _get_log_level,
    _log_level_from_string,
    create_repository_logger,
)

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


class TestLogLevels:
    def test_default_level_is_warning(self) -> None:
        assert _get_log_level() == logging.WARNING

    def test_debug_flag_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_DEBUG", "1")
        monkeypatch.setenv("REPOKIT_LOG_LEVEL", "error")

        assert _get_log_level() == logging.DEBUG
        assert _log_level_from_string("warning", respect_env=True) == logging.DEBUG

    def test_env_level_overrides_argument(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_LOG_LEVEL", "info")

        assert _log_level_from_string("error", respect_env=True) == logging.INFO
        assert _log_level_from_string("error") == logging.ERROR

    def test_unknown_level_falls_back_to_warning(self) -> None:
        assert _log_level_from_string("chatty") == logging.WARNING


class TestCreateLogger:
    def test_creates_log_directory_if_missing(self, fs: FakeFilesystem) -> None:
        log_path = Path("/logs/test.log")
        assert not log_path.parent.exists()

        _ = _create_logger(str(log_path))

        assert log_path.parent.exists()

    def test_default_format_is_json(self, fs: FakeFilesystem) -> None:
        logger = _create_logger("/logs/test.log")

        logger.warning("test_event", key="value")

        record = json.loads(Path("/logs/test.log").read_text().splitlines()[0])
        assert record["event"] == "test_event"
        assert record["key"] == "value"
        assert record["level"] == "warning"
        assert "timestamp" in record

    def test_text_format(self, fs: FakeFilesystem) -> None:
        logger = _create_logger("/logs/test.log", log_format="text")

        logger.warning("test_event", key="value")

        log_content = Path("/logs/test.log").read_text()
        assert "test_event" in log_content
        assert "key=value" in log_content

    def test_without_path_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = _create_logger(None, log_level=logging.INFO)

        logger.info("to_stderr")

        captured = capsys.readouterr()
        assert "to_stderr" in captured.err
        assert captured.out == ""

    def test_file_is_appended_not_replaced(self, fs: FakeFilesystem) -> None:
        _create_logger("/logs/append.log").warning("first")
        _create_logger("/logs/append.log").warning("second")

        events = [
            json.loads(line)["event"] for line in Path("/logs/append.log").read_text().splitlines()
        ]
        assert events == ["first", "second"]
        assert not any(name.startswith("repokit.") for name in logging.root.manager.loggerDict)


class TestCreateRepositoryLogger:
    def test_respects_log_level(self, fs: FakeFilesystem) -> None:
        logger = create_repository_logger(level="error", log_file="/logs/repo.log")

        logger.debug("debug_level_message")
        logger.error("error_level_message")

        content = Path("/logs/repo.log").read_text()
        assert "debug_level_message" not in content
        assert "error_level_message" in content

    def test_debug_env_enables_debug(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("REPOKIT_DEBUG", "1")
        logger = create_repository_logger(level="error", log_file="/logs/debug.log")

        logger.debug("now_visible")

        assert "now_visible" in Path("/logs/debug.log").read_text()

    def test_file_loggers_are_shared(self, fs: FakeFilesystem) -> None:
        first = create_repository_logger(log_file="/logs/shared.log")
        second = create_repository_logger(log_file="/logs/shared.log")

        assert first is second

    def test_bound_context_is_rendered(self, fs: FakeFilesystem) -> None:
        logger = create_repository_logger(log_file="/logs/bound.log").bind(
            operation="status", path="/repo"
        )

        logger.warning("operation failed", kind="FileLocked")

        record = json.loads(Path("/logs/bound.log").read_text())
        assert record["operation"] == "status"
        assert record["path"] == "/repo"
        assert record["kind"] == "FileLocked"
