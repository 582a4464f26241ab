"""Unit tests for the logging system with platform-aware paths and rotation."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from airspacekit.core.errors import LoggingError
from airspacekit.core.logging_system import (
    get_logger,
    get_platform_log_dir,
    initialize_logging,
    rotate_logs,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Detach handlers installed by a test."""
    yield
    shutdown_logging()


def write_config(path: Path, config: dict) -> Path:
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


class TestPlatformLogDir:
    """Tests for get_platform_log_dir function."""

    def test_macos_log_dir(self) -> None:
        """Test macOS log directory path."""
        with patch("platform.system", return_value="Darwin"):
            assert get_platform_log_dir() == Path.home() / "Library" / "Logs" / "AirspaceKit"

    def test_linux_log_dir(self) -> None:
        """Test Linux log directory path."""
        with patch("platform.system", return_value="Linux"):
            assert get_platform_log_dir() == Path.home() / ".airspacekit" / "logs"

    def test_windows_log_dir(self) -> None:
        """Test Windows log directory path."""
        with patch("platform.system", return_value="Windows"):
            with patch.dict("os.environ", {"APPDATA": "C:/Users/Test/AppData/Roaming"}):
                log_dir = get_platform_log_dir()
                assert "AirspaceKit" in str(log_dir)
                assert "Logs" in str(log_dir)

    def test_unknown_platform_defaults_to_linux(self) -> None:
        """Test unknown platform defaults to Linux-style path."""
        with patch("platform.system", return_value="FreeBSD"):
            assert ".airspacekit" in str(get_platform_log_dir())


class TestLogRotation:
    """Tests for log rotation functionality."""

    def test_rotate_logs_no_existing_log(self, tmp_path: Path) -> None:
        """Test rotation when no log file exists - should do nothing."""
        rotate_logs(tmp_path, "test.log", 5)
        assert list(tmp_path.glob("*")) == []

    def test_rotate_logs_shifts_files(self, tmp_path: Path) -> None:
        """Test rotation with multiple existing log files."""
        (tmp_path / "test.log").write_text("current")
        (tmp_path / "test.log.1").write_text("previous-1")
        (tmp_path / "test.log.2").write_text("previous-2")

        rotate_logs(tmp_path, "test.log", 5)

        assert not (tmp_path / "test.log").exists()
        assert (tmp_path / "test.log.1").read_text() == "current"
        assert (tmp_path / "test.log.2").read_text() == "previous-1"
        assert (tmp_path / "test.log.3").read_text() == "previous-2"

    def test_rotate_logs_deletes_oldest(self, tmp_path: Path) -> None:
        """Test that the oldest log beyond keep_count is deleted."""
        (tmp_path / "test.log").write_text("current")
        for i in range(1, 4):
            (tmp_path / f"test.log.{i}").write_text(f"old-{i}")

        rotate_logs(tmp_path, "test.log", keep_count=3)

        assert (tmp_path / "test.log.1").read_text() == "current"
        assert (tmp_path / "test.log.3").read_text() == "old-2"
        assert not (tmp_path / "test.log.4").exists()


class TestLoggingInitialization:
    """Tests for logging system initialization."""

    def test_missing_config_raises(self) -> None:
        """Test initialization fails with a missing config file."""
        with pytest.raises(LoggingError, match="Logging config file not found"):
            initialize_logging(config_path="/nonexistent/config.yaml")

    def test_non_mapping_config_raises(self, tmp_path: Path) -> None:
        """Test a YAML list at the root is rejected."""
        path = tmp_path / "logging.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")
        with pytest.raises(LoggingError, match="mapping"):
            initialize_logging(path)

    def test_unknown_level_raises(self, tmp_path: Path) -> None:
        """Test an unknown level name is reported as a LoggingError."""
        path = write_config(tmp_path / "logging.yaml", {"level": "CHATTY"})
        with pytest.raises(LoggingError):
            initialize_logging(path)

    def test_combined_log_written(self, tmp_path: Path) -> None:
        """Test messages reach the combined log file."""
        log_dir = tmp_path / "logs"
        path = write_config(
            tmp_path / "logging.yaml",
            {
                "level": "DEBUG",
                "log_dir": str(log_dir),
                "console": {"enabled": False},
                "combined_log": {"enabled": True, "filename": "run.log"},
            },
        )
        initialize_logging(path)

        logger = get_logger("test.combined")
        logger.info("Loaded %d airspaces", 42)
        logger.debug("Debug message")
        shutdown_logging()

        content = (log_dir / "run.log").read_text(encoding="utf-8")
        assert "Loaded 42 airspaces" in content
        assert "Debug message" in content

    def test_startup_rotates_previous_log(self, tmp_path: Path) -> None:
        """Test that a second initialization rotates the first session's log."""
        log_dir = tmp_path / "logs"
        path = write_config(
            tmp_path / "logging.yaml",
            {
                "log_dir": str(log_dir),
                "console": {"enabled": False},
                "combined_log": {"enabled": True, "filename": "run.log"},
            },
        )
        initialize_logging(path)
        get_logger("test.rotate").info("First session")
        shutdown_logging()

        initialize_logging(path)
        get_logger("test.rotate").info("Second session")
        shutdown_logging()

        assert "Second session" in (log_dir / "run.log").read_text(encoding="utf-8")
        assert "First session" in (log_dir / "run.log.1").read_text(encoding="utf-8")

    def test_platform_dir_overrides_log_dir(self, tmp_path: Path) -> None:
        """Test use_platform_dir writes into the platform directory."""
        path = write_config(
            tmp_path / "logging.yaml",
            {"console": {"enabled": False}, "combined_log": {"enabled": True}},
        )
        with patch(
            "airspacekit.core.logging_system.get_platform_log_dir", return_value=tmp_path / "platform"
        ):
            initialize_logging(path, use_platform_dir=True)
            get_logger("test.platform").info("Platform message")
            shutdown_logging()

        assert (tmp_path / "platform" / "airspacekit.log").exists()

    def test_component_level_override(self, tmp_path: Path) -> None:
        """Test per-component levels are applied."""
        path = write_config(
            tmp_path / "logging.yaml",
            {"console": {"enabled": False}, "components": {"test.quiet": {"level": "ERROR"}}},
        )
        initialize_logging(path)
        assert logging.getLogger("test.quiet").level == logging.ERROR

    def test_reinitialization_does_not_duplicate_handlers(self) -> None:
        """Test repeated initialization replaces its own handlers."""
        root = logging.getLogger()
        initialize_logging()
        count = len(root.handlers)
        initialize_logging()
        assert len(root.handlers) == count


class TestLoggerFunctionality:
    """Tests for logger creation and usage."""

    def test_get_logger_returns_named_logger(self) -> None:
        """Test that get_logger returns a valid logger."""
        logger = get_logger("test_component")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test_component"

    def test_get_logger_reuses_loggers(self) -> None:
        """Test that loggers are shared by name."""
        assert get_logger("test") is get_logger("test")
