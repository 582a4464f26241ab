"""Logging setup for airspacekit components.

Configures the root logger from a YAML file with a console handler, a
combined log file rotated on every startup, and per-component level
overrides. Library modules only ever call ``logging.getLogger(__name__)``;
applications (such as the CLI) call :func:`initialize_logging` once.

Platform-specific log locations:
    - macOS: ~/Library/Logs/AirspaceKit/airspacekit.log
    - Linux: ~/.airspacekit/logs/airspacekit.log
    - Windows: %AppData%/AirspaceKit/Logs/airspacekit.log

Typical usage example:
    from airspacekit.core.logging_system import get_logger, initialize_logging

    initialize_logging("config/logging.yaml")
    log = get_logger("airspacekit.loader")
    log.info("Loaded %d airspaces", count)
"""

import logging
import os
import platform
from pathlib import Path
from typing import Any

import yaml

from airspacekit.core.errors import LoggingError

_logging_config: dict[str, Any] = {}
_installed_handlers: list[logging.Handler] = []
_initialized = False

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_platform_log_dir() -> Path:
    """Get platform-specific log directory.

    Returns:
        Path to the platform-appropriate log directory.
    """
    system = platform.system()

    if system == "Darwin":
        return Path.home() / "Library" / "Logs" / "AirspaceKit"
    elif system == "Windows":
        appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return appdata / "AirspaceKit" / "Logs"
    else:
        return Path.home() / ".airspacekit" / "logs"


def rotate_logs(log_dir: Path, log_filename: str = "airspacekit.log", keep_count: int = 5) -> None:
    """Rotate logs on startup, keeping the last N runs.

    Renames the current log to ``<name>.1``, shifts older logs up by one and
    deletes anything beyond ``keep_count``.

    Args:
        log_dir: Directory containing log files.
        log_filename: Base name of the log file.
        keep_count: Number of old logs to keep.
    """
    log_file = log_dir / log_filename
    if not log_file.exists():
        return

    oldest_log = log_dir / f"{log_filename}.{keep_count}"
    if oldest_log.exists():
        oldest_log.unlink()

    for i in range(keep_count - 1, 0, -1):
        old_log = log_dir / f"{log_filename}.{i}"
        if old_log.exists():
            old_log.rename(log_dir / f"{log_filename}.{i + 1}")

    log_file.rename(log_dir / f"{log_filename}.1")


def initialize_logging(config_path: str | Path | None = None, use_platform_dir: bool = False) -> None:
    """Initialize logging from YAML configuration.

    Args:
        config_path: Path to logging configuration YAML file. If None, the
            default configuration (console only) is used.
        use_platform_dir: If True, write the combined log into the
            platform-specific log directory instead of the configured one.

    Raises:
        LoggingError: If the configuration cannot be loaded or applied.
    """
    global _logging_config, _initialized

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise LoggingError(f"Logging config file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise LoggingError(f"Failed to load logging config: {e}") from e
        if not isinstance(loaded, dict):
            raise LoggingError(f"Logging config root must be a mapping: {path}")
        _logging_config = {**_get_default_config(), **loaded}
    else:
        _logging_config = _get_default_config()

    if use_platform_dir:
        _logging_config["log_dir"] = str(get_platform_log_dir())

    try:
        _configure_root_logger()
        _configure_components()
    except (OSError, ValueError, AttributeError) as e:
        raise LoggingError(f"Failed to configure logging: {e}") from e

    _initialized = True


def _get_default_config() -> dict[str, Any]:
    """Get default logging configuration."""
    return {
        "level": "INFO",
        "format": DEFAULT_FORMAT,
        "date_format": "%Y-%m-%d %H:%M:%S",
        "log_dir": "logs",
        "console": {"enabled": True, "level": "INFO"},
        "combined_log": {"enabled": False, "filename": "airspacekit.log", "backup_count": 5},
        "components": {},
    }


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _configure_root_logger() -> None:
    """Configure the root logger with handlers."""
    root_logger = logging.getLogger()
    root_logger.setLevel(_level(_logging_config.get("level", "INFO")))
    _remove_installed_handlers()

    formatter = logging.Formatter(
        _logging_config.get("format", DEFAULT_FORMAT),
        _logging_config.get("date_format"),
    )

    console = _logging_config.get("console", {})
    if console.get("enabled", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(_level(console.get("level", "INFO")))
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
        _installed_handlers.append(console_handler)

    combined = _logging_config.get("combined_log", {})
    if combined.get("enabled", False):
        log_dir = Path(_logging_config.get("log_dir", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        filename = combined.get("filename", "airspacekit.log")
        rotate_logs(log_dir, filename, combined.get("backup_count", 5))

        # Rotation happens on startup, so the handler simply truncates.
        file_handler = logging.FileHandler(log_dir / filename, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)


def _configure_components() -> None:
    """Apply per-component level overrides."""
    for name, options in (_logging_config.get("components") or {}).items():
        component_logger = logging.getLogger(name)
        if not options.get("enabled", True):
            component_logger.disabled = True
            continue
        if "level" in options:
            component_logger.setLevel(_level(options["level"]))


def get_logger(name: str) -> logging.Logger:
    """Get a logger, initializing logging with defaults on first use.

    Args:
        name: Logger name (typically ``__name__``).

    Returns:
        Logger instance.
    """
    if not _initialized:
        initialize_logging()
    return logging.getLogger(name)


def _remove_installed_handlers() -> None:
    """Detach and close handlers added by a previous initialization."""
    root_logger = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()


def shutdown_logging() -> None:
    """Flush and close the handlers installed by :func:`initialize_logging`."""
    global _initialized
    _remove_installed_handlers()
    _initialized = False
