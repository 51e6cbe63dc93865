"""Logging for the Cursor watcher.

Everything goes through the ``cursor_blocker`` stdlib logger. Console output
starts at INFO; configure_logging() adjusts it and optionally adds a
debug-level log file.
"""

import logging
import sys
from typing import Any

LOGGER_NAME = "cursor_blocker"
LOG_LEVELS = ("debug", "info", "warning", "error")

_FORMATTER = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


class ErrorIds:
    """Tracking IDs prefixed to error log lines."""

    # CDP session
    CDP_CONNECT_FAILED = "ERR_CDP_CONNECT"
    CDP_DISCONNECTED = "ERR_CDP_DISCONNECTED"
    CDP_CLOSE_FAILED = "ERR_CDP_CLOSE"

    # Page selection
    PAGE_NOT_FOUND = "ERR_PAGE_NOT_FOUND"
    PAGE_PROBE_FAILED = "ERR_PAGE_PROBE"

    # DOM evaluation
    DOM_EVALUATE_FAILED = "ERR_DOM_EVALUATE"

    # Subscribers and relay clients
    LISTENER_FAILED = "ERR_LISTENER"
    CLIENT_MESSAGE_INVALID = "ERR_CLIENT_MESSAGE"

    KEYBOARD_INTERRUPT = "KEYBOARD_INTERRUPT"


_logger: logging.Logger | None = None
_console_handler: logging.Handler | None = None


def _get_logger() -> logging.Logger:
    global _logger, _console_handler
    if _logger is None:
        _logger = logging.getLogger(LOGGER_NAME)
        _logger.setLevel(logging.DEBUG)
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setLevel(logging.INFO)
        _console_handler.setFormatter(_FORMATTER)
        _logger.addHandler(_console_handler)
    return _logger


def _format(message: str, extra: dict[str, Any] | None) -> str:
    if not extra:
        return message
    return message + " | " + ", ".join(f"{k}={v}" for k, v in extra.items())


def configure_logging(level: str = "info", log_file: str | None = None) -> logging.Handler | None:
    """Set the console level and optionally log everything to a file.

    Args:
        level: One of LOG_LEVELS.
        log_file: Path of a debug-level log file to add.

    Returns:
        The file handler, if one was added.
    """
    _get_logger()
    assert _console_handler is not None
    _console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not log_file:
        return None

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_FORMATTER)
    _get_logger().addHandler(file_handler)
    return file_handler


def logError(
    error_id: str,
    message: str,
    exc_info: bool = False,
    extra: dict[str, Any] | None = None,
) -> None:
    """Log an error line prefixed with its ErrorIds value."""
    _get_logger().error(_format(f"[{error_id}] {message}", extra), exc_info=exc_info)


def logForDebugging(
    message: str,
    level: str = "debug",
    extra: dict[str, Any] | None = None,
) -> None:
    """Log a diagnostic message at the given level name."""
    log_level = getattr(logging, level.upper(), logging.DEBUG)
    _get_logger().log(log_level, _format(message, extra))


def logEvent(event_name: str, properties: dict[str, Any] | None = None) -> None:
    """Log a lifecycle event such as ``cdp_connected`` or ``state_changed``."""
    _get_logger().info(_format(f"[EVENT] {event_name}", properties))
