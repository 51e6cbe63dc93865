"""Cursor watcher core components.

The watcher and the state aggregator live in ``cursor_blocker.core.watcher``
and ``cursor_blocker.core.state``; they depend on ``cursor_blocker.tools`` and
are imported from there directly.
"""

from cursor_blocker.core.browser import CdpConnector, list_pages
from cursor_blocker.core.config import WatcherConfig, debug_enabled
from cursor_blocker.core.errors import (
    CdpConnectionError,
    CursorWatchError,
    DisconnectNotification,
    EvaluationError,
    SelectionMiss,
)
from cursor_blocker.core.publisher import SnapshotPublisher

__all__ = [
    "CdpConnector",
    "list_pages",
    "WatcherConfig",
    "debug_enabled",
    "CursorWatchError",
    "CdpConnectionError",
    "DisconnectNotification",
    "EvaluationError",
    "SelectionMiss",
    "SnapshotPublisher",
]
