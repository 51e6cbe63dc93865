"""Failure types raised while observing Cursor.

None of these are fatal: the watcher converts each one into a published
snapshot and a log line, then retries.
"""


class CursorWatchError(Exception):
    """Base class for watcher failures."""


class CdpConnectionError(CursorWatchError):
    """Raised when the remote-debugging session cannot be opened."""

    def __init__(self, cdp_url: str, reason: str) -> None:
        self.cdp_url = cdp_url
        self.reason = reason
        super().__init__(f"Failed to connect to Cursor at {cdp_url}: {reason}")


class DisconnectNotification(CursorWatchError):
    """The remote side closed the session."""

    def __init__(self, cdp_url: str) -> None:
        self.cdp_url = cdp_url
        super().__init__("Cursor disconnected; retrying...")


class SelectionMiss(CursorWatchError):
    """Connected, but no candidate page looks like the visible window."""

    def __init__(self) -> None:
        super().__init__("Connected to Cursor, but no suitable page found yet")


class EvaluationError(CursorWatchError):
    """Raised when the structural query cannot be evaluated in the page."""
