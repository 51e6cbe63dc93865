"""In-process fan-out of the latest value to listeners.

This module provides SnapshotPublisher, a current-value slot with a
listener registry. New subscribers receive the current value immediately,
then every later publish, in registration order.
"""

from collections.abc import Callable
from itertools import count
from typing import Generic, TypeVar

from cursor_blocker.core.logging import ErrorIds, logError

T = TypeVar("T")

Listener = Callable[[T], None]


class SnapshotPublisher(Generic[T]):
    """Current value plus replaying listener registry.

    Values are replaced wholesale, so readers never see a partially updated
    value. When ``order_key`` is given, a published value whose key is lower
    than the current one is dropped; later observations always win.
    """

    def __init__(self, initial: T, order_key: Callable[[T], float] | None = None) -> None:
        """Initialize the publisher.

        Args:
            initial: The value returned before anything is published.
            order_key: Optional function returning a monotonic timestamp for a value.
        """
        self._current = initial
        self._order_key = order_key
        self._listeners: dict[int, Listener[T]] = {}
        self._ids = count()
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    def get_current(self) -> T:
        """Return the latest published value."""
        return self._current

    def subscribe(self, callback: Listener[T]) -> Callable[[], None]:
        """Register a listener and replay the current value to it.

        Args:
            callback: Called with the current value now and with each later publish.

        Returns:
            A function that removes the listener. Calling it twice is harmless.
        """
        key = next(self._ids)
        self._listeners[key] = callback
        self._notify(key, callback, self._current)

        def unsubscribe() -> None:
            self._listeners.pop(key, None)

        return unsubscribe

    def publish(self, value: T) -> bool:
        """Replace the current value and notify every listener.

        Args:
            value: The new value.

        Returns:
            True if the value was accepted, False if the publisher is closed
            or the value is older than the current one.
        """
        if self._closed:
            return False
        if self._order_key is not None and self._order_key(value) < self._order_key(self._current):
            return False

        self._current = value
        for key, callback in list(self._listeners.items()):
            # Skip listeners removed by an earlier callback in this round
            if key in self._listeners:
                self._notify(key, callback, value)
        return True

    def close(self) -> None:
        """Stop accepting values and drop all listeners."""
        self._closed = True
        self._listeners.clear()

    @staticmethod
    def _notify(key: int, callback: Listener[T], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logError(
                ErrorIds.LISTENER_FAILED,
                f"Listener {key} raised while handling a publish",
                exc_info=True,
            )
