"""Blocking state derived from the Cursor watcher.

CursorState turns each DomSnapshot into a StateMessage and rebroadcasts it
only when the blocking decision changes.
"""

from collections.abc import Callable

from cursor_blocker.core.logging import logEvent
from cursor_blocker.core.publisher import SnapshotPublisher
from cursor_blocker.core.watcher import CursorCdpWatcher
from cursor_blocker.models.message import StateMessage
from cursor_blocker.models.snapshot import DomSnapshot

StateListener = Callable[[StateMessage], None]


def derive_state_message(snapshot: DomSnapshot) -> StateMessage:
    """Map a snapshot to the blocking state.

    Working (unblocked) only while connected and generating; blocked otherwise.
    """
    working = 1 if snapshot.connected and snapshot.generating else 0
    sessions = 1 if snapshot.connected else 0
    return StateMessage(blocked=working == 0, sessions=sessions, working=working, waiting_for_input=0)


def _changed(prev: StateMessage, next_message: StateMessage) -> bool:
    return (
        prev.blocked != next_message.blocked
        or prev.sessions != next_message.sessions
        or prev.working != next_message.working
    )


class CursorState:
    """Deduplicating relay between the watcher and state subscribers."""

    def __init__(self, watcher: CursorCdpWatcher | None = None) -> None:
        self._watcher = watcher or CursorCdpWatcher()
        self._publisher: SnapshotPublisher[StateMessage] = SnapshotPublisher(StateMessage())
        self._started = False
        self._unsubscribe_watcher: Callable[[], None] | None = None

    @property
    def watcher(self) -> CursorCdpWatcher:
        """The underlying watcher."""
        return self._watcher

    def start(self) -> None:
        """Start the watcher and begin relaying. Idempotent."""
        if self._started:
            return
        self._started = True
        self._watcher.start()
        self._unsubscribe_watcher = self._watcher.subscribe(self._on_snapshot)

    def subscribe(self, callback: StateListener) -> Callable[[], None]:
        """Receive the current state now and every later change."""
        return self._publisher.subscribe(callback)

    def get_status(self) -> StateMessage:
        """Return the latest state."""
        return self._publisher.get_current()

    def destroy(self) -> None:
        """Detach from the watcher, stop it and drop all listeners."""
        if self._unsubscribe_watcher is not None:
            self._unsubscribe_watcher()
            self._unsubscribe_watcher = None
        self._watcher.stop()
        self._publisher.close()

    async def aclose(self) -> None:
        """destroy() and wait for the watcher's browser and driver to shut down."""
        self.destroy()
        await self._watcher.aclose()

    def _on_snapshot(self, snapshot: DomSnapshot) -> None:
        next_message = derive_state_message(snapshot)
        if not _changed(self.get_status(), next_message):
            return
        self._publisher.publish(next_message)
        logEvent(
            "state_changed",
            {"blocked": next_message.blocked, "sessions": next_message.sessions},
        )
