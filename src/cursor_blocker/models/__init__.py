"""Cursor watcher data models."""

from cursor_blocker.models.message import ClientMessage, PongMessage, StateMessage
from cursor_blocker.models.page import CandidatePage
from cursor_blocker.models.snapshot import ButtonSample, DebugDump, DomSnapshot

__all__ = [
    "ButtonSample",
    "CandidatePage",
    "ClientMessage",
    "DebugDump",
    "DomSnapshot",
    "PongMessage",
    "StateMessage",
]
