"""Messages exchanged with the browser extension.

The field aliases match the JSON the extension expects, so the relay sends
``message.model_dump(by_alias=True)`` verbatim.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StateMessage(BaseModel):
    """Blocking state derived from the latest watcher snapshot.

    Attributes:
        type: Always "state".
        blocked: True unless Cursor is actively generating.
        sessions: 1 while a CDP session is open, else 0.
        working: 1 while Cursor is generating, else 0.
        waiting_for_input: Always 0; CDP detection cannot observe prompts.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["state"] = "state"
    blocked: bool = True
    sessions: int = 0
    working: int = 0
    waiting_for_input: int = Field(default=0, alias="waitingForInput")


class PongMessage(BaseModel):
    """Reply to a client ping."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pong"] = "pong"


class ClientMessage(BaseModel):
    """A message sent by the browser extension over the WebSocket.

    ``subscribe`` is accepted for compatibility; every socket is subscribed
    on connect.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["ping", "subscribe"]
