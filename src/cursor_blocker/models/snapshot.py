"""Snapshot models for the observed Cursor window.

This module defines the DomSnapshot model, the single value the watcher
publishes, together with the optional diagnostic payload.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_BUTTON_SAMPLES = 50
MAX_TEXT_LENGTH = 80
MAX_CLASS_NAME_LENGTH = 120


class ButtonSample(BaseModel):
    """Structural metadata about one button in the chat or sidebar.

    No chat text content is captured beyond the button's own short label.

    Attributes:
        aria_label: The aria-label attribute (if present).
        text: Trimmed visible button text, truncated to 80 characters.
        class_name: The class list, truncated to 120 characters.
    """

    model_config = ConfigDict(frozen=True)

    aria_label: str | None = None
    text: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)
    class_name: str | None = Field(default=None, max_length=MAX_CLASS_NAME_LENGTH)


class DebugDump(BaseModel):
    """Diagnostic payload attached to snapshots on debug polls."""

    model_config = ConfigDict(frozen=True)

    button_samples: list[ButtonSample] = Field(default=[], max_length=MAX_BUTTON_SAMPLES)


class DomSnapshot(BaseModel):
    """The watcher's view of Cursor at one point in time.

    Snapshots are replaced wholesale on every update, never patched.

    Attributes:
        connected: True iff a remote-debugging session is currently open.
        page_title: Title of the observed page, None when no page is selected.
        page_url: URL of the observed page, None when no page is selected.
        generating: True while the AI composer is streaming a response.
        debug: Button samples, only on diagnostic polls with debugging enabled.
        updated_at: Monotonic timestamp of the observation or transition.
        error: Reason the signal is not trustworthy, None when healthy.
    """

    model_config = ConfigDict(frozen=True)

    connected: bool = False
    page_title: str | None = None
    page_url: str | None = None
    generating: bool = False
    debug: DebugDump | None = None
    updated_at: float
    error: str | None = None

    @model_validator(mode="after")
    def generating_requires_connection(self) -> "DomSnapshot":
        """Validate that a disconnected snapshot never reports generating."""
        if self.generating and not self.connected:
            raise ValueError("generating snapshot must be connected")
        return self

    @property
    def healthy(self) -> bool:
        """True when connected and no error is reported."""
        return self.connected and self.error is None
