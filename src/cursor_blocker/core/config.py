"""Fixed configuration for the Cursor watcher.

Timing constants are not exposed as runtime options. WatcherConfig bundles
them so a watcher instance can be built with shorter intervals in tests.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

# Cursor must be launched with --remote-debugging-port=9222
DEFAULT_CDP_URL = "http://127.0.0.1:9222"

# Where the browser extension reaches the relay
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765

CONNECT_RETRY_SECONDS = 2.0
CHECK_INTERVAL_SECONDS = 0.5
DEBUG_DUMP_INTERVAL_SECONDS = 5.0
PAGE_RECHECK_INTERVAL_SECONDS = 5.0

BUTTON_SAMPLE_LIMIT = 50
DEBUG_LOG_SAMPLE_LIMIT = 20

PRODUCT_NAME = "cursor"

DEBUG_ENV_VAR = "CURSOR_BLOCKER_DEBUG"
_TRUTHY = ("1", "true", "yes")


def debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Return True if the diagnostics toggle is set in the environment.

    Args:
        environ: Environment mapping to read. Defaults to os.environ.
    """
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV_VAR, "") in _TRUTHY


class WatcherConfig(BaseModel):
    """Settings for a single CursorCdpWatcher instance.

    Attributes:
        cdp_url: Remote-debugging endpoint of the Cursor process.
        connect_retry: Delay in seconds before reconnecting or re-selecting.
        check_interval: Fast poll interval in seconds.
        debug_interval: Diagnostic poll interval in seconds.
        page_recheck_interval: Interval in seconds between page re-selections.
        debug: Whether diagnostic polls include the button sample payload.
        debug_log_limit: Maximum number of button samples written to the log.
    """

    model_config = ConfigDict(frozen=True)

    cdp_url: str = DEFAULT_CDP_URL
    connect_retry: float = Field(default=CONNECT_RETRY_SECONDS, gt=0)
    check_interval: float = Field(default=CHECK_INTERVAL_SECONDS, gt=0)
    debug_interval: float = Field(default=DEBUG_DUMP_INTERVAL_SECONDS, gt=0)
    page_recheck_interval: float = Field(default=PAGE_RECHECK_INTERVAL_SECONDS, gt=0)
    debug: bool = Field(default_factory=debug_enabled)
    debug_log_limit: int = Field(default=DEBUG_LOG_SAMPLE_LIMIT, ge=0)
