"""Shared test fixtures for cursor_blocker tests."""

import asyncio
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from cursor_blocker.core.config import WatcherConfig
from cursor_blocker.models.snapshot import DomSnapshot


class FakeBrowser:
    """Stands in for a CDP-connected Playwright Browser."""

    def __init__(self, pages: list[Any]) -> None:
        self.pages = pages
        self.closed = False
        self._handlers: dict[str, list[Callable[..., None]]] = {}

    @property
    def contexts(self) -> list[SimpleNamespace]:
        return [SimpleNamespace(pages=self.pages)]

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self._handlers.setdefault(event, []).append(handler)

    async def close(self) -> None:
        self.closed = True

    def emit_disconnected(self) -> None:
        for handler in self._handlers.get("disconnected", []):
            handler(self)


class FakeConnector:
    """Returns scripted outcomes from connect(); the last one repeats."""

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0
        self.stopped = False

    async def connect(self, cdp_url: str) -> Any:
        self.calls += 1
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def stop(self) -> None:
        self.stopped = True


def _make_page(
    title: str = "main.py - project - Cursor",
    url: str = "vscode-file://vscode-app/workbench.html",
    generating: bool = False,
    buttons: list[dict[str, Any]] | None = None,
    title_error: str | None = None,
) -> MagicMock:
    """Create a mock Playwright Page whose DOM state can be changed later.

    Set ``page.state["generating"]`` to flip the composer marker, or
    ``page.state["error"]`` to make evaluation fail.
    """
    page = MagicMock()
    page.url = url
    if title_error:
        page.title = AsyncMock(side_effect=PlaywrightError(title_error))
    else:
        page.title = AsyncMock(return_value=title)
    page.state = {"generating": generating, "buttons": buttons or [], "error": None}

    async def evaluate(expression: str) -> Any:
        if page.state["error"]:
            raise PlaywrightError(page.state["error"])
        if "buttonSamples" in expression:
            return {"buttonSamples": page.state["buttons"]}
        return {"generating": page.state["generating"]}

    page.evaluate = AsyncMock(side_effect=evaluate)
    return page


@pytest.fixture
def make_page() -> Callable[..., MagicMock]:
    return _make_page


@pytest.fixture
def make_browser() -> Callable[[list[Any]], FakeBrowser]:
    return FakeBrowser


@pytest.fixture
def make_connector() -> Callable[[list[Any]], FakeConnector]:
    return FakeConnector


@pytest.fixture
def fast_config() -> WatcherConfig:
    return WatcherConfig(
        connect_retry=0.05,
        check_interval=0.01,
        debug_interval=0.05,
        page_recheck_interval=0.05,
        debug=False,
    )


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    async def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _wait


@pytest.fixture
def sample_snapshot() -> DomSnapshot:
    return DomSnapshot(
        connected=True,
        page_title="main.py - project - Cursor",
        page_url="vscode-file://vscode-app/workbench.html",
        generating=False,
        updated_at=1.0,
    )
