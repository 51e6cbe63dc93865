"""Tests for page selection among Cursor CDP targets."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from cursor_blocker.tools.page_selector import (
    looks_like_background_page,
    looks_like_workspace_window,
    rank_pages,
    score_page,
    select_best_page,
)

WORKBENCH_URL = "vscode-file://vscode-app/out/vs/code/electron-sandbox/workbench/workbench.html"


class TestLooksLikeBackgroundPage:
    @pytest.mark.parametrize(
        "url",
        [
            "chrome-extension://abc/background.html",
            "devtools://devtools/bundled/inspector.html",
            "chrome://gpu",
            "CHROME://settings",
        ],
    )
    def test_background_urls(self, url: str) -> None:
        assert looks_like_background_page("", url) is True

    @pytest.mark.parametrize(
        "title",
        ["Shared Process", "GPU Process", "Utility: network", "Extension Host Worker"],
    )
    def test_background_titles(self, title: str) -> None:
        assert looks_like_background_page(title, "about:blank") is True

    def test_workbench_is_not_background(self) -> None:
        assert looks_like_background_page("main.py - project - Cursor", WORKBENCH_URL) is False


class TestLooksLikeWorkspaceWindow:
    def test_product_name_in_title(self) -> None:
        assert looks_like_workspace_window("project - CURSOR", "") is True

    def test_webview_url(self) -> None:
        assert looks_like_workspace_window("", "vscode-webview://abc/index.html") is True

    def test_file_url(self) -> None:
        assert looks_like_workspace_window("", WORKBENCH_URL) is True

    def test_other_page(self) -> None:
        assert looks_like_workspace_window("Welcome", "https://example.com") is False

    def test_custom_product_name(self) -> None:
        assert looks_like_workspace_window("project - Windsurf", "", product_name="windsurf") is True


class TestScorePage:
    def test_excluded_returns_none(self) -> None:
        assert score_page("Cursor", "devtools://devtools") is None

    def test_workspace_with_title_and_url(self) -> None:
        assert score_page("main.py - Cursor", WORKBENCH_URL) == 13

    def test_plain_page(self) -> None:
        assert score_page("Welcome", "https://example.com") == 3

    def test_url_only(self) -> None:
        assert score_page("", "about:blank") == 1

    def test_empty(self) -> None:
        assert score_page("", "") == 0


@pytest.mark.asyncio
class TestSelectBestPage:
    async def test_prefers_workspace_window(self, make_page: Callable[..., MagicMock]) -> None:
        other = make_page(title="Welcome", url="https://example.com")
        workbench = make_page(title="main.py - Cursor", url=WORKBENCH_URL)
        assert await select_best_page([other, workbench]) is workbench

    async def test_never_returns_excluded_page(self, make_page: Callable[..., MagicMock]) -> None:
        pages = [
            make_page(title="Cursor DevTools", url="devtools://devtools/inspector.html"),
            make_page(title="Shared Process", url=WORKBENCH_URL),
            make_page(title="", url="chrome-extension://abc/bg.html"),
        ]
        assert await select_best_page(pages) is None

    async def test_ties_keep_enumeration_order(self, make_page: Callable[..., MagicMock]) -> None:
        first = make_page(title="a.py - Cursor", url=WORKBENCH_URL)
        second = make_page(title="b.py - Cursor", url=WORKBENCH_URL)
        assert await select_best_page([first, second]) is first
        assert await select_best_page([second, first]) is second

    async def test_skips_pages_that_fail_to_report_title(
        self, make_page: Callable[..., MagicMock]
    ) -> None:
        closed = make_page(title_error="Target page, context or browser has been closed")
        fallback = make_page(title="Welcome", url="https://example.com")
        assert await select_best_page([closed, fallback]) is fallback

    async def test_empty_list(self) -> None:
        assert await select_best_page([]) is None

    async def test_rank_pages_orders_by_score(self, make_page: Callable[..., MagicMock]) -> None:
        low = make_page(title="", url="about:blank")
        mid = make_page(title="Welcome", url="https://example.com")
        high = make_page(title="main.py - Cursor", url=WORKBENCH_URL)
        excluded = make_page(title="GPU Process", url="")

        ranked = await rank_pages([low, excluded, mid, high])

        assert [page for page, _ in ranked] == [high, mid, low]
        assert [candidate.score for _, candidate in ranked] == [13, 3, 1]
        assert ranked[0][1].title == "main.py - Cursor"
