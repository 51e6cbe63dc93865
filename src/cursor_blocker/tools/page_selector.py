"""Page selection for the Cursor Electron app.

Cursor exposes many CDP targets: the visible workbench windows plus
extension hosts, devtools, shared/GPU processes and workers. This module
scores the targets and picks the one most likely to be the visible window.
"""

from playwright.async_api import Page
from playwright.async_api import Error as PlaywrightError

from cursor_blocker.core.config import PRODUCT_NAME
from cursor_blocker.core.logging import ErrorIds, logForDebugging
from cursor_blocker.models.page import CandidatePage

_BACKGROUND_URL_PREFIXES = ("chrome-extension://", "devtools://", "chrome://")
_BACKGROUND_TITLE_MARKERS = ("shared process", "gpu process", "utility", "worker")
_WORKBENCH_URL_MARKERS = ("vscode-webview://", "vscode-file://")

WORKSPACE_SCORE = 10
TITLE_SCORE = 2
URL_SCORE = 1


def looks_like_background_page(title: str, url: str) -> bool:
    """Check whether a target is a Chromium/Electron background page."""
    t = title.lower()
    u = url.lower()
    if u.startswith(_BACKGROUND_URL_PREFIXES):
        return True
    return any(marker in t for marker in _BACKGROUND_TITLE_MARKERS)


def looks_like_workspace_window(title: str, url: str, product_name: str = PRODUCT_NAME) -> bool:
    """Check whether a target looks like a Cursor/VSCode workbench window."""
    if product_name.lower() in title.lower():
        return True
    u = url.lower()
    return any(marker in u for marker in _WORKBENCH_URL_MARKERS)


def score_page(title: str, url: str, product_name: str = PRODUCT_NAME) -> int | None:
    """Score a target by title and URL.

    Args:
        title: The target title.
        url: The target URL.
        product_name: Name expected in the title of the editor window.

    Returns:
        The score, or None if the target is a background page.
    """
    if looks_like_background_page(title, url):
        return None

    score = 0
    if looks_like_workspace_window(title, url, product_name):
        score += WORKSPACE_SCORE
    if title:
        score += TITLE_SCORE
    if url:
        score += URL_SCORE
    return score


async def rank_pages(
    pages: list[Page],
    product_name: str = PRODUCT_NAME,
) -> list[tuple[Page, CandidatePage]]:
    """Score every page and sort the survivors best first.

    Pages closed while being enumerated are skipped. Ties keep their
    enumeration order.

    Args:
        pages: Pages in enumeration order.
        product_name: Name expected in the title of the editor window.

    Returns:
        (page, candidate) pairs sorted by descending score.
    """
    scored: list[tuple[Page, CandidatePage]] = []
    for page in pages:
        try:
            title = await page.title()
            url = page.url
        except PlaywrightError as e:
            logForDebugging(
                f"[{ErrorIds.PAGE_PROBE_FAILED}] Skipping target: {e.message}",
                level="debug",
            )
            continue

        score = score_page(title, url, product_name)
        if score is None:
            continue
        scored.append((page, CandidatePage(title=title, url=url, score=score)))

    scored.sort(key=lambda item: item[1].score, reverse=True)
    return scored


async def select_best_page(pages: list[Page], product_name: str = PRODUCT_NAME) -> Page | None:
    """Pick the visible Cursor window among the given pages.

    Args:
        pages: Pages in enumeration order.
        product_name: Name expected in the title of the editor window.

    Returns:
        The highest-scoring page, or None if every page was excluded.
    """
    ranked = await rank_pages(pages, product_name)
    if not ranked:
        return None
    return ranked[0][0]
