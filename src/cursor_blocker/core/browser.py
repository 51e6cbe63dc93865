"""CDP session management for the running Cursor process.

This module connects Playwright to Cursor's remote-debugging endpoint and
enumerates the pages exposed by the Electron app. Cursor must be started
with ``--remote-debugging-port=9222`` for the endpoint to exist.
"""

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from cursor_blocker.core.errors import CdpConnectionError


class CdpConnector:
    """Opens CDP sessions through a lazily started Playwright driver.

    One connector is owned by one watcher. The driver is reused across
    reconnects and only shut down by stop().
    """

    def __init__(self) -> None:
        self._playwright: Playwright | None = None

    async def connect(self, cdp_url: str) -> Browser:
        """Attach to an already running Chromium-based process.

        Args:
            cdp_url: HTTP endpoint of the remote-debugging server.

        Returns:
            A connected Playwright Browser.

        Raises:
            CdpConnectionError: If the endpoint is unreachable or rejects the session.
        """
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        try:
            return await self._playwright.chromium.connect_over_cdp(cdp_url)
        except PlaywrightError as e:
            raise CdpConnectionError(cdp_url, e.message) from e

    async def stop(self) -> None:
        """Stop the Playwright driver if it was started."""
        playwright = self._playwright
        self._playwright = None
        if playwright is not None:
            await playwright.stop()


def list_pages(browser: Browser) -> list[Page]:
    """List every page of every context, in enumeration order.

    Args:
        browser: A browser connected over CDP.

    Returns:
        All pages known to the browser, default context first.
    """
    pages: list[Page] = []
    for context in browser.contexts:
        pages.extend(context.pages)
    return pages
