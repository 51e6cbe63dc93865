"""CDP watcher for Cursor's AI generation state.

This module provides CursorCdpWatcher, which keeps a remote-debugging
session to Cursor alive, tracks the visible workbench window and polls its
DOM for the composer's "generating" marker. Every observation and every
lifecycle transition is published as a DomSnapshot.

All work runs as asyncio tasks on one event loop:
- the connect loop (connect, select page, re-check the page periodically)
- the fast poll (basic signal)
- the diagnostic poll (signal plus optional button samples)

Page selection and observation share one lock. A poll tick that finds the
lock held is skipped instead of queued.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any, NamedTuple, Protocol

from playwright.async_api import Browser, Page
from playwright.async_api import Error as PlaywrightError

from cursor_blocker.core.browser import CdpConnector, list_pages
from cursor_blocker.core.config import PRODUCT_NAME, WatcherConfig
from cursor_blocker.core.errors import DisconnectNotification, EvaluationError, SelectionMiss
from cursor_blocker.core.logging import ErrorIds, logError, logEvent, logForDebugging
from cursor_blocker.core.publisher import SnapshotPublisher
from cursor_blocker.models.snapshot import DebugDump, DomSnapshot
from cursor_blocker.tools.detection import COMPOSER_STRATEGY, DetectionStrategy, extract_signal
from cursor_blocker.tools.page_selector import select_best_page

SnapshotListener = Callable[[DomSnapshot], None]


class Connector(Protocol):
    """Opens CDP sessions. CdpConnector is the production implementation."""

    async def connect(self, cdp_url: str) -> Browser: ...

    async def stop(self) -> None: ...


class _LoggedState(NamedTuple):
    connected: bool
    generating: bool
    title: str | None
    url: str | None


class CursorCdpWatcher:
    """Observe Cursor over CDP and publish DomSnapshots.

    The watcher owns the browser handle and the selected page. Callers
    control its lifecycle with start()/stop() and read results through
    subscribe() or get_snapshot().
    """

    def __init__(
        self,
        config: WatcherConfig | None = None,
        strategy: DetectionStrategy = COMPOSER_STRATEGY,
        connector: Connector | None = None,
        clock: Callable[[], float] = time.monotonic,
        product_name: str = PRODUCT_NAME,
    ) -> None:
        """Initialize the watcher.

        Args:
            config: Endpoint, intervals and diagnostics toggle. Defaults to WatcherConfig().
            strategy: DOM queries used to detect generation.
            connector: Opens CDP sessions. Defaults to a Playwright CdpConnector.
            clock: Monotonic clock used for snapshot timestamps.
            product_name: Name expected in the title of the editor window.
        """
        self._config = config or WatcherConfig()
        self._strategy = strategy
        self._connector: Connector = connector or CdpConnector()
        self._clock = clock
        self._product_name = product_name

        self._browser: Browser | None = None
        self._page: Page | None = None
        self._running = False
        self._lock = asyncio.Lock()
        self._disconnected = asyncio.Event()

        self._connect_task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._debug_task: asyncio.Task[None] | None = None
        self._close_task: asyncio.Task[None] | None = None
        self._stopped_tasks: list[asyncio.Task[None]] = []

        self._publisher: SnapshotPublisher[DomSnapshot] = SnapshotPublisher(
            DomSnapshot(updated_at=self._clock(), error="Not connected"),
            order_key=lambda s: s.updated_at,
        )
        self._last_logged = _LoggedState(False, False, None, None)
        self._last_printed_debug_at: float | None = None

    @property
    def running(self) -> bool:
        """True between start() and stop()."""
        return self._running

    @property
    def polling(self) -> bool:
        """True while the poll timers are active."""
        return self._poll_task is not None

    def start(self) -> None:
        """Start the connect loop on the running event loop. Idempotent."""
        if self._running or self._publisher.closed:
            return
        self._running = True
        logEvent("watcher_start", {"cdp_url": self._config.cdp_url, "strategy": self._strategy.name})
        self._connect_task = asyncio.get_running_loop().create_task(self._connect_loop())

    def stop(self) -> None:
        """Halt all timers and stop publishing.

        The last snapshot stays readable through get_snapshot(). The browser
        is closed in the background; await aclose() to wait for it.
        """
        if not self._running:
            return
        self._running = False
        self._stopped_tasks = [
            task
            for task in (self._connect_task, self._poll_task, self._debug_task)
            if task is not None
        ]
        self._stop_polling()
        if self._connect_task is not None:
            self._connect_task.cancel()
            self._connect_task = None
        self._publisher.close()

        browser = self._browser
        self._browser = None
        self._page = None
        if browser is not None:
            self._close_task = asyncio.get_running_loop().create_task(self._close_browser(browser))
        logEvent("watcher_stop")

    async def aclose(self) -> None:
        """Stop the watcher, wait for its tasks and the browser, then stop the driver."""
        self.stop()
        current = asyncio.current_task()
        pending = [task for task in self._stopped_tasks if task is not current]
        self._stopped_tasks = []
        await asyncio.gather(*pending, return_exceptions=True)
        if self._close_task is not None:
            await self._close_task
            self._close_task = None
        await self._connector.stop()

    def subscribe(self, callback: SnapshotListener) -> Callable[[], None]:
        """Receive the current snapshot now and every later snapshot.

        Args:
            callback: Called synchronously with each DomSnapshot.

        Returns:
            A function that unsubscribes the callback.
        """
        return self._publisher.subscribe(callback)

    def get_snapshot(self) -> DomSnapshot:
        """Return the latest snapshot."""
        return self._publisher.get_current()

    def _publish(self, **fields: Any) -> None:
        fields.setdefault("updated_at", self._clock())
        snapshot = DomSnapshot(**fields)
        if not self._publisher.publish(snapshot):
            return

        state = _LoggedState(
            snapshot.connected,
            snapshot.generating,
            snapshot.page_title,
            snapshot.page_url,
        )
        if state != self._last_logged:
            self._last_logged = state
            logForDebugging(
                f"state connected={str(state.connected).lower()} "
                f"generating={str(state.generating).lower()} title={state.title!r}",
                level="info",
            )

    async def _connect_loop(self) -> None:
        cdp_url = self._config.cdp_url
        while self._running:
            try:
                if self._browser is None:
                    self._publish(connected=False, error=f"Connecting to {cdp_url}...")
                    logForDebugging(
                        f"connecting to {cdp_url} (retry every {self._config.connect_retry}s)",
                        level="info",
                    )
                    browser = await self._connector.connect(cdp_url)
                    if not self._running:
                        await self._close_browser(browser)
                        return
                    self._browser = browser
                    self._disconnected.clear()
                    browser.on("disconnected", self._on_disconnected)
                    logEvent("cdp_connected", {"cdp_url": cdp_url})

                browser = self._browser
                try:
                    async with self._lock:
                        self._page = await self._select_page()
                except SelectionMiss as miss:
                    self._page = None
                    # A disconnect during selection already published connected=False
                    if self._running and self._browser is browser:
                        self._publish(connected=True, error=str(miss))
                        logForDebugging(
                            f"[{ErrorIds.PAGE_NOT_FOUND}] connected, but no suitable page found; "
                            "retrying page selection",
                            level="info",
                        )
                    await asyncio.sleep(self._config.connect_retry)
                    continue

                await self._refresh_once(False)
                self._start_polling()
                await self._watch_page()

                if self._running and self._browser is None:
                    await asyncio.sleep(self._config.connect_retry)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await self._teardown(str(e) or "Failed to connect to Cursor")
                await asyncio.sleep(self._config.connect_retry)

    async def _select_page(self) -> Page:
        browser = self._browser
        if browser is None:
            raise DisconnectNotification(self._config.cdp_url)
        page = await select_best_page(list_pages(browser), self._product_name)
        if page is None:
            raise SelectionMiss()
        return page

    async def _watch_page(self) -> None:
        """Re-run page selection until the session drops."""
        while self._running and self._browser is not None:
            try:
                await asyncio.wait_for(
                    self._disconnected.wait(), timeout=self._config.page_recheck_interval
                )
                return
            except asyncio.TimeoutError:
                pass
            if self._browser is None:
                return

            try:
                async with self._lock:
                    next_page = await self._select_page()
            except SelectionMiss:
                continue
            if next_page is not self._page:
                self._page = next_page
                logEvent("page_switched")
                await self._refresh_once(True)

    def _on_disconnected(self, browser: Browser) -> None:
        if browser is not self._browser or not self._running:
            return
        notification = DisconnectNotification(self._config.cdp_url)
        self._browser = None
        self._page = None
        self._stop_polling()
        self._disconnected.set()
        self._publish(connected=False, error=str(notification))
        logError(ErrorIds.CDP_DISCONNECTED, "disconnected from CDP; will retry")

    async def _teardown(self, reason: str) -> None:
        self._stop_polling()
        browser = self._browser
        self._browser = None
        self._page = None
        if browser is not None:
            await self._close_browser(browser)
        self._publish(connected=False, error=reason)
        logError(ErrorIds.CDP_CONNECT_FAILED, f"connect error: {reason}")

    async def _close_browser(self, browser: Browser) -> None:
        try:
            await browser.close()
        except PlaywrightError as e:
            logForDebugging(
                f"[{ErrorIds.CDP_CLOSE_FAILED}] browser close failed: {e.message}",
                level="debug",
            )

    def _start_polling(self) -> None:
        if self._poll_task is not None or self._browser is None:
            return
        loop = asyncio.get_running_loop()
        self._poll_task = loop.create_task(self._poll_loop(self._config.check_interval, False))
        self._debug_task = loop.create_task(self._poll_loop(self._config.debug_interval, True))

    def _stop_polling(self) -> None:
        for task in (self._poll_task, self._debug_task):
            if task is not None:
                task.cancel()
        self._poll_task = None
        self._debug_task = None

    async def _poll_loop(self, interval: float, include_debug: bool) -> None:
        while True:
            await asyncio.sleep(interval)
            if self._lock.locked():
                continue
            await self._refresh_once(include_debug)

    async def _refresh_once(self, include_debug: bool) -> None:
        async with self._lock:
            await self._observe(include_debug)

    async def _observe(self, include_debug: bool) -> None:
        now = self._clock()
        page = self._page
        browser = self._browser
        if page is None or browser is None:
            return

        last = self.get_snapshot()
        title = last.page_title
        url = last.page_url
        try:
            title = await page.title()
            url = page.url
        except PlaywrightError:
            # Keep the last known identity; evaluation below reports the failure
            pass

        include_dump = include_debug and self._config.debug
        try:
            result = await extract_signal(page, include_dump, self._strategy)
        except EvaluationError as e:
            if not self._is_current(page, browser):
                return
            self._publish(
                connected=True,
                page_title=title,
                page_url=url,
                updated_at=now,
                error=str(e) or "Failed to evaluate DOM",
            )
            logError(ErrorIds.DOM_EVALUATE_FAILED, f"evaluate error: {e}")
            return

        if not self._is_current(page, browser):
            return
        self._publish(
            connected=True,
            page_title=title,
            page_url=url,
            generating=result.generating,
            debug=result.debug,
            updated_at=now,
        )
        if include_dump and result.debug is not None:
            self._log_debug_dump(result.debug, now)

    def _is_current(self, page: Page, browser: Browser) -> bool:
        return self._running and self._page is page and self._browser is browser

    def _log_debug_dump(self, dump: DebugDump, now: float) -> None:
        last = self._last_printed_debug_at
        if last is not None and now - last < self._config.debug_interval - 0.05:
            return
        self._last_printed_debug_at = now

        samples = dump.button_samples
        shown = samples[: self._config.debug_log_limit]
        lines = ["[SelectorDebug] Buttons in chat/sidebar (sample):"]
        for b in shown:
            aria = f'aria="{b.aria_label}"' if b.aria_label else "aria=-"
            text = f'text="{b.text}"' if b.text else "text=-"
            cls = f'class="{b.class_name}"' if b.class_name else "class=-"
            lines.append(f"  - {aria} {text} {cls}")
        if len(samples) > len(shown):
            lines.append(f"  ... +{len(samples) - len(shown)} more buttons")
        logForDebugging("\n".join(lines), level="info")
