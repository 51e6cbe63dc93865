#!/usr/bin/env python3
"""List the CDP targets exposed by Cursor and how the page selector ranks them.

Useful when the watcher reports "no suitable page found": it shows every
target, its score (or why it was excluded) and which one would be observed.

Usage:
    uv run python scripts/list_targets.py [--cdp-url http://127.0.0.1:9222]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.table import Table

from cursor_blocker.core.browser import CdpConnector, list_pages
from cursor_blocker.core.config import DEFAULT_CDP_URL
from cursor_blocker.core.errors import CdpConnectionError
from cursor_blocker.core.logging import ErrorIds, logError
from cursor_blocker.tools.page_selector import rank_pages, score_page
from playwright.async_api import Error as PlaywrightError

console = Console()


async def list_targets(cdp_url: str) -> int:
    """Print a table of targets and return a process exit code."""
    connector = CdpConnector()
    try:
        try:
            browser = await connector.connect(cdp_url)
        except CdpConnectionError as e:
            logError(ErrorIds.CDP_CONNECT_FAILED, str(e))
            console.print(f"[red]{e}[/red]")
            return 1

        pages = list_pages(browser)
        ranked = await rank_pages(pages)
        best = ranked[0][0] if ranked else None

        table = Table(title=f"CDP targets at {cdp_url}")
        table.add_column("#", justify="right")
        table.add_column("Title")
        table.add_column("URL", overflow="fold")
        table.add_column("Score", justify="right")

        for i, page in enumerate(pages):
            try:
                title = await page.title()
            except PlaywrightError as e:
                table.add_row(str(i), "[dim]-[/dim]", page.url, f"[red]{e.message}[/red]")
                continue
            score = score_page(title, page.url)
            marker = " [bold green]<- selected[/bold green]" if page is best else ""
            score_text = "[dim]excluded[/dim]" if score is None else str(score)
            table.add_row(str(i), title, page.url, score_text + marker)

        console.print(table)
        if best is None:
            console.print("[yellow]No suitable page found.[/yellow]")
        await browser.close()
        return 0
    finally:
        await connector.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="List Cursor CDP targets and their selection scores")
    parser.add_argument(
        "--cdp-url",
        default=DEFAULT_CDP_URL,
        help=f"Remote-debugging endpoint (default: {DEFAULT_CDP_URL})",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(list_targets(args.cdp_url)))


if __name__ == "__main__":
    main()
