"""CLI entry point for cursor-blocker."""

import argparse
import asyncio

from rich.console import Console
from rich.panel import Panel

from cursor_blocker.core.config import (
    DEBUG_ENV_VAR,
    DEFAULT_CDP_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    WatcherConfig,
    debug_enabled,
)
from cursor_blocker.core.logging import LOG_LEVELS, ErrorIds, configure_logging, logError
from cursor_blocker.core.state import CursorState
from cursor_blocker.core.watcher import CursorCdpWatcher
from cursor_blocker.models.message import StateMessage
from cursor_blocker.server import serve

console = Console()


def render_state(message: StateMessage) -> str:
    """Format a state message as a rich markup line."""
    if message.blocked:
        status = "[bold red]BLOCKED[/bold red]"
    else:
        status = "[bold green]WORKING[/bold green]"
    return f"{status} [dim]sessions={message.sessions} working={message.working}[/dim]"


def port_number(value: str) -> int:
    """argparse type for a TCP port in 1-65535."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("Invalid port number") from None
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError("Invalid port number")
    return port


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cursor-blocker",
        description="Cursor Blocker - block distracting sites unless Cursor AI is actively generating code",
    )
    parser.add_argument(
        "--port",
        type=port_number,
        default=DEFAULT_PORT,
        help=f"Server port (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Interface to listen on (default: {DEFAULT_HOST})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Log button samples from the chat/sidebar every few seconds (same as {DEBUG_ENV_VAR}=1)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=LOG_LEVELS,
        help="Console log level (default: info)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write debug-level logs to this file",
    )
    return parser


async def run(debug: bool, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Run the watcher and the extension relay, printing every state change.

    Args:
        debug: Whether diagnostic polls include button samples.
        host: Interface the relay listens on.
        port: Port the relay listens on.
    """
    state = CursorState(CursorCdpWatcher(WatcherConfig(debug=debug)))
    state.start()
    unsubscribe = state.subscribe(lambda message: console.print(render_state(message)))
    try:
        await serve(state, host, port)
    finally:
        unsubscribe()
        await state.aclose()


def main() -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args()
    configure_logging(args.log_level, args.log_file)

    console.print(Panel.fit(
        "[bold cyan]Cursor Blocker Server[/bold cyan]\n"
        f"HTTP:      http://{args.host}:{args.port}\n"
        f"WebSocket: ws://{args.host}:{args.port}/ws\n"
        f"[dim]Connecting to Cursor (CDP) at {DEFAULT_CDP_URL}[/dim]\n"
        "[dim]Start Cursor with --remote-debugging-port=9222[/dim]",
        title="Welcome",
    ))

    try:
        asyncio.run(run(args.debug or debug_enabled(), args.host, args.port))
    except KeyboardInterrupt:
        logError(ErrorIds.KEYBOARD_INTERRUPT, "Interrupted by user")
        console.print("\n[yellow]Shutting down...[/yellow]")


if __name__ == "__main__":
    main()
