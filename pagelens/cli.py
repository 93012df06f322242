"""CLI entry point for PageLens."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from pagelens.models.config import VIEWPORT_PRESETS, LensConfig, ViewportConfig
from pagelens.server import create_server
from pagelens.session.browser import BrowserSession
from pagelens.session.errors import EngineLaunchError

# stdout carries the tool protocol, everything human-readable goes to stderr
console = Console(stderr=True)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_config(
    url: str,
    headless: Optional[bool],
    viewport: Optional[str],
    config_path: Optional[str],
) -> LensConfig:
    """Merge an optional JSON config file with command-line overrides."""
    if config_path:
        cfg = LensConfig(**{**LensConfig.load(config_path).model_dump(), "target_url": url})
    else:
        cfg = LensConfig(target_url=url)
    if headless is not None:
        cfg.headless = headless
    if viewport:
        cfg.viewport = ViewportConfig.from_preset(viewport)
    return cfg


async def serve(cfg: LensConfig) -> None:
    """Launch the browser, then serve tools over stdio until cancelled.

    A relaunch failure inside a tool call stops the server and is re-raised
    as ``EngineLaunchError``.
    """
    session = BrowserSession(cfg)
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    fatal: list[EngineLaunchError] = []

    def on_fatal(error: EngineLaunchError) -> None:
        fatal.append(error)
        task.cancel()

    handled: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
            handled.append(sig)
        except (NotImplementedError, RuntimeError):  # pragma: no cover - Windows / non-main thread
            logger.debug("Cannot install handler for %s", sig.name)

    try:
        await session.launch()
        logger.info("Browser launched. Will connect to target URL on first tool call.")
        server = create_server(session, on_fatal=on_fatal)
        logger.info("PageLens server running on stdio. Waiting for tool calls...")
        await server.run_stdio_async()
    except asyncio.CancelledError:
        if fatal:
            raise fatal[0]
        logger.info("PageLens shutting down...")
    finally:
        await session.close()
        for sig in handled:
            loop.remove_signal_handler(sig)


@click.command()
@click.argument("url")
@click.option("--headless/--no-headless", default=None,
              help="Run the browser without a window (default) or show it for debugging")
@click.option("--viewport", type=click.Choice(list(VIEWPORT_PRESETS)), default=None,
              help="Initial viewport preset (default: desktop)")
@click.option("--config", "-c", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(url: str, headless: Optional[bool], viewport: Optional[str],
         config_path: Optional[str], verbose: bool) -> None:
    """PageLens — tool server that gives AI agents eyes on your frontend app.

    URL is the address of your running dev server, e.g. http://localhost:3000
    """
    setup_logging(verbose)
    try:
        cfg = build_config(url, headless, viewport, config_path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print("[bold]PageLens starting...[/bold]")
    console.print(f"  Target URL: [blue]{cfg.target_url}[/blue]")
    console.print(f"  Headless:   {cfg.headless}")
    console.print(f"  Viewport:   {cfg.viewport.name} ({cfg.viewport.width}x{cfg.viewport.height})")

    try:
        asyncio.run(serve(cfg))
    except EngineLaunchError as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
