"""Tool server — exposes the browser session to agents over MCP.

The session is created by the caller and injected into ``create_server``;
each tool call runs against it and reports failures as tool errors without
affecting the session. A browser that cannot be relaunched is fatal: it is
handed to ``on_fatal`` so the caller can stop serving.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Literal, Optional

from mcp.server.fastmcp import FastMCP, Image
from mcp.server.fastmcp.exceptions import ToolError
from playwright.async_api import Error as PlaywrightError

from pagelens.session.browser import BrowserSession
from pagelens.session.errors import EngineLaunchError, LensError
from pagelens.tools import capture, diagnostics, inspect, interact
from pagelens.visual.engine import VisualDiffEngine

logger = logging.getLogger(__name__)

SERVER_NAME = "pagelens"

REPORTED_ERRORS = (LensError, PlaywrightError, ValueError)

FatalHandler = Callable[[EngineLaunchError], None]


@contextmanager
def reported(tool: str, on_fatal: Optional[FatalHandler] = None) -> Iterator[None]:
    """Turn a per-request failure into a tool error for that call only.

    ``EngineLaunchError`` is not per-request: it goes to ``on_fatal`` and is
    re-raised unchanged.
    """
    try:
        yield
    except EngineLaunchError as e:
        logger.error("%s failed, browser is gone: %s", tool, e)
        if on_fatal:
            on_fatal(e)
        raise
    except REPORTED_ERRORS as e:
        logger.warning("%s failed: %s", tool, e)
        raise ToolError(f"Error: {e}") from e


def _png(data: bytes) -> Image:
    return Image(data=data, format="png")


def create_server(
    session: BrowserSession,
    engine: Optional[VisualDiffEngine] = None,
    on_fatal: Optional[FatalHandler] = None,
) -> FastMCP:
    """Create the FastMCP server with every tool bound to ``session``."""
    engine = engine or VisualDiffEngine(session)
    mcp = FastMCP(SERVER_NAME)

    def _reported(tool: str):
        return reported(tool, on_fatal)

    @mcp.tool()
    async def screenshot(route: Optional[str] = None, full_page: bool = False):
        """Take a screenshot of the current page. Returns a PNG image.

        Args:
            route: Navigate to this path first (e.g. '/dashboard').
            full_page: Capture the entire scrollable page instead of just the viewport.
        """
        with _reported("screenshot"):
            return _png(await capture.screenshot(session, route=route, full_page=full_page))

    @mcp.tool()
    async def screenshot_element(selector: str):
        """Screenshot a specific DOM element by CSS selector."""
        with _reported("screenshot_element"):
            return _png(await capture.screenshot_element(session, selector))

    @mcp.tool()
    async def multi_route_screenshot(routes: list[str]):
        """Screenshot several routes in one call, in the order given."""
        with _reported("multi_route_screenshot"):
            shots = await capture.multi_route_screenshot(session, routes)
        content: list = []
        for shot in shots:
            content.append(f"Route: {shot.route}")
            content.append(_png(shot.image))
        return content

    @mcp.tool()
    async def visual_diff(route: Optional[str] = None):
        """Compare the page against the previous capture of the same route.

        The first call for a route captures a baseline. Later calls return a
        diff image with changed pixels in red, then make the new capture the
        baseline for the next call.
        """
        with _reported("visual_diff"):
            result = await capture.visual_diff(session, engine, route=route)
        if result.is_baseline:
            return (
                f"Baseline captured for {result.route}. "
                "Call visual_diff again after making changes to see what changed."
            )
        return [
            f"{result.percent_changed}% of pixels changed "
            f"({result.pixels_different} of {result.total_pixels}) on {result.route}.",
            _png(result.diff_image),
        ]

    @mcp.tool()
    async def console_logs(
        level: Optional[Literal["log", "warn", "error", "info", "debug", "all"]] = None,
    ) -> str:
        """Return console output collected since the last call, then clear the buffer.

        Filtering by level still clears the whole buffer.
        """
        return diagnostics.format_console_entries(diagnostics.console_logs(session, level))

    @mcp.tool()
    async def network_errors() -> str:
        """Return failed network requests collected since the last call, then clear the buffer."""
        return diagnostics.format_network_failures(diagnostics.network_errors(session))

    @mcp.tool()
    async def click(selector: str):
        """Click an element, wait for the network to settle and return a screenshot."""
        with _reported("click"):
            return _png(await interact.click(session, selector))

    @mcp.tool(name="type")
    async def type_text(selector: str, text: str, clear: bool = False):
        """Type text into an input. Set clear to replace the existing value."""
        with _reported("type"):
            return _png(await interact.type_text(session, selector, text, clear=clear))

    @mcp.tool()
    async def navigate(url: str):
        """Navigate to a URL or path relative to the current page and return a screenshot."""
        with _reported("navigate"):
            return _png(await interact.navigate(session, url))

    @mcp.tool()
    async def set_viewport(
        preset: Optional[Literal["mobile", "tablet", "desktop"]] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        """Resize the viewport to a preset or custom size and return a screenshot."""
        with _reported("set_viewport"):
            return _png(await interact.set_viewport(session, preset, width, height))

    @mcp.tool()
    async def dom_inspect(selector: str) -> str:
        """Return tag, classes, computed styles, children and bounding box of an element as JSON."""
        with _reported("dom_inspect"):
            result = await inspect.dom_inspect(session, selector)
        return result.model_dump_json(indent=2)

    @mcp.tool()
    async def page_info() -> str:
        """Return URL, title, viewport, scroll position and document size as JSON."""
        with _reported("page_info"):
            result = await inspect.page_info(session)
        return result.model_dump_json(indent=2)

    @mcp.tool()
    async def toggle_headless() -> str:
        """Switch between headless and visible browser. Baselines and buffers are kept."""
        with _reported("toggle_headless"):
            headless = await session.toggle_headless_mode()
        mode = "headless" if headless else "visible"
        return f"Browser relaunched in {mode} mode. The target will reload on the next call."

    return mcp
