"""Browser session — owns the single browser connection, page and diagnostic buffers."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    ConsoleMessage,
    Error as PlaywrightError,
    Page,
    Playwright,
    Request,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from pagelens.models.config import LensConfig, ViewportConfig
from pagelens.models.events import DiagnosticEntry, NetworkFailure, normalize_kind
from pagelens.url_utils import resolve_url
from pagelens.utils.launcher import create_context, launch_browser

from .baseline import BaselineStore
from .buffer import BoundedBuffer
from .errors import EngineLaunchError, NavigationTimeoutError, NotLaunchedError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNLAUNCHED = "unlaunched"
    LAUNCHED = "launched"  # page open, target not yet visited
    CONNECTED = "connected"


class BrowserSession:
    """A single Playwright page on the app under test, connected on first use.

    ``launch()`` starts the browser and opens the page without navigating, so
    the tool server can start answering calls right away. The first
    ``get_page()`` navigates to the target URL. The baseline store and the
    event buffers belong to the session object, not to a connection, and
    survive a headless toggle.
    """

    def __init__(self, config: LensConfig):
        self.config = config
        self.headless = config.headless
        self.viewport: ViewportConfig = config.viewport.model_copy()
        self.baselines = BaselineStore()
        self.diagnostics: BoundedBuffer[DiagnosticEntry] = BoundedBuffer(
            config.buffer_capacity, name="console buffer"
        )
        self.network_failures: BoundedBuffer[NetworkFailure] = BoundedBuffer(
            config.buffer_capacity, name="network buffer"
        )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._connected = False

        self._connect_lock = asyncio.Lock()
        self._operation_lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        if self._page is None:
            return SessionState.UNLAUNCHED
        if not self._connected:
            return SessionState.LAUNCHED
        return SessionState.CONNECTED

    @property
    def connected(self) -> bool:
        return self._connected

    # -- Lifecycle -------------------------------------------------------------

    async def launch(self) -> None:
        """Start the browser and open one page. Does not navigate."""
        logger.info("Launching Chromium (headless=%s, viewport=%dx%d)",
                    self.headless, self.viewport.width, self.viewport.height)
        try:
            self._playwright = await async_playwright().start()
            self._browser = await launch_browser(
                self._playwright, headless=self.headless, args=self.config.browser_args,
            )
            self._context = await create_context(
                self._browser, self.viewport.as_size(), user_agent=self.config.user_agent,
            )
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            await self._teardown()
            raise EngineLaunchError(f"Failed to launch browser: {e}") from e

        self._connected = False
        self._attach_listeners(self._page)
        logger.debug("Browser launched; target %s will load on first use",
                     self.config.target_url)

    async def get_page(self) -> Page:
        """Return the page, navigating to the target URL on the first call."""
        page = self._page
        if page is None:
            raise NotLaunchedError("Browser not launched. Call launch() first.")
        async with self._connect_lock:
            if not self._connected:
                logger.info("Connecting to %s", self.config.target_url)
                await self.goto(
                    page, self.config.target_url,
                    timeout_ms=self.config.initial_navigation_timeout_ms,
                )
                self._connected = True
        return page

    @asynccontextmanager
    async def operation(self) -> AsyncIterator[Page]:
        """Hold the page exclusively for one tool operation."""
        async with self._operation_lock:
            yield await self.get_page()

    async def goto(self, page: Page, url: str, timeout_ms: Optional[int] = None) -> None:
        """Navigate and wait for the network to go quiet, bounded by a timeout."""
        timeout_ms = timeout_ms or self.config.navigation_timeout_ms
        try:
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(url, timeout_ms) from e

    async def navigate_to_route(self, page: Page, route: str) -> str:
        """Resolve ``route`` against the current URL and navigate there."""
        url = resolve_url(route, page.url)
        await self.goto(page, url)
        return url

    async def toggle_headless_mode(self) -> bool:
        """Relaunch the browser in the opposite mode and return the new mode.

        The old browser is fully closed before the new one starts. The next
        ``get_page()`` navigates to the target again. If the relaunch fails
        the mode is left unchanged and ``EngineLaunchError`` propagates.
        """
        async with self._operation_lock:
            previous = self.headless
            logger.info("Switching to %s mode", "visible" if previous else "headless")
            await self._teardown()
            self.headless = not previous
            try:
                await self.launch()
            except EngineLaunchError:
                self.headless = previous
                raise
        return self.headless

    async def set_viewport(self, page: Page, viewport: ViewportConfig) -> None:
        await page.set_viewport_size(viewport.as_size())
        self.viewport = viewport

    async def close(self) -> None:
        """Close the browser. Safe to call more than once."""
        if self._playwright is None and self._page is None:
            return
        logger.info("Closing browser session")
        await self._teardown()

    async def _teardown(self) -> None:
        for name, resource in (("page", self._page), ("context", self._context),
                               ("browser", self._browser)):
            if resource is None:
                continue
            try:
                await resource.close()
            except PlaywrightError as e:
                logger.warning("Ignoring error while closing %s: %s", name, e)
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                logger.warning("Ignoring error while stopping Playwright: %s", e)
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        self._connected = False

    # -- Diagnostics -----------------------------------------------------------

    def _attach_listeners(self, page: Page) -> None:
        """Feed console output, page errors and failed requests into the buffers."""
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        page.on("requestfailed", self._on_request_failed)

    def _on_console(self, msg: ConsoleMessage) -> None:
        self.diagnostics.push(DiagnosticEntry(kind=normalize_kind(msg.type), text=msg.text))

    def _on_page_error(self, error: Exception) -> None:
        text = getattr(error, "message", None) or str(error)
        self.diagnostics.push(DiagnosticEntry(kind="error", text=text))

    def _on_request_failed(self, request: Request) -> None:
        self.network_failures.push(NetworkFailure(
            url=request.url,
            method=request.method,
            error_text=request.failure or "Unknown error",
        ))

    def drain_diagnostics(self, kind: Optional[str] = None) -> list[DiagnosticEntry]:
        """Return and clear console output, optionally keeping only one kind.

        The buffer is always emptied in full; entries of other kinds are
        discarded.
        """
        if not kind or kind == "all":
            return self.diagnostics.drain()
        return self.diagnostics.drain(lambda entry: entry.kind == kind)

    def drain_network_failures(self) -> list[NetworkFailure]:
        return self.network_failures.drain()

    # -- Baselines -------------------------------------------------------------

    def get_baseline(self, route: str) -> Optional[bytes]:
        return self.baselines.get_baseline(route)

    def set_baseline(self, route: str, image: bytes) -> None:
        self.baselines.set_baseline(route, image)
