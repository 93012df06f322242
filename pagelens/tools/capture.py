"""Capture tools — viewport, full-page, element and per-route screenshots."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Page

from pagelens.models.results import RouteScreenshot, VisualDiffResult
from pagelens.session.browser import BrowserSession
from pagelens.session.errors import ElementNotFoundError
from pagelens.url_utils import route_key
from pagelens.visual.engine import VisualDiffEngine

logger = logging.getLogger(__name__)


async def capture_page(session: BrowserSession, page: Page, full_page: bool = False) -> bytes:
    """Screenshot the page as PNG bytes."""
    return await page.screenshot(
        full_page=full_page, timeout=session.config.screenshot_timeout_ms,
    )


async def screenshot(
    session: BrowserSession, route: Optional[str] = None, full_page: bool = False,
) -> bytes:
    async with session.operation() as page:
        if route:
            await session.navigate_to_route(page, route)
        return await capture_page(session, page, full_page=full_page)


async def screenshot_element(session: BrowserSession, selector: str) -> bytes:
    async with session.operation() as page:
        element = await page.query_selector(selector)
        if element is None:
            raise ElementNotFoundError(selector)
        return await element.screenshot(timeout=session.config.screenshot_timeout_ms)


async def multi_route_screenshot(
    session: BrowserSession, routes: list[str],
) -> list[RouteScreenshot]:
    """Visit each route in order and capture the viewport."""
    results: list[RouteScreenshot] = []
    async with session.operation() as page:
        for route in routes:
            await session.navigate_to_route(page, route)
            image = await capture_page(session, page)
            results.append(RouteScreenshot(route=route, image=image))
    logger.debug("Captured %d routes", len(results))
    return results


async def visual_diff(
    session: BrowserSession, engine: VisualDiffEngine, route: Optional[str] = None,
) -> VisualDiffResult:
    """Capture the route's viewport and diff it against the previous capture."""
    async with session.operation() as page:
        if route:
            await session.navigate_to_route(page, route)
        image = await capture_page(session, page)
    return engine.compute_diff(route_key(route), image)
