"""Interaction tools — each performs one action and returns a fresh screenshot."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from pagelens.models.config import ViewportConfig
from pagelens.session.browser import BrowserSession
from pagelens.session.errors import ElementNotFoundError

from .capture import capture_page

logger = logging.getLogger(__name__)


async def _wait_for(session: BrowserSession, page: Page, selector: str) -> None:
    try:
        await page.wait_for_selector(selector, timeout=session.config.selector_timeout_ms)
    except PlaywrightTimeoutError as e:
        raise ElementNotFoundError(selector) from e


async def click(session: BrowserSession, selector: str) -> bytes:
    async with session.operation() as page:
        await _wait_for(session, page, selector)
        await page.click(selector)
        try:
            await page.wait_for_load_state(
                "networkidle", timeout=session.config.settle_timeout_ms,
            )
        except PlaywrightTimeoutError:
            logger.debug("Network still busy %dms after clicking %s",
                         session.config.settle_timeout_ms, selector)
        return await capture_page(session, page)


async def type_text(
    session: BrowserSession, selector: str, text: str, clear: bool = False,
) -> bytes:
    """Type into a field. With ``clear`` the existing value is selected first so typing replaces it."""
    async with session.operation() as page:
        await _wait_for(session, page, selector)
        if clear:
            await page.click(selector, click_count=3)
        await page.type(selector, text)
        return await capture_page(session, page)


async def navigate(session: BrowserSession, url: str) -> bytes:
    async with session.operation() as page:
        resolved = await session.navigate_to_route(page, url)
        logger.info("Navigated to %s", resolved)
        return await capture_page(session, page)


async def set_viewport(
    session: BrowserSession,
    preset: Optional[str] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> bytes:
    if preset:
        viewport = ViewportConfig.from_preset(preset)
    elif width and height:
        viewport = ViewportConfig.custom(width, height)
    else:
        raise ValueError("Provide either a preset (mobile/tablet/desktop) or both width and height.")

    async with session.operation() as page:
        await session.set_viewport(page, viewport)
        return await capture_page(session, page)
