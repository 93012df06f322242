"""Browser launch helpers — start Chromium and open a sized page context."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright


async def launch_browser(
    playwright: Playwright,
    headless: bool = True,
    args: Optional[list[str]] = None,
) -> Browser:
    """Launch Chromium in headless or visible mode."""
    return await playwright.chromium.launch(
        headless=headless,
        args=list(args or []),
    )


async def create_context(
    browser: Browser,
    viewport: dict,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create a browser context with the given viewport.

    Args:
        user_agent: Optional override. Playwright's own default is used when
            omitted so the app under test sees a regular Chromium.
    """
    context_kwargs: dict = {"viewport": viewport}
    if user_agent:
        context_kwargs["user_agent"] = user_agent
    return await browser.new_context(**context_kwargs)
