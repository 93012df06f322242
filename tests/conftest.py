"""Pytest configuration and shared fixtures."""

import io
from typing import Callable
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image, ImageDraw
from playwright.async_api import Browser, BrowserContext, Page

from pagelens.models.config import LensConfig, ViewportConfig
from pagelens.session.browser import BrowserSession


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def lens_config() -> LensConfig:
    """Create a test configuration pointing at a local dev server."""
    return LensConfig(
        target_url="http://localhost:3000",
        headless=True,
        viewport=ViewportConfig.from_preset("desktop"),
        buffer_capacity=1000,
    )


@pytest.fixture
def temp_config_file(lens_config: LensConfig, tmp_path):
    config_file = tmp_path / "pagelens.json"
    lens_config.save(config_file)
    return config_file


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Return a factory building PNG bytes in memory.

    ``boxes`` is a list of ((x0, y0, x1, y1), color) rectangles drawn on top
    of the background.
    """

    def _make(width: int = 100, height: int = 80, color=(255, 255, 255), boxes=None) -> bytes:
        img = Image.new("RGB", (width, height), color)
        draw = ImageDraw.Draw(img)
        for box, fill in boxes or []:
            draw.rectangle(box, fill=fill)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    return _make


# ============================================================================
# Playwright Fixtures
# ============================================================================


@pytest.fixture
def page_callbacks() -> dict:
    """Event name -> handler, filled in when the session registers listeners."""
    return {}


@pytest.fixture
def mock_page(page_callbacks: dict) -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "http://localhost:3000/"
    page.viewport_size = {"width": 1280, "height": 720}
    page.on = Mock(side_effect=lambda event, cb: page_callbacks.update({event: cb}))
    page.title = AsyncMock(return_value="Dev App")
    page.goto = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"")
    page.click = AsyncMock()
    page.type = AsyncMock()
    page.query_selector = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.set_viewport_size = AsyncMock()
    page.evaluate = AsyncMock()
    page.close = AsyncMock()
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    context.close = AsyncMock()
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def session(lens_config: LensConfig) -> BrowserSession:
    """A session that has not been launched."""
    return BrowserSession(lens_config)


@pytest.fixture
def launched_session(session: BrowserSession, mock_page, mock_context, mock_browser) -> BrowserSession:
    """A session in the launched-but-not-connected state, wired to mocks."""
    session._playwright = AsyncMock()
    session._browser = mock_browser
    session._context = mock_context
    session._page = mock_page
    session._attach_listeners(mock_page)
    return session


@pytest.fixture
def connected_session(launched_session: BrowserSession) -> BrowserSession:
    """A session whose first navigation already happened."""
    launched_session._connected = True
    return launched_session
