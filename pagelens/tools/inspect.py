"""Inspection tools — DOM element details and page-level geometry."""

from __future__ import annotations

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagelens.models.results import DomInspectResult, PageInfo
from pagelens.session.browser import BrowserSession
from pagelens.session.errors import ElementNotFoundError

STYLE_PROPERTIES = [
    "display",
    "position",
    "width",
    "height",
    "padding",
    "margin",
    "color",
    "background-color",
    "font-size",
    "font-weight",
    "flex-direction",
    "justify-content",
    "align-items",
    "gap",
    "border",
    "border-radius",
    "overflow",
    "opacity",
]

_INSPECT_SCRIPT = """
(el, styleProps) => {
    const computed = window.getComputedStyle(el);
    const styles = {};
    for (const prop of styleProps) {
        styles[prop] = computed.getPropertyValue(prop);
    }
    const rect = el.getBoundingClientRect();
    return {
        tag_name: el.tagName.toLowerCase(),
        id: el.id,
        classes: Array.from(el.classList),
        computed_styles: styles,
        children: Array.from(el.children).map((child) => ({
            tag_name: child.tagName.toLowerCase(),
            id: child.id,
            classes: Array.from(child.classList),
        })),
        bounding_box: {
            x: Math.round(rect.x),
            y: Math.round(rect.y),
            width: Math.round(rect.width),
            height: Math.round(rect.height),
        },
    };
}
"""

_GEOMETRY_SCRIPT = """
() => ({
    scroll_x: Math.round(window.scrollX),
    scroll_y: Math.round(window.scrollY),
    doc_width: document.documentElement.scrollWidth,
    doc_height: document.documentElement.scrollHeight,
})
"""


async def dom_inspect(session: BrowserSession, selector: str) -> DomInspectResult:
    """Return tag, classes, key computed styles, children and bounding box of an element."""
    async with session.operation() as page:
        try:
            handle = await page.wait_for_selector(
                selector, state="attached", timeout=session.config.selector_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(selector) from e
        if handle is None:
            raise ElementNotFoundError(selector)
        data = await handle.evaluate(_INSPECT_SCRIPT, STYLE_PROPERTIES)
    return DomInspectResult(**data)


async def page_info(session: BrowserSession) -> PageInfo:
    async with session.operation() as page:
        viewport = page.viewport_size or {}
        geometry = await page.evaluate(_GEOMETRY_SCRIPT)
        title = await page.title()
        url = page.url
    return PageInfo(
        url=url,
        title=title,
        viewport={"width": viewport.get("width", 0), "height": viewport.get("height", 0)},
        scroll_position={"x": geometry["scroll_x"], "y": geometry["scroll_y"]},
        document_size={"width": geometry["doc_width"], "height": geometry["doc_height"]},
    )
