"""Error taxonomy for the browser session and its tools."""

from __future__ import annotations


class LensError(RuntimeError):
    """Base class for failures reported back to a single tool call."""


class NotLaunchedError(LensError):
    """A page was requested before the browser was launched."""


class NavigationTimeoutError(LensError):
    """The target did not settle within the navigation timeout."""

    def __init__(self, url: str, timeout_ms: int):
        super().__init__(f"Navigation to {url} timed out after {timeout_ms}ms")
        self.url = url
        self.timeout_ms = timeout_ms


class ElementNotFoundError(LensError):
    def __init__(self, selector: str):
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class EngineLaunchError(LensError):
    """The browser engine could not be started. Fatal to the whole session."""
