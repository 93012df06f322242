"""Shared URL utilities — resolve tool routes against the page being viewed."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse


def resolve_url(route: str, base_url: str) -> str:
    """Resolve a route (``/dashboard``) or absolute URL against ``base_url``."""
    return urljoin(base_url, route)


def route_key(route: str | None) -> str:
    """Return the baseline key for a route; no route means the root page."""
    return route or "/"


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
