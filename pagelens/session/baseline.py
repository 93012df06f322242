"""Baseline store — in-memory screenshot baselines keyed by route."""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class BaselineStore:
    """One baseline slot per route, replaced wholesale on every write.

    Route keys are used verbatim: ``"/"`` and ``"/index"`` are different slots.
    Nothing is persisted; the store lives as long as the process.
    """

    def __init__(self) -> None:
        self._images: dict[str, bytes] = {}

    def get_baseline(self, route: str) -> Optional[bytes]:
        """Look up the stored image for a route."""
        return self._images.get(route)

    def set_baseline(self, route: str, image: bytes) -> None:
        """Store ``image`` as the baseline for ``route``, replacing any previous one."""
        self._images[route] = image
        logger.debug("Stored baseline for %s (%d bytes)", route, len(image))
