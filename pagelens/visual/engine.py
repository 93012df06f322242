"""Visual diff engine — compares each capture against the route's last capture."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from pagelens.models.results import VisualDiffResult

from .pixel_diff import PIXEL_TOLERANCE, decode_png, diff_images, encode_png

logger = logging.getLogger(__name__)


class BaselineAccess(Protocol):
    def get_baseline(self, route: str) -> Optional[bytes]: ...

    def set_baseline(self, route: str, image: bytes) -> object: ...


class VisualDiffEngine:
    """Decides between capturing a baseline and diffing against it.

    The baseline rolls forward: after every call the submitted capture is the
    new baseline, so each diff measures change since the previous call for
    that route rather than drift from the first capture.
    """

    def __init__(self, baselines: BaselineAccess, tolerance: int = PIXEL_TOLERANCE):
        self.baselines = baselines
        self.tolerance = tolerance

    def compute_diff(self, route: str, capture: bytes) -> VisualDiffResult:
        stored = self.baselines.get_baseline(route)
        if stored is None:
            logger.info("No baseline for %s, capturing one", route)
            self.baselines.set_baseline(route, capture)
            return VisualDiffResult(route=route, is_baseline=True)

        baseline = decode_png(stored)
        current = decode_png(capture)
        if baseline.size != current.size:
            logger.info("Viewport changed for %s (%dx%d -> %dx%d), resetting baseline",
                        route, *baseline.size, *current.size)
            self.baselines.set_baseline(route, capture)
            return VisualDiffResult(route=route, is_baseline=True)

        diff, pixels_different = diff_images(baseline, current, self.tolerance)
        width, height = current.size
        total_pixels = width * height
        percent_changed = round(pixels_different / total_pixels * 100, 2) if total_pixels else 0.0

        self.baselines.set_baseline(route, capture)
        logger.debug("Diff for %s: %d/%d pixels (%.2f%%)",
                     route, pixels_different, total_pixels, percent_changed)
        return VisualDiffResult(
            route=route,
            is_baseline=False,
            diff_image=encode_png(diff),
            percent_changed=percent_changed,
            pixels_different=pixels_different,
            total_pixels=total_pixels,
        )
