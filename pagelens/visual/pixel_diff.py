"""Pixel diff primitive built on Pillow."""

from __future__ import annotations

import io

from PIL import Image, ImageChops

# Per-channel difference (0-255) a pixel may show before it counts as changed.
# Absorbs anti-aliasing and font-rendering noise, roughly 10% of the range.
PIXEL_TOLERANCE = 25

HIGHLIGHT_COLOR = (255, 0, 0)

# Unchanged pixels are drawn as grayscale faded towards white by this factor
_BACKDROP_ALPHA = 0.1


def decode_png(data: bytes) -> Image.Image:
    """Decode image bytes into an RGBA image."""
    with Image.open(io.BytesIO(data)) as img:
        return img.convert("RGBA")


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def diff_images(
    baseline: Image.Image,
    current: Image.Image,
    tolerance: int = PIXEL_TOLERANCE,
) -> tuple[Image.Image, int]:
    """Compare two same-sized images.

    Returns a diff image (changed pixels in red over a faded grayscale copy of
    ``current``) and the number of pixels whose largest channel difference
    exceeds ``tolerance``.
    """
    if baseline.size != current.size:
        raise ValueError(f"Cannot diff {baseline.size} against {current.size}")

    baseline = baseline.convert("RGBA")
    current = current.convert("RGBA")

    delta = ImageChops.difference(baseline, current)
    r, g, b, a = delta.split()
    peak = ImageChops.lighter(ImageChops.lighter(r, g), ImageChops.lighter(b, a))
    mask = peak.point(lambda v: 255 if v > tolerance else 0)
    changed = mask.histogram()[255]

    backdrop = current.convert("L").point(
        lambda v: int(255 + (v - 255) * _BACKDROP_ALPHA)
    ).convert("RGB")
    highlight = Image.new("RGB", current.size, HIGHLIGHT_COLOR)
    return Image.composite(highlight, backdrop, mask), changed
