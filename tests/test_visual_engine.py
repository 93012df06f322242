"""Tests for the pixel diff primitive and the visual diff engine."""

import io

import pytest
from PIL import Image

from pagelens.session.baseline import BaselineStore
from pagelens.visual.engine import VisualDiffEngine
from pagelens.visual.pixel_diff import (
    HIGHLIGHT_COLOR,
    PIXEL_TOLERANCE,
    decode_png,
    diff_images,
)


class TestDiffImages:
    """Tests for diff_images."""

    def test_identical_images(self, make_png):
        img = decode_png(make_png(50, 40))
        diff, changed = diff_images(img, img.copy())

        assert changed == 0
        assert diff.size == (50, 40)
        assert diff.getpixel((10, 10)) != HIGHLIGHT_COLOR

    def test_counts_changed_block(self, make_png):
        before = decode_png(make_png(100, 100))
        after = decode_png(make_png(100, 100, boxes=[((0, 0, 9, 9), (0, 0, 0))]))

        diff, changed = diff_images(before, after)

        assert changed == 100
        assert diff.getpixel((5, 5)) == HIGHLIGHT_COLOR
        assert diff.getpixel((50, 50)) != HIGHLIGHT_COLOR

    def test_sub_tolerance_noise_ignored(self, make_png):
        shade = 255 - (PIXEL_TOLERANCE - 5)
        before = decode_png(make_png(20, 20))
        after = decode_png(make_png(20, 20, color=(shade, shade, shade)))

        _, changed = diff_images(before, after)

        assert changed == 0

    def test_single_channel_over_tolerance_counts(self, make_png):
        before = decode_png(make_png(20, 20, color=(100, 100, 100)))
        after = decode_png(make_png(20, 20, color=(100, 100, 100 + PIXEL_TOLERANCE + 1)))

        _, changed = diff_images(before, after)

        assert changed == 400

    def test_size_mismatch_raises(self, make_png):
        with pytest.raises(ValueError):
            diff_images(decode_png(make_png(10, 10)), decode_png(make_png(10, 11)))


class TestVisualDiffEngine:
    """Baseline lifecycle and rolling comparison."""

    def test_first_call_captures_baseline(self, make_png):
        store = BaselineStore()
        engine = VisualDiffEngine(store)
        capture = make_png()

        result = engine.compute_diff("/", capture)

        assert result.is_baseline is True
        assert result.diff_image is None
        assert result.percent_changed is None
        assert store.get_baseline("/") == capture

    def test_identical_capture_reports_no_change(self, make_png):
        engine = VisualDiffEngine(BaselineStore())
        engine.compute_diff("/", make_png())

        result = engine.compute_diff("/", make_png())

        assert result.is_baseline is False
        assert result.pixels_different == 0
        assert result.percent_changed == 0.0
        assert result.total_pixels == 100 * 80

    def test_change_percentage_rounded(self, make_png):
        engine = VisualDiffEngine(BaselineStore())
        engine.compute_diff("/", make_png(30, 30))

        # 10x10 block of 900 pixels = 11.111...%
        result = engine.compute_diff("/", make_png(30, 30, boxes=[((0, 0, 9, 9), (255, 0, 0))]))

        assert result.pixels_different == 100
        assert result.total_pixels == 900
        assert result.percent_changed == 11.11

    def test_diff_image_matches_capture_size(self, make_png):
        engine = VisualDiffEngine(BaselineStore())
        engine.compute_diff("/", make_png(40, 30))

        result = engine.compute_diff("/", make_png(40, 30, boxes=[((0, 0, 3, 3), (0, 0, 0))]))

        with Image.open(io.BytesIO(result.diff_image)) as diff:
            assert diff.format == "PNG"
            assert diff.size == (40, 30)

    def test_dimension_change_resets_baseline(self, make_png):
        store = BaselineStore()
        engine = VisualDiffEngine(store)
        engine.compute_diff("/", make_png(100, 80))
        resized = make_png(375, 812, boxes=[((0, 0, 50, 50), (0, 0, 0))])

        result = engine.compute_diff("/", resized)

        assert result.is_baseline is True
        assert result.pixels_different is None
        assert store.get_baseline("/") == resized

    def test_baseline_rolls_forward(self, make_png):
        store = BaselineStore()
        engine = VisualDiffEngine(store)
        first = make_png()
        second = make_png(boxes=[((10, 10, 30, 30), (0, 0, 255))])

        engine.compute_diff("/", first)
        changed = engine.compute_diff("/", second)
        again = engine.compute_diff("/", second)

        assert changed.pixels_different > 0
        assert store.get_baseline("/") == second
        assert again.is_baseline is False
        assert again.pixels_different == 0

    def test_routes_are_independent(self, make_png):
        engine = VisualDiffEngine(BaselineStore())
        engine.compute_diff("/", make_png())

        result = engine.compute_diff("/dashboard", make_png())

        assert result.is_baseline is True
