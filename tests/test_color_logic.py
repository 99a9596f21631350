import unittest

import numpy as np

from rasteredit.domain.types import PixelBuffer
from rasteredit.features.color.logic import (
    FILTER_RECIPES,
    adjust_colors,
    apply_contrast,
    apply_filter_recipe,
    apply_hue_rotation,
    apply_named_filter,
)
from rasteredit.features.color.models import ColorAdjustment, FilterKind, FilterSelection


def _pixel(rgba):
    return PixelBuffer.filled(1, 1, rgba)


def _random_buffer(h=16, w=16, seed=0):
    rng = np.random.default_rng(seed)
    return PixelBuffer(rng.integers(0, 256, size=(h, w, 4), dtype=np.uint8))


class TestSliders(unittest.TestCase):
    def test_identity_returns_equal_buffer(self):
        buf = _random_buffer()
        res = adjust_colors(buf, ColorAdjustment(), FilterSelection())
        self.assertEqual(res, buf)
        self.assertIsNot(res.pixels, buf.pixels)

    def test_brightness_scales_channels(self):
        res = adjust_colors(_pixel((200, 100, 50, 255)), ColorAdjustment(brightness=50.0), FilterSelection())
        self.assertEqual(tuple(res.pixels[0, 0]), (100, 50, 25, 255))

    def test_brightness_clamps_at_white(self):
        res = adjust_colors(_pixel((200, 100, 50, 255)), ColorAdjustment(brightness=200.0), FilterSelection())
        self.assertEqual(tuple(res.pixels[0, 0]), (255, 200, 100, 255))

    def test_zero_contrast_is_mid_grey(self):
        res = adjust_colors(_random_buffer(), ColorAdjustment(contrast=0.0), FilterSelection())
        self.assertTrue(np.all(res.pixels[..., :3] == 128))

    def test_contrast_stretches_around_128(self):
        rgb = np.array([[[100.0, 128.0, 150.0]]], dtype=np.float32)
        res = apply_contrast(rgb, 2.0)
        self.assertTrue(np.allclose(res, [[[72.0, 128.0, 172.0]]]))

    def test_zero_saturation_is_bt601_luma(self):
        # 0.299 * 200 + 0.587 * 100 + 0.114 * 50 = 124.2
        res = adjust_colors(_pixel((200, 100, 50, 255)), ColorAdjustment(saturation=0.0), FilterSelection())
        self.assertEqual(tuple(res.pixels[0, 0]), (124, 124, 124, 255))

    def test_hue_rotation_red_to_green_to_blue(self):
        red = _pixel((255, 0, 0, 255))
        green = adjust_colors(red, ColorAdjustment(hue_degrees=120.0), FilterSelection())
        blue = adjust_colors(red, ColorAdjustment(hue_degrees=240.0), FilterSelection())
        self.assertEqual(tuple(green.pixels[0, 0]), (0, 255, 0, 255))
        self.assertEqual(tuple(blue.pixels[0, 0]), (0, 0, 255, 255))

    def test_hue_full_turn_is_identity(self):
        rgb = _random_buffer().to_float()[..., :3]
        res = apply_hue_rotation(rgb, 360.0)
        self.assertIs(res, rgb)

    def test_hue_keeps_greys(self):
        grey = _pixel((90, 90, 90, 255))
        res = adjust_colors(grey, ColorAdjustment(hue_degrees=77.0), FilterSelection())
        self.assertEqual(res, grey)

    def test_alpha_is_untouched(self):
        buf = _random_buffer(seed=3)
        res = adjust_colors(
            buf,
            ColorAdjustment(brightness=140.0, contrast=60.0, saturation=170.0, hue_degrees=33.0),
            FilterSelection(FilterKind.VINTAGE, 80.0),
        )
        self.assertTrue(np.array_equal(res.pixels[..., 3], buf.pixels[..., 3]))


class TestNamedFilters(unittest.TestCase):
    def test_zero_intensity_matches_no_filter(self):
        buf = _random_buffer(seed=1)
        adj = ColorAdjustment(brightness=120.0, contrast=90.0, saturation=130.0, hue_degrees=45.0)
        expected = adjust_colors(buf, adj, FilterSelection(FilterKind.NONE, 0.0))
        for kind in FilterKind:
            res = adjust_colors(buf, adj, FilterSelection(kind, 0.0))
            self.assertEqual(res, expected, kind)

    def test_grayscale_of_red_is_rec709_luma(self):
        # 0.2126 * 255 = 54.213
        res = adjust_colors(_pixel((255, 0, 0, 255)), ColorAdjustment(), FilterSelection(FilterKind.GRAYSCALE, 100.0))
        self.assertEqual(tuple(res.pixels[0, 0]), (54, 54, 54, 255))

    def test_full_sepia_of_white(self):
        # Blue row of the sepia matrix sums to 0.937 -> 238.9
        res = adjust_colors(_pixel((255, 255, 255, 255)), ColorAdjustment(), FilterSelection(FilterKind.SEPIA, 100.0))
        self.assertEqual(tuple(res.pixels[0, 0]), (255, 255, 239, 255))

    def test_half_intensity_interpolates(self):
        res = adjust_colors(_pixel((255, 255, 255, 255)), ColorAdjustment(), FilterSelection(FilterKind.SEPIA, 50.0))
        r, g, b, a = (int(v) for v in res.pixels[0, 0])
        self.assertEqual((r, g, a), (255, 255, 255))
        self.assertAlmostEqual(b, 247, delta=1)

    def test_full_intensity_equals_recipe(self):
        rgb = _random_buffer(seed=2).to_float()[..., :3]
        for kind, recipe in FILTER_RECIPES.items():
            full = apply_named_filter(rgb, FilterSelection(kind, 100.0))
            self.assertTrue(np.array_equal(full, apply_filter_recipe(rgb, recipe)), kind)

    def test_vintage_on_mid_grey(self):
        # 128 -> x1.1 brightness -> 140.8 -> x1.1 contrast -> 142.08 -> half sepia
        res = adjust_colors(_pixel((128, 128, 128, 255)), ColorAdjustment(), FilterSelection(FilterKind.VINTAGE, 100.0))
        self.assertTrue(np.allclose(res.pixels[0, 0, :3], [167, 156.5, 138], atol=1.0))

    def test_vintage_is_not_plain_sepia(self):
        buf = _random_buffer(seed=4)
        vintage = adjust_colors(buf, ColorAdjustment(), FilterSelection(FilterKind.VINTAGE, 100.0))
        sepia = adjust_colors(buf, ColorAdjustment(), FilterSelection(FilterKind.SEPIA, 100.0))
        self.assertNotEqual(vintage, sepia)

    def test_none_kind_ignores_intensity(self):
        buf = _random_buffer(seed=5)
        res = adjust_colors(buf, ColorAdjustment(), FilterSelection(FilterKind.NONE, 100.0))
        self.assertEqual(res, buf)


if __name__ == "__main__":
    unittest.main()
