import numpy as np

from rasteredit.domain.types import PixelBuffer
from rasteredit.features.overlay.logic import (
    apply_overlay,
    composite_source_over,
    render_gradient,
    render_pattern,
)
from rasteredit.features.overlay.models import GradientOverlay, NoOverlay, PatternOverlay
from rasteredit.kernel.system.config import OVERLAY_PRESETS


def test_no_overlay_is_identity():
    rng = np.random.default_rng(0)
    buf = PixelBuffer(rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8))
    assert apply_overlay(buf, NoOverlay()) == buf


def test_gradient_runs_along_angle():
    # 90 degrees points right: dark on the left, light on the right, constant per column
    overlay = GradientOverlay(color_a=(0, 0, 0, 1.0), color_b=(255, 255, 255, 1.0), angle=90.0)
    res = apply_overlay(PixelBuffer.filled(8, 4, (0, 128, 0, 255)), overlay)
    row = res.pixels[0, :, 0].astype(int)
    assert np.all(np.diff(row) > 0)
    for y in range(1, 4):
        assert np.array_equal(res.pixels[y], res.pixels[0])
    assert np.all(res.pixels[..., 3] == 255)


def test_gradient_zero_angle_points_up():
    overlay = GradientOverlay(color_a=(0, 0, 0, 1.0), color_b=(255, 255, 255, 1.0), angle=0.0)
    rgb, alpha = render_gradient(6, 3, overlay)
    # Bottom starts at color_a, top ends at color_b
    assert rgb[0, 0, 0] > rgb[-1, 0, 0]
    assert np.allclose(alpha, 1.0)


def test_gradient_spans_full_range_on_axis():
    overlay = GradientOverlay(color_a=(0, 0, 0, 1.0), color_b=(255, 255, 255, 1.0), angle=90.0)
    rgb, _ = render_gradient(1, 10, overlay)
    # Pixel centers sit half a pixel inside the ends of the gradient line
    assert np.isclose(rgb[0, 0, 0], 255 * 0.05, atol=1e-3)
    assert np.isclose(rgb[0, -1, 0], 255 * 0.95, atol=1e-3)


def test_half_transparent_red_over_blue():
    overlay = GradientOverlay(color_a=(255, 0, 0, 0.5), color_b=(255, 0, 0, 0.5), angle=45.0)
    res = apply_overlay(PixelBuffer.filled(4, 4, (0, 0, 255, 255)), overlay)
    assert np.allclose(res.pixels[..., :3].astype(int), [127.5, 0, 127.5], atol=1)
    assert np.all(res.pixels[..., 3] == 255)


def test_source_over_on_transparent_base_keeps_overlay_color():
    rgb = np.full((2, 2, 3), [255, 0, 0], dtype=np.float32)
    alpha = np.full((2, 2), 0.5, dtype=np.float32)
    res = composite_source_over(PixelBuffer.filled(2, 2, (0, 0, 0, 0)), (rgb, alpha))
    assert np.all(res.pixels[..., 0] == 255)
    assert np.all(res.pixels[..., 3] == 128)


def test_pattern_dot_positions():
    overlay = PatternOverlay(dot_radius=2.0, spacing=10, color=(0, 0, 0, 1.0), opacity=1.0)
    res = apply_overlay(PixelBuffer.filled(20, 20, (255, 255, 255, 255)), overlay)
    # Dot centered in each tile, background between tiles
    assert tuple(res.pixels[5, 5]) == (0, 0, 0, 255)
    assert tuple(res.pixels[15, 5]) == (0, 0, 0, 255)
    assert tuple(res.pixels[0, 0]) == (255, 255, 255, 255)
    assert tuple(res.pixels[9, 9]) == (255, 255, 255, 255)


def test_pattern_tiles_from_top_left():
    overlay = PatternOverlay(dot_radius=3.0, spacing=7, color=(20, 40, 60, 1.0), opacity=0.8)
    _, alpha = render_pattern(21, 21, overlay)
    assert np.array_equal(alpha[:7, :7], alpha[7:14, 7:14])
    assert np.array_equal(alpha[:7, :7], alpha[14:, :7])


def test_pattern_preset_is_faint():
    res = apply_overlay(PixelBuffer.filled(10, 10, (255, 255, 255, 255)), OVERLAY_PRESETS["pattern"])
    # 10% black at the dot center
    assert abs(int(res.pixels[5, 5, 0]) - 229.5) <= 1
    assert np.all(res.pixels[..., 0] >= 229)


def test_gradient_preset_follows_corner_diagonal():
    # Wide output: the gradient still ends in the bottom-right corner, so the
    # top-right pixel is almost pure color_b and the bottom-left almost color_a
    res = apply_overlay(PixelBuffer.filled(200, 20, (255, 255, 255, 255)), OVERLAY_PRESETS["gradient"])
    top_right = res.pixels[0, -1].astype(int)
    bottom_left = res.pixels[-1, 0].astype(int)
    assert np.allclose(top_right, [129, 128, 253, 255], atol=2)
    assert np.allclose(bottom_left, [253, 128, 129, 255], atol=2)


def test_diagonal_gradient_positions():
    overlay = GradientOverlay(color_a=(0, 0, 0, 1.0), color_b=(255, 255, 255, 1.0), angle=None)
    rgb, alpha = render_gradient(20, 200, overlay)
    # t = ((x + .5) * w + (y + .5) * h) / (w^2 + h^2)
    assert np.isclose(rgb[0, -1, 0], 255 * (199.5 * 200 + 0.5 * 20) / 40400, atol=1e-2)
    assert np.isclose(rgb[-1, 0, 0], 255 * (0.5 * 200 + 19.5 * 20) / 40400, atol=1e-2)
    assert rgb[0, 0, 0] < rgb[-1, -1, 0]
    assert np.allclose(alpha, 1.0)


def test_diagonal_gradient_matches_135_degrees_on_square():
    colors = dict(color_a=(255, 0, 0, 0.2), color_b=(0, 0, 255, 0.9))
    rgb_d, alpha_d = render_gradient(16, 16, GradientOverlay(**colors, angle=None))
    rgb_a, alpha_a = render_gradient(16, 16, GradientOverlay(**colors, angle=135.0))
    assert np.allclose(rgb_d, rgb_a, atol=1e-3)
    assert np.allclose(alpha_d, alpha_a, atol=1e-5)
