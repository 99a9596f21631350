import math
from typing import Tuple

import numpy as np

from rasteredit.domain.types import FloatImage, PixelBuffer, RgbaColor
from rasteredit.features.overlay.models import (
    GradientOverlay,
    NoOverlay,
    Overlay,
    PatternOverlay,
)
from rasteredit.kernel.performance import time_function
from rasteredit.kernel.validation import ensure_float_image

# (color 0-255 (H, W, 3), alpha 0-1 (H, W))
OverlayLayer = Tuple[FloatImage, FloatImage]


def _split_color(color: RgbaColor) -> Tuple[np.ndarray, float]:
    r, g, b, a = color
    return np.array([r, g, b], dtype=np.float32), float(a)


def _diagonal_position(h: int, w: int) -> FloatImage:
    """
    Position along the (0, 0) -> (w, h) diagonal, as a canvas
    createLinearGradient(0, 0, w, h) would place it.
    """
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    t = ((xs + 0.5) * w + (ys + 0.5) * h) / float(w * w + h * h)
    return ensure_float_image(np.clip(t, 0.0, 1.0))


def _angled_position(h: int, w: int, angle: float) -> FloatImage:
    """
    CSS linear-gradient() model: the gradient line passes through the center
    at `angle` and is just long enough for its ends to touch the farthest
    corners.
    """
    rad = math.radians(angle)
    dir_x, dir_y = math.sin(rad), -math.cos(rad)
    line_len = abs(w * dir_x) + abs(h * dir_y)

    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    rel_x = xs + 0.5 - w / 2.0
    rel_y = ys + 0.5 - h / 2.0
    t = np.clip((rel_x * dir_x + rel_y * dir_y) / line_len + 0.5, 0.0, 1.0)
    return ensure_float_image(t)


def render_gradient(h: int, w: int, overlay: GradientOverlay) -> OverlayLayer:
    if overlay.angle is None:
        t = _diagonal_position(h, w)
    else:
        t = _angled_position(h, w, overlay.angle)

    rgb_a, alpha_a = _split_color(overlay.color_a)
    rgb_b, alpha_b = _split_color(overlay.color_b)

    t3 = t[..., None]
    rgb = rgb_a * (1.0 - t3) + rgb_b * t3
    alpha = alpha_a * (1.0 - t) + alpha_b * t
    return ensure_float_image(rgb), ensure_float_image(alpha)


def render_pattern(h: int, w: int, overlay: PatternOverlay) -> OverlayLayer:
    """
    Tiles one anti-aliased dot per spacing x spacing cell, starting at the
    top-left pixel of the output.
    """
    spacing = max(1, int(overlay.spacing))
    center = spacing / 2.0

    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    dx = (xs % spacing) + 0.5 - center
    dy = (ys % spacing) + 0.5 - center
    dist = np.sqrt(dx * dx + dy * dy)

    # One pixel wide edge ramp centered on the circle outline
    coverage = np.clip(overlay.dot_radius + 0.5 - dist, 0.0, 1.0)

    rgb, color_alpha = _split_color(overlay.color)
    alpha = coverage * (color_alpha * overlay.opacity)
    rgb_plane = np.broadcast_to(rgb, (h, w, 3))
    return ensure_float_image(rgb_plane), ensure_float_image(alpha)


def composite_source_over(buffer: PixelBuffer, layer: OverlayLayer) -> PixelBuffer:
    """
    Porter-Duff source-over of a straight-alpha layer onto the buffer.

    On an opaque base this is out = overlay * a + base * (1 - a) per channel.
    """
    over_rgb, over_a = layer
    base = buffer.to_float()
    base_rgb = base[..., :3]
    base_a = base[..., 3] / 255.0

    out_a = over_a + base_a * (1.0 - over_a)
    premult = over_rgb * over_a[..., None] + base_rgb * (base_a * (1.0 - over_a))[..., None]

    safe_a = np.where(out_a > 0.0, out_a, 1.0)[..., None]
    out_rgb = np.where(out_a[..., None] > 0.0, premult / safe_a, 0.0)

    out = np.empty_like(buffer.pixels)
    out[..., :3] = np.rint(np.clip(out_rgb, 0.0, 255.0)).astype(np.uint8)
    out[..., 3] = np.rint(np.clip(out_a * 255.0, 0.0, 255.0)).astype(np.uint8)
    return PixelBuffer(out)


@time_function
def apply_overlay(buffer: PixelBuffer, overlay: Overlay) -> PixelBuffer:
    """
    Composites the overlay over the whole buffer. NoOverlay is the identity.
    """
    h, w = buffer.size
    if isinstance(overlay, NoOverlay):
        return PixelBuffer(buffer.pixels)
    if isinstance(overlay, GradientOverlay):
        return composite_source_over(buffer, render_gradient(h, w, overlay))
    if isinstance(overlay, PatternOverlay):
        return composite_source_over(buffer, render_pattern(h, w, overlay))
    raise TypeError(f"Unsupported overlay: {type(overlay).__name__}")
