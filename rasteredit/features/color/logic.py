from typing import Dict

import numpy as np
from numba import njit, prange  # type: ignore

from rasteredit.domain.types import LUMA_601, LUMA_709, FloatImage, PixelBuffer
from rasteredit.features.color.models import (
    ColorAdjustment,
    FilterKind,
    FilterRecipe,
    FilterSelection,
)
from rasteredit.kernel.performance import time_function
from rasteredit.kernel.validation import ensure_float_image

# Classic sepia tone matrix (rows produce R', G', B')
SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float32,
)

FILTER_RECIPES: Dict[FilterKind, FilterRecipe] = {
    FilterKind.GRAYSCALE: FilterRecipe(grayscale=1.0),
    FilterKind.SEPIA: FilterRecipe(sepia=1.0),
    FilterKind.VINTAGE: FilterRecipe(brightness=1.1, contrast=1.1, saturation=1.3, sepia=0.5),
}


def _clip(rgb: FloatImage) -> FloatImage:
    return ensure_float_image(np.clip(rgb, 0.0, 255.0))


@njit(inline="always")
def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


@njit(parallel=True)
def _rotate_hue_jit(rgb: np.ndarray, shift: float) -> np.ndarray:
    """
    Row-parallel RGB -> HSL -> RGB hue shift. Input and output are 0-255.
    """
    h, w, _ = rgb.shape
    res = np.empty_like(rgb)
    for y in prange(h):
        for x in range(w):
            r = rgb[y, x, 0] / 255.0
            g = rgb[y, x, 1] / 255.0
            b = rgb[y, x, 2] / 255.0

            mx = max(r, g, b)
            mn = min(r, g, b)
            lum = (mx + mn) / 2.0

            if mx == mn:
                # Achromatic, hue has no effect
                res[y, x, 0] = rgb[y, x, 0]
                res[y, x, 1] = rgb[y, x, 1]
                res[y, x, 2] = rgb[y, x, 2]
                continue

            d = mx - mn
            if lum > 0.5:
                sat = d / (2.0 - mx - mn)
            else:
                sat = d / (mx + mn)

            if mx == r:
                hue = (g - b) / d
                if g < b:
                    hue += 6.0
            elif mx == g:
                hue = (b - r) / d + 2.0
            else:
                hue = (r - g) / d + 4.0
            hue = hue * 60.0

            hue = (hue + shift) % 360.0
            hk = hue / 360.0

            if lum < 0.5:
                q = lum * (1.0 + sat)
            else:
                q = lum + sat - lum * sat
            p = 2.0 * lum - q

            res[y, x, 0] = _hue_to_rgb(p, q, hk + 1.0 / 3.0) * 255.0
            res[y, x, 1] = _hue_to_rgb(p, q, hk) * 255.0
            res[y, x, 2] = _hue_to_rgb(p, q, hk - 1.0 / 3.0) * 255.0
    return res


def get_luma(rgb: FloatImage, coeffs: np.ndarray = LUMA_601) -> FloatImage:
    res = coeffs[0] * rgb[..., 0] + coeffs[1] * rgb[..., 1] + coeffs[2] * rgb[..., 2]
    return ensure_float_image(res)


def apply_brightness(rgb: FloatImage, factor: float) -> FloatImage:
    """
    Scales every channel. factor 1.0 is identity.
    """
    if factor == 1.0:
        return rgb
    return _clip(rgb * np.float32(factor))


def apply_contrast(rgb: FloatImage, factor: float) -> FloatImage:
    """
    Stretches channels around mid-grey (128).
    """
    if factor == 1.0:
        return rgb
    return _clip(128.0 + (rgb - 128.0) * np.float32(factor))


def apply_saturation(rgb: FloatImage, factor: float) -> FloatImage:
    """
    Moves channels away from (or towards) the BT.601 luma of the pixel.
    """
    if factor == 1.0:
        return rgb
    lum = get_luma(rgb, LUMA_601)[..., None]
    return _clip(lum + (rgb - lum) * np.float32(factor))


@time_function
def apply_hue_rotation(rgb: FloatImage, degrees: float) -> FloatImage:
    """
    Rotates hue in HSL space, keeping saturation and lightness.
    """
    shift = float(degrees) % 360.0
    if shift == 0.0:
        return rgb
    res = _rotate_hue_jit(np.ascontiguousarray(rgb, dtype=np.float32), shift)
    return _clip(res)


def apply_grayscale(rgb: FloatImage) -> FloatImage:
    lum = get_luma(rgb, LUMA_709)
    return _clip(np.repeat(lum[..., None], 3, axis=-1))


def apply_sepia(rgb: FloatImage, amount: float = 1.0) -> FloatImage:
    """
    Sepia matrix, blended with the input by amount (0-1).
    """
    if amount <= 0.0:
        return rgb
    toned = _clip(rgb @ SEPIA_MATRIX.T)
    if amount >= 1.0:
        return toned
    return blend(rgb, toned, amount)


def blend(base: FloatImage, effect: FloatImage, amount: float) -> FloatImage:
    """
    Linear interpolation base -> effect. amount 0 returns base, 1 returns effect.
    """
    if amount <= 0.0:
        return base
    if amount >= 1.0:
        return effect
    t = np.float32(amount)
    return _clip(base * (np.float32(1.0) - t) + effect * t)


def apply_filter_recipe(rgb: FloatImage, recipe: FilterRecipe) -> FloatImage:
    """
    Runs a named-filter recipe through the primitive steps, in slider order.
    """
    res = apply_brightness(rgb, recipe.brightness)
    res = apply_contrast(res, recipe.contrast)
    res = apply_saturation(res, recipe.saturation)
    if recipe.grayscale > 0.0:
        res = blend(res, apply_grayscale(res), recipe.grayscale)
    res = apply_sepia(res, recipe.sepia)
    return res


def apply_named_filter(rgb: FloatImage, selection: FilterSelection) -> FloatImage:
    """
    Applies the selected filter at selection.intensity percent.
    """
    if selection.kind is FilterKind.NONE:
        return rgb
    if selection.kind not in FILTER_RECIPES:
        raise ValueError(f"No recipe for filter {selection.kind!r}")

    amount = selection.intensity / 100.0
    if amount <= 0.0:
        return rgb

    filtered = apply_filter_recipe(rgb, FILTER_RECIPES[selection.kind])
    return blend(rgb, filtered, amount)


@time_function
def adjust_colors(
    buffer: PixelBuffer,
    adjustment: ColorAdjustment,
    selection: FilterSelection,
) -> PixelBuffer:
    """
    Slider adjustments followed by the named filter. Alpha is untouched.

    Math runs in float32 and is clamped to 0-255 after each step; the result
    is rounded back to 8 bit once, at the end.
    """
    if adjustment.is_identity and not selection.is_active:
        return PixelBuffer(buffer.pixels)

    img = buffer.to_float()
    rgb = img[..., :3]

    rgb = apply_brightness(rgb, adjustment.brightness / 100.0)
    rgb = apply_contrast(rgb, adjustment.contrast / 100.0)
    rgb = apply_saturation(rgb, adjustment.saturation / 100.0)
    rgb = apply_hue_rotation(rgb, adjustment.hue_degrees)
    rgb = apply_named_filter(rgb, selection)

    out = np.empty_like(buffer.pixels)
    out[..., :3] = np.rint(rgb).astype(np.uint8)
    out[..., 3] = buffer.pixels[..., 3]
    return PixelBuffer(out)
