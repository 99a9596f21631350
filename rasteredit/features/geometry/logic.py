import math
from typing import Optional, Tuple

import cv2
import numpy as np

from rasteredit.domain.errors import InvalidCropError
from rasteredit.domain.types import FloatImage, PixelBuffer
from rasteredit.features.geometry.models import CropRect, ResizeTarget
from rasteredit.kernel.performance import time_function
from rasteredit.kernel.validation import ensure_float_image

# (y1, y2, x1, x2)
ROI = Tuple[int, int, int, int]

# Slack for float noise in trig when sizing the rotated canvas
_BBOX_EPS = 1e-6


def clamp_crop_rect(rect: CropRect, h: int, w: int) -> Optional[ROI]:
    """
    Intersects the rectangle with the image bounds.
    Returns None when nothing of it is left.
    """
    x1 = max(0, rect.x)
    y1 = max(0, rect.y)
    x2 = min(w, rect.right)
    y2 = min(h, rect.bottom)
    if x2 <= x1 or y2 <= y1:
        return None
    return y1, y2, x1, x2


def normalize_angle(degrees: float) -> float:
    """Maps any real angle to [0, 360)."""
    angle = float(degrees) % 360.0
    # -1e-20 % 360 == 360.0
    return 0.0 if angle >= 360.0 else angle


def get_rotated_size(h: int, w: int, degrees: float) -> Tuple[int, int]:
    """
    (Height, Width) of the smallest canvas holding the rotated image.
    """
    rad = math.radians(degrees)
    cos_a = abs(math.cos(rad))
    sin_a = abs(math.sin(rad))
    new_w = int(math.ceil(w * cos_a + h * sin_a - _BBOX_EPS))
    new_h = int(math.ceil(w * sin_a + h * cos_a - _BBOX_EPS))
    return max(1, new_h), max(1, new_w)


def premultiply(buffer: PixelBuffer) -> FloatImage:
    """
    float32 copy with color scaled by alpha, so resampling never pulls
    color out of fully transparent pixels.
    """
    img = buffer.to_float()
    img[..., :3] *= img[..., 3:4] / 255.0
    return img


def unpremultiply(img: FloatImage) -> PixelBuffer:
    img = ensure_float_image(np.clip(img, 0.0, 255.0))
    alpha = img[..., 3:4]
    safe_alpha = np.where(alpha > 0.0, alpha, 1.0)
    rgb = np.where(alpha > 0.0, img[..., :3] * 255.0 / safe_alpha, 0.0)

    out = np.empty(img.shape, dtype=np.uint8)
    out[..., :3] = np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)
    out[..., 3] = np.rint(alpha[..., 0]).astype(np.uint8)
    return PixelBuffer(out)


@time_function
def crop_buffer(buffer: PixelBuffer, rect: CropRect) -> PixelBuffer:
    """
    Copies the clamped sub-rectangle verbatim (no resampling).
    """
    roi = clamp_crop_rect(rect, buffer.height, buffer.width)
    if roi is None:
        raise InvalidCropError(
            f"Crop {rect} does not overlap the {buffer.width}x{buffer.height} image"
        )
    y1, y2, x1, x2 = roi
    return PixelBuffer(buffer.pixels[y1:y2, x1:x2])


@time_function
def rotate_buffer(buffer: PixelBuffer, degrees: float) -> PixelBuffer:
    """
    Rotates clockwise (as seen on screen) about the image center.

    Quarter turns are exact transposes. Any other angle grows the canvas to
    the rotated bounding box; the exposed corners are fully transparent and
    edges are bilinear-sampled.
    """
    angle = normalize_angle(degrees)
    if angle == 0.0:
        return PixelBuffer(buffer.pixels)

    if angle % 90.0 == 0.0:
        # np.rot90 turns counter-clockwise for positive k
        k = int(angle // 90.0)
        return PixelBuffer(np.rot90(buffer.pixels, k=-k))

    h, w = buffer.size
    new_h, new_w = get_rotated_size(h, w, angle)

    # Pixel centers sit on integer coordinates in OpenCV
    cx, cy = (w - 1) / 2.0, (h - 1) / 2.0
    # OpenCV positive angles turn counter-clockwise
    m_mat = cv2.getRotationMatrix2D((cx, cy), -angle, 1.0)
    m_mat[0, 2] += (new_w - 1) / 2.0 - cx
    m_mat[1, 2] += (new_h - 1) / 2.0 - cy

    res = cv2.warpAffine(
        premultiply(buffer),
        m_mat,
        (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    return unpremultiply(ensure_float_image(res))


@time_function
def resize_buffer(buffer: PixelBuffer, target: ResizeTarget) -> PixelBuffer:
    """
    Bilinear resample to exactly target.width x target.height.
    Aspect ratio is not preserved.
    """
    if (target.height, target.width) == buffer.size:
        return PixelBuffer(buffer.pixels)

    res = cv2.resize(
        premultiply(buffer),
        (int(target.width), int(target.height)),
        interpolation=cv2.INTER_LINEAR,
    )
    return unpremultiply(ensure_float_image(res))
