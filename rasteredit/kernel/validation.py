from typing import Any, cast

import numpy as np

from rasteredit.domain.types import FloatImage


def ensure_float_image(arr: Any) -> FloatImage:
    """
    Ensures the input is a float32 numpy array and returns it as a FloatImage.
    This is preferred over a raw cast because it performs runtime validation.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.dtype != np.float32:
        arr = arr.astype(np.float32)

    return cast(FloatImage, arr)


def clamp(val: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, val))


def validate_float(val: Any, default: float = 0.0) -> float:
    """Ensures a value is a finite float, providing a default if None."""
    if val is None:
        return default
    try:
        res = float(val)
    except (TypeError, ValueError):
        return default
    if not np.isfinite(res):
        return default
    return res


def validate_int(val: Any, default: int = 0) -> int:
    """Ensures a value is an int, providing a default if None or not finite."""
    if val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        return default
