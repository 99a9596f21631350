from dataclasses import dataclass
from typing import Any, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt


# Image Types
# RGBA8 raster, straight alpha (Height, Width, 4)
RgbaArray: TypeAlias = npt.NDArray[np.uint8]
# Working float buffer 0.0 - 255.0 (Height, Width, Channels)
FloatImage: TypeAlias = npt.NDArray[np.float32]

# Color Types
# (r, g, b, a) with r, g, b in 0-255 and a in 0.0-1.0 (CSS rgba convention)
RgbaColor: TypeAlias = Tuple[int, int, int, float]

# (Height, Width)
Dimensions: TypeAlias = Tuple[int, int]

# ITU-R BT.601 luma, used by the saturation slider
LUMA_601 = np.array([0.299, 0.587, 0.114], dtype=np.float32)

# https://en.wikipedia.org/wiki/Luma_(video)
# Rec.709 luma, used by the grayscale filter (same weights as CSS grayscale())
LUMA_709 = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)

CHANNELS = 4


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Immutable RGBA8 raster.

    The pixel array is owned by the buffer and marked read-only, so a stage can
    never modify the buffer it was handed. Every stage returns a new buffer.
    """

    pixels: RgbaArray

    def __post_init__(self) -> None:
        arr = self.pixels
        if not isinstance(arr, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")
        if arr.dtype != np.uint8:
            raise TypeError(f"PixelBuffer requires uint8 samples, got {arr.dtype}")
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise ValueError(f"PixelBuffer requires shape (H, W, 4), got {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError("PixelBuffer must have non-zero width and height")

        # Take ownership: never alias a caller's (possibly writable) array
        owned = np.ascontiguousarray(arr).copy()
        owned.setflags(write=False)
        object.__setattr__(self, "pixels", owned)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.pixels.shape  # type: ignore[return-value]

    @property
    def size(self) -> Dimensions:
        return self.height, self.width

    @classmethod
    def from_array(cls, arr: Any) -> "PixelBuffer":
        """
        Builds a buffer from a uint8 (H, W), (H, W, 3) or (H, W, 4) array.
        Gray and RGB input get an opaque alpha channel.
        """
        arr = np.asarray(arr)
        if arr.dtype != np.uint8:
            raise TypeError(f"Expected uint8 samples, got {arr.dtype}")

        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr], axis=-1)
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        return cls(arr)

    @classmethod
    def filled(cls, width: int, height: int, color: Tuple[int, int, int, int]) -> "PixelBuffer":
        """Solid buffer, color given as 8-bit RGBA."""
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[...] = np.array(color, dtype=np.uint8)
        return cls(arr)

    def to_float(self) -> FloatImage:
        """Returns a writable float32 copy in the 0-255 range."""
        return self.pixels.astype(np.float32)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
