import io
import os

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from rasteredit.domain.errors import DecodeError
from rasteredit.domain.interfaces import IImageSource
from rasteredit.domain.types import PixelBuffer
from rasteredit.kernel.system.logging import get_logger

logger = get_logger(__name__)

def pil_to_buffer(pil_img: Image.Image) -> PixelBuffer:
    """
    Any Pillow image -> straight-alpha RGBA8 buffer, EXIF orientation applied.
    """
    pil_img = ImageOps.exif_transpose(pil_img)
    if pil_img.mode != "RGBA":
        pil_img = pil_img.convert("RGBA")
    return PixelBuffer(np.asarray(pil_img, dtype=np.uint8))


def decode_bytes(data: bytes) -> PixelBuffer:
    """
    Decodes an encoded image (PNG, JPEG, or anything Pillow reads).

    Raises:
        DecodeError: empty, corrupt or unsupported data.
    """
    if not data:
        raise DecodeError("No image data")
    try:
        with Image.open(io.BytesIO(data)) as pil_img:
            pil_img.load()
            return pil_to_buffer(pil_img)
    except UnidentifiedImageError as e:
        raise DecodeError("Unsupported or unrecognised image format") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(f"Image too large to decode safely: {e}") from e
    except (OSError, ValueError) as e:
        raise DecodeError(f"Corrupt image data: {e}") from e


def load_file(file_path: str) -> PixelBuffer:
    """
    Reads and decodes a local image file.
    """
    path = os.path.abspath(file_path)
    if not os.path.isfile(path):
        raise DecodeError(f"File not found: {path}")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}") from e

    buffer = decode_bytes(data)
    logger.info(f"Loaded {os.path.basename(path)} ({buffer.width}x{buffer.height})")
    return buffer


class BytesSource(IImageSource):
    def __init__(self, data: bytes):
        self.data = data

    def read(self) -> PixelBuffer:
        return decode_bytes(self.data)


class FileSource(IImageSource):
    """
    Local file on disk.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    def read(self) -> PixelBuffer:
        return load_file(self.file_path)
