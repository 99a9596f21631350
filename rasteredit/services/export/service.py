import io

import numpy as np
from PIL import Image

from rasteredit.domain.errors import EncodeError
from rasteredit.domain.models import ExportFormat, ImageFormat
from rasteredit.domain.types import PixelBuffer
from rasteredit.kernel.performance import time_function
from rasteredit.kernel.system.logging import get_logger

logger = get_logger(__name__)

# JPEG has no alpha plane; transparency is flattened onto this color
JPEG_MATTE = np.array([255.0, 255.0, 255.0], dtype=np.float32)


def flatten_alpha(buffer: PixelBuffer) -> np.ndarray:
    """
    Composites the buffer onto the opaque JPEG matte, returns uint8 RGB.
    """
    img = buffer.to_float()
    alpha = img[..., 3:4] / 255.0
    rgb = img[..., :3] * alpha + JPEG_MATTE * (1.0 - alpha)
    return np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)


def _encode_png(buffer: PixelBuffer) -> bytes:
    pil_img = Image.fromarray(buffer.pixels.copy())
    output_buf = io.BytesIO()
    pil_img.save(output_buf, format="PNG", optimize=False)
    return output_buf.getvalue()


def _encode_jpeg(buffer: PixelBuffer, quality: int) -> bytes:
    pil_img = Image.fromarray(flatten_alpha(buffer))
    output_buf = io.BytesIO()
    pil_img.save(output_buf, format="JPEG", quality=quality)
    return output_buf.getvalue()


@time_function
def encode_buffer(buffer: PixelBuffer, fmt: ExportFormat) -> bytes:
    """
    Serializes a buffer. PNG keeps RGBA losslessly; JPEG drops alpha by
    compositing onto white first.

    Raises:
        EncodeError: unsupported format, quality outside 1-100, or an
            encoder failure.
    """
    if not isinstance(fmt, ExportFormat) or not isinstance(fmt.kind, ImageFormat):
        raise EncodeError(f"Unsupported export format: {fmt!r}")

    if fmt.kind is ImageFormat.JPEG:
        if isinstance(fmt.quality, bool) or not isinstance(fmt.quality, int):
            raise EncodeError(f"JPEG quality must be an integer, got {fmt.quality!r}")
        if not 1 <= fmt.quality <= 100:
            raise EncodeError(f"JPEG quality must be in 1-100, got {fmt.quality}")

    try:
        if fmt.kind is ImageFormat.PNG:
            data = _encode_png(buffer)
        else:
            data = _encode_jpeg(buffer, fmt.quality)
    except (OSError, ValueError) as e:
        raise EncodeError(f"{fmt.kind.value} encoding failed: {e}") from e

    logger.debug(f"Encoded {buffer.width}x{buffer.height} as {fmt.kind.value} ({len(data)} bytes)")
    return data
