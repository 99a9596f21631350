import numpy as np
import pytest

from rasteredit.domain.types import PixelBuffer


def test_from_array_rgb_gets_opaque_alpha():
    rgb = np.zeros((3, 5, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(rgb)
    assert buf.width == 5
    assert buf.height == 3
    assert buf.shape == (3, 5, 4)
    assert np.all(buf.pixels[..., 3] == 255)


def test_from_array_gray_is_replicated():
    gray = np.arange(6, dtype=np.uint8).reshape(2, 3)
    buf = PixelBuffer.from_array(gray)
    assert np.array_equal(buf.pixels[..., 0], gray)
    assert np.array_equal(buf.pixels[..., 1], gray)
    assert np.array_equal(buf.pixels[..., 2], gray)


def test_buffer_owns_its_pixels():
    arr = np.zeros((2, 2, 4), dtype=np.uint8)
    buf = PixelBuffer(arr)
    arr[0, 0] = 200
    # Caller's array is not aliased
    assert buf.pixels[0, 0, 0] == 0


def test_pixels_are_read_only():
    buf = PixelBuffer.filled(2, 2, (1, 2, 3, 4))
    with pytest.raises(ValueError):
        buf.pixels[0, 0, 0] = 9


def test_rejects_bad_shapes_and_types():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((0, 2, 4), dtype=np.uint8))
    with pytest.raises(TypeError):
        PixelBuffer(np.zeros((2, 2, 4), dtype=np.float32))
    with pytest.raises(TypeError):
        PixelBuffer([[0, 0, 0, 0]])


def test_equality_is_pixel_equality():
    a = PixelBuffer.filled(3, 2, (10, 20, 30, 255))
    b = PixelBuffer.filled(3, 2, (10, 20, 30, 255))
    c = PixelBuffer.filled(2, 3, (10, 20, 30, 255))
    assert a == b
    assert a != c
    assert a != PixelBuffer.filled(3, 2, (10, 20, 31, 255))
