"""PNG fixture helpers shared by the conversion tests."""

import numpy as np
from PIL import Image


def write_texture(path, pixels):
    """Write an ``(H, W, C)`` uint8 array as a PNG and return the path."""
    arr = np.asarray(pixels, dtype=np.uint8)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    Image.fromarray(arr).save(path)
    return path


def write_planes(path, width, height, *planes):
    """Write per-channel flat planes (row-major) as one PNG."""
    stacked = np.stack([np.asarray(p, dtype=np.uint8) for p in planes], axis=-1)
    return write_texture(path, stacked.reshape(height, width, len(planes)))


def read_texture(path):
    """Read a PNG back as a raw ``(H, W, C)`` uint8 array."""
    with Image.open(path) as img:
        arr = np.asarray(img)
    if arr.ndim == 2:
        arr = arr[:, :, None]
    return arr
