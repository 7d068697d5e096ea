"""Texture I/O -- load/save 8-bit pixel buffers through Pillow."""

import logging
import os
import threading
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from .errors import (
    EncodeError,
    InvalidDimensionsError,
    TextureNotFoundError,
    UnsupportedFormatError,
)
from .records import TextureData

logger = logging.getLogger("pbr_bridge.io")

DEFAULT_QUALITY = 8


def _to_uint8(arr: np.ndarray, bits: int) -> np.ndarray:
    """Rescale a wide integer array down to 8 bits with rounding."""
    max_value = float((1 << bits) - 1)
    scaled = np.clip(arr.astype(np.float64), 0, max_value) * (255.0 / max_value)
    return np.floor(scaled + 0.5).astype(np.uint8)


def load_texture(path: str) -> TextureData:
    """Load a texture file as an 8-bit RGB or RGBA buffer.

    Palette, grayscale, and CMYK images are promoted to RGB(A); 16-bit
    grayscale is rescaled to 8 bits.
    """
    if not os.path.isfile(path):
        raise TextureNotFoundError(f"Texture file not found: {path}")

    ext = Path(path).suffix.lower()
    try:
        with Image.open(path) as img:
            if img.width <= 0 or img.height <= 0:
                raise InvalidDimensionsError(
                    f"Invalid image dimensions for {path}: {img.width}x{img.height}"
                )

            if img.mode in ("I;16", "I;16B", "I;16L", "I;16N"):
                logger.debug("Loading %s as 16-bit integer mode %s", path, img.mode)
                gray = _to_uint8(np.asarray(img), 16)
                arr = np.stack([gray] * 3, axis=-1)
            elif img.mode == "I":
                logger.debug("Loading %s as integer mode I", path)
                raw = np.asarray(img)
                bits = 16 if int(raw.max(initial=0)) > 255 else 8
                gray = _to_uint8(raw, bits)
                arr = np.stack([gray] * 3, axis=-1)
            elif img.mode in ("RGB", "RGBA"):
                arr = np.asarray(img, dtype=np.uint8)
            elif img.mode in ("P", "LA", "PA"):
                logger.debug("Converting %s image '%s' to RGBA", img.mode, path)
                with img.convert("RGBA") as converted:
                    arr = np.asarray(converted, dtype=np.uint8)
            else:
                logger.debug("Converting %s image '%s' to RGB", img.mode, path)
                with img.convert("RGB") as converted:
                    arr = np.asarray(converted, dtype=np.uint8)
    except InvalidDimensionsError:
        raise
    except Exception as e:
        logger.error("Failed to open texture '%s' (ext=%s): %s", path, ext, e)
        raise IOError(f"Failed to load texture {path}: {e}") from e

    texture = TextureData.from_array(np.ascontiguousarray(arr))
    logger.debug(
        "Loaded %s (%dx%d, %d channels)",
        path, texture.width, texture.height, texture.channels,
    )
    return texture


def resolve_format(path: str, fmt: Optional[str] = None) -> str:
    """Pick the output container from an explicit format or the path extension."""
    name = (fmt or Path(path).suffix.lstrip(".") or "png").lower()
    if name == "jpeg":
        name = "jpg"
    return name


def save_texture(texture: TextureData, path: str, fmt: Optional[str] = None,
                 quality: Optional[int] = None) -> str:
    """Encode ``texture`` to ``path`` and return the written path.

    Args:
        texture: Buffer to encode.
        path: Output file path; parent directories are created.
        fmt: ``png``, ``jpg`` or ``tga``. Defaults to the path extension.
        quality: Level 1-10. JPEG quality is ``quality * 10``; PNG
            compression level is ``quality - 1`` capped at 9.

    Raises:
        UnsupportedFormatError: for ``tga`` or any unknown format.
        EncodeError: when Pillow fails to write the file.

    """
    name = resolve_format(path, fmt)
    if name == "tga":
        raise UnsupportedFormatError("TGA format not supported in this version")
    if name not in ("png", "jpg"):
        raise UnsupportedFormatError(f"Unsupported output format: {name}")

    level = DEFAULT_QUALITY if quality is None else int(quality)
    level = min(max(level, 1), 10)

    parent_dir = os.path.dirname(path) or "."
    os.makedirs(parent_dir, exist_ok=True)

    # Keep the real extension on the temp file so Pillow can infer the encoder.
    ext = ".jpg" if name == "jpg" else ".png"
    tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}{ext}"

    try:
        arr = texture.to_array()
        if texture.channels == 1:
            arr = np.ascontiguousarray(arr[:, :, 0])
        with Image.fromarray(arr) as img:
            if name == "jpg":
                if img.mode == "RGBA":
                    logger.warning(
                        "JPEG has no alpha channel; dropping alpha for %s", path
                    )
                    with img.convert("RGB") as converted:
                        converted.save(tmp_path, format="JPEG", quality=level * 10)
                else:
                    img.save(tmp_path, format="JPEG", quality=level * 10)
            else:
                img.save(tmp_path, format="PNG", compress_level=min(9, level - 1))
        os.replace(tmp_path, path)
        logger.debug("Saved: %s (%dx%dx%d)", path, texture.width, texture.height,
                     texture.channels)
        return path
    except Exception as e:
        raise EncodeError(f"Failed to save texture to {path}: {e}") from e
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                pass
