"""Texture, channel, detection, and conversion record dataclasses."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..config import ConversionDirection, TextureFormat
from .errors import InvalidBufferError, InvalidDimensionsError


@dataclass
class TextureData:
    """Interleaved 8-bit pixel buffer.

    Channel ``c`` of pixel ``i`` lives at ``data[i * channels + c]``.
    """

    width: int
    height: int
    channels: int
    data: np.ndarray

    def __post_init__(self) -> None:
        """Coerce data to a flat uint8 array and check the length invariant."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensionsError(
                f"Texture dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.channels not in (1, 3, 4):
            raise InvalidBufferError(
                f"Unsupported channel count {self.channels} (expected 1, 3 or 4)"
            )
        self.data = np.ascontiguousarray(self.data, dtype=np.uint8).reshape(-1)
        expected = self.width * self.height * self.channels
        if self.data.size != expected:
            raise InvalidBufferError(
                f"Buffer holds {self.data.size} bytes, expected "
                f"{self.width}x{self.height}x{self.channels} = {expected}"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @classmethod
    def from_bytes(cls, width: int, height: int, channels: int, raw) -> "TextureData":
        """Build a texture from raw interleaved bytes."""
        return cls(width, height, channels, np.frombuffer(bytes(raw), dtype=np.uint8))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "TextureData":
        """Build a texture from an ``(H, W)`` or ``(H, W, C)`` uint8 array."""
        if arr.ndim == 2:
            arr = arr[:, :, None]
        if arr.ndim != 3:
            raise InvalidBufferError(f"Expected HxW or HxWxC array, got shape {arr.shape}")
        h, w, c = arr.shape
        return cls(w, h, c, arr)

    def to_array(self) -> np.ndarray:
        """Return an ``(H, W, C)`` view of the pixel data."""
        return self.data.reshape(self.height, self.width, self.channels)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, TextureData):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.channels == other.channels
            and np.array_equal(self.data, other.data)
        )


@dataclass
class ChannelPlanes:
    """Planar view of a texture: one uint8 plane of ``width*height`` per channel."""

    r: np.ndarray
    g: np.ndarray
    b: np.ndarray
    width: int
    height: int
    a: Optional[np.ndarray] = None

    # Packed MER naming.
    @property
    def metallic(self) -> np.ndarray:
        return self.r

    @property
    def emissive(self) -> np.ndarray:
        return self.g

    @property
    def roughness(self) -> np.ndarray:
        return self.b

    @property
    def subsurface(self) -> Optional[np.ndarray]:
        return self.a

    # LabPBR specular naming.
    @property
    def smoothness(self) -> np.ndarray:
        return self.r

    @property
    def reflectance(self) -> np.ndarray:
        return self.g

    @property
    def porosity_or_subsurface(self) -> np.ndarray:
        return self.b

    @property
    def emission(self) -> Optional[np.ndarray]:
        return self.a

    # LabPBR normal naming.
    @property
    def x(self) -> np.ndarray:
        return self.r

    @property
    def y(self) -> np.ndarray:
        return self.g

    @property
    def ambient_occlusion(self) -> np.ndarray:
        return self.b

    @property
    def height_plane(self) -> Optional[np.ndarray]:
        return self.a

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass
class DetectionResult:
    """Outcome of naming-based format detection for one texture path."""

    format: TextureFormat = TextureFormat.UNKNOWN
    confidence: float = 0.0
    base_texture_path: Optional[str] = None
    mer_texture_path: Optional[str] = None
    specular_texture_path: Optional[str] = None
    normal_texture_path: Optional[str] = None


@dataclass
class ConversionResult:
    """Accumulated outcome of one conversion call."""

    source_path: str
    output_paths: Dict[str, str] = field(default_factory=dict)
    success: bool = False
    messages: List[str] = field(default_factory=list)
    direction: Optional[ConversionDirection] = None

    def add_message(self, message: str) -> None:
        self.messages.append(message)

    def fail(self, exc: BaseException) -> None:
        """Record an error and mark the conversion failed."""
        self.messages.append(f"Error: {exc}")
        self.success = False

    def to_dict(self) -> dict:
        """Return a JSON-friendly dictionary."""
        return {
            "source_path": self.source_path,
            "output_paths": dict(self.output_paths),
            "success": self.success,
            "messages": list(self.messages),
            "direction": self.direction.value if self.direction is not None else None,
        }
