"""Split interleaved textures into planes and recombine them."""

from typing import Dict, Optional

import numpy as np

from .errors import InvalidBufferError
from .records import ChannelPlanes, TextureData


def extract_channels(texture: TextureData) -> ChannelPlanes:
    """Copy each channel of ``texture`` into its own plane.

    Planes are fresh arrays, so later edits never reach the source buffer.
    """
    if texture.channels not in (3, 4):
        raise InvalidBufferError(
            f"Channel extraction needs 3 or 4 channels, got {texture.channels}"
        )
    expected = texture.width * texture.height * texture.channels
    if texture.data.size != expected:
        raise InvalidBufferError(
            f"Buffer holds {texture.data.size} bytes, expected {expected}"
        )

    pixels = texture.data.reshape(-1, texture.channels)
    alpha = pixels[:, 3].copy() if texture.channels == 4 else None
    return ChannelPlanes(
        r=pixels[:, 0].copy(),
        g=pixels[:, 1].copy(),
        b=pixels[:, 2].copy(),
        a=alpha,
        width=texture.width,
        height=texture.height,
    )


def combine_channels(planes: ChannelPlanes) -> TextureData:
    """Interleave planes back into a 3- or 4-channel texture."""
    count = planes.width * planes.height
    stack = [planes.r, planes.g, planes.b]
    if planes.a is not None:
        stack.append(planes.a)
    for idx, plane in enumerate(stack):
        if np.size(plane) != count:
            raise InvalidBufferError(
                f"Plane {'rgba'[idx]} holds {np.size(plane)} values, "
                f"expected {planes.width}x{planes.height} = {count}"
            )

    data = np.stack(
        [np.asarray(p, dtype=np.uint8).reshape(-1) for p in stack], axis=-1
    )
    return TextureData(planes.width, planes.height, len(stack), data)


def make_planes(r, g, b, width: int, height: int,
                a: Optional[np.ndarray] = None) -> ChannelPlanes:
    """Build planes from any array-likes, coercing to flat uint8."""
    def _plane(values):
        return np.asarray(values, dtype=np.uint8).reshape(-1)

    return ChannelPlanes(
        r=_plane(r), g=_plane(g), b=_plane(b),
        a=_plane(a) if a is not None else None,
        width=width, height=height,
    )


def extract_mer_channels(texture: TextureData) -> Dict[str, Optional[np.ndarray]]:
    """Extract packed metallic/emissive/roughness/subsurface planes."""
    planes = extract_channels(texture)
    return {
        "metallic": planes.r,
        "emissive": planes.g,
        "roughness": planes.b,
        "subsurface": planes.a,
    }


def extract_specular_channels(texture: TextureData) -> Dict[str, Optional[np.ndarray]]:
    """Extract LabPBR smoothness/reflectance/porosity-or-subsurface/emission planes."""
    planes = extract_channels(texture)
    return {
        "smoothness": planes.r,
        "reflectance": planes.g,
        "porosity_or_subsurface": planes.b,
        "emission": planes.a,
    }


def extract_normal_channels(texture: TextureData) -> Dict[str, Optional[np.ndarray]]:
    """Extract LabPBR normal X/Y, ambient occlusion, and height planes."""
    planes = extract_channels(texture)
    return {
        "x": planes.r,
        "y": planes.g,
        "ambient_occlusion": planes.b,
        "height": planes.a,
    }
