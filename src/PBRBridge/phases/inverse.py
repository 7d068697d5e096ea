"""Per-channel transfer functions from LabPBR back to packed MER.

These are deliberately not the mathematical inverses of ``workflow``:
roughness is a plain complement and metallic is a six-tier step function.
"""

from typing import Optional

import numpy as np

from ..config import PredefinedMetal
from .workflow import SUBSURFACE_MIN, finish_channel, round_half_up

PREDEFINED_METAL_MIN = 230
PREDEFINED_METAL_MAX = 255

# (lower bound on F0, metallic value), checked top-down.
_F0_METALLIC_TIERS = (
    (230, 255),
    (200, 255),
    (150, 230),
    (100, 180),
    (50, 100),
)


def _as_float(value) -> np.ndarray:
    return np.asarray(value, dtype=np.float64)


def smoothness_to_bedrock_roughness(smoothness):
    """Roughness as the direct complement ``255 - smoothness``."""
    return finish_channel(255.0 - _as_float(smoothness), smoothness)


def f0_to_metallic(f0):
    """Map LabPBR reflectance onto one of six metallic tiers."""
    v = _as_float(f0)
    metallic = np.select(
        [v >= bound for bound, _ in _F0_METALLIC_TIERS],
        [value for _, value in _F0_METALLIC_TIERS],
        default=0,
    )
    return finish_channel(metallic, f0)


def labpbr_emissive_to_bedrock_emissive(emissive):
    """Stretch LabPBR emission (0-254) back over 0-255."""
    e = _as_float(emissive)
    scaled = np.minimum(255.0, round_half_up(e / 254.0 * 255.0))
    return finish_channel(np.where(e == 0, 0.0, scaled), emissive)


def labpbr_subsurface_to_bedrock_subsurface(subsurface):
    """Unpack LabPBR subsurface (65-255) to 0-255; porosity values give 0."""
    s = _as_float(subsurface)
    unpacked = round_half_up(
        np.maximum(s - SUBSURFACE_MIN, 0.0) / (255 - SUBSURFACE_MIN) * 255.0
    )
    return finish_channel(np.where(s < SUBSURFACE_MIN, 0.0, unpacked), subsurface)


def reconstruct_normal_map_blue_channel(r, g):
    """Rebuild the tangent-space Z component from stored X and Y.

    ``b = sqrt(1 - (r/255)^2 - (g/255)^2)``; the radicand is floored at 0
    so saturated X/Y give 0 rather than NaN.
    """
    x = _as_float(r) / 255.0
    y = _as_float(g) / 255.0
    radicand = 1.0 - np.minimum(1.0, x * x + y * y)
    with np.errstate(invalid="ignore"):
        blue = np.sqrt(np.maximum(radicand, 0.0))
    blue = np.nan_to_num(blue, nan=0.0)
    return finish_channel(round_half_up(blue * 255.0), r)


def is_predefined_metal(f0):
    """Return whether a reflectance value lies in the reserved metal range."""
    v = _as_float(f0)
    result = (v >= PREDEFINED_METAL_MIN) & (v <= PREDEFINED_METAL_MAX)
    if np.ndim(f0) == 0:
        return bool(result)
    return result


def get_predefined_metal_type(f0: int) -> Optional[PredefinedMetal]:
    """Resolve a reflectance code to its metal.

    Only 230-237 name a metal. 238-255 are reserved but unassigned and
    resolve to None, as does anything below 230.
    """
    value = int(f0)
    if PredefinedMetal.IRON <= value <= PredefinedMetal.SILVER:
        return PredefinedMetal(value)
    return None
