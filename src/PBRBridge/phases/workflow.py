"""Per-channel transfer functions from packed MER to LabPBR.

Every function takes an int or a numpy array of 0-255 values. Ints come
back as ints; arrays come back as uint8 arrays of the same shape, so the
same code serves single-pixel checks and whole-texture conversion.
"""

import numpy as np

from ..config import PredefinedMetal

# Threshold above which a metallic value selects the metal branch.
METALLIC_THRESHOLD = 200

# LabPBR blue-channel sub-ranges.
POROSITY_MAX = 64
SUBSURFACE_MIN = 65

# Placeholder porosity used when the MER texture carries no subsurface data.
DEFAULT_POROSITY = 0.1

_DIELECTRIC_F0_MIN = 4
_DIELECTRIC_F0_MAX = 229
_EMISSION_MAX = 254


def round_half_up(x):
    """Round non-negative values half away from zero (numpy rounds half to even)."""
    return np.floor(np.asarray(x, dtype=np.float64) + 0.5)


def finish_channel(values, like):
    """Clamp to [0, 255] and return an int or uint8 array matching ``like``."""
    out = np.clip(values, 0, 255).astype(np.uint8)
    if np.ndim(like) == 0:
        return int(out)
    return out


def _as_float(value) -> np.ndarray:
    return np.asarray(value, dtype=np.float64)


def roughness_to_smoothness(roughness):
    """Perceptual smoothness: ``255 * (1 - sqrt(r / 255))``."""
    r = _as_float(roughness)
    smoothness = 1.0 - np.sqrt(np.clip(r, 0, 255) / 255.0)
    return finish_channel(round_half_up(smoothness * 255.0), roughness)


def smoothness_to_roughness(smoothness):
    """Roughness from perceptual smoothness: ``255 * (1 - s / 255) ** 2``.

    Not an exact inverse of :func:`roughness_to_smoothness`; rounding in
    both directions loses a few levels.
    """
    s = _as_float(smoothness)
    roughness = np.power(1.0 - np.clip(s, 0, 255) / 255.0, 2.0)
    return finish_channel(round_half_up(roughness * 255.0), smoothness)


def is_metallic(metallic):
    """Return whether a metallic value selects the metal branch."""
    result = _as_float(metallic) > METALLIC_THRESHOLD
    if np.ndim(metallic) == 0:
        return bool(result)
    return result


def metallic_to_f0(metallic):
    """Map metallic to a LabPBR reflectance value.

    Metals (``m > 200``) land in the predefined-metal range 230-255,
    dielectrics are scaled linearly into 4-229.
    """
    m = _as_float(metallic)
    metal = np.minimum(255.0, 230.0 + np.floor((m - METALLIC_THRESHOLD) / 5.0))
    dielectric = round_half_up(
        _DIELECTRIC_F0_MIN + (m / 255.0) * (_DIELECTRIC_F0_MAX - _DIELECTRIC_F0_MIN)
    )
    return finish_channel(np.where(m > METALLIC_THRESHOLD, metal, dielectric), metallic)


def convert_emissive(emissive):
    """Cap emission at 254; LabPBR reserves 255."""
    return finish_channel(np.minimum(_as_float(emissive), _EMISSION_MAX), emissive)


def get_predefined_metal(r, g, b):
    """Guess a predefined metal from a base color.

    Coarse color buckets: yellowish is gold, reddish is copper, near-white
    is silver, everything else (mid-gray included) is iron. Boundary
    values such as ``g == 150`` fall through to iron.
    """
    rf, gf, bf = _as_float(r), _as_float(g), _as_float(b)
    gold = (rf > 200) & (gf > 150) & (bf < 100)
    copper = (rf > 200) & (gf < 150) & (bf < 100)
    silver = (rf > 200) & (gf > 200) & (bf > 200)
    metal = np.select(
        [gold, copper, silver],
        [int(PredefinedMetal.GOLD), int(PredefinedMetal.COPPER), int(PredefinedMetal.SILVER)],
        default=int(PredefinedMetal.IRON),
    )
    if np.ndim(metal) == 0:
        return PredefinedMetal(int(metal))
    return metal.astype(np.uint8)


def convert_subsurface(subsurface):
    """Pack subsurface strength into LabPBR's 65-255 range; 0 stays 0."""
    s = _as_float(subsurface)
    packed = SUBSURFACE_MIN + np.floor((s / 255.0) * (255 - SUBSURFACE_MIN))
    return finish_channel(np.where(s == 0, 0.0, packed), subsurface)


def convert_porosity(porosity: float) -> int:
    """Pack a 0-1 porosity into LabPBR's 0-64 range."""
    p = min(max(float(porosity), 0.0), 1.0)
    return int(round_half_up(p * POROSITY_MAX))
