"""Rebuild normal maps, extract heightmaps, and bake AO from LabPBR normals.

A LabPBR ``_n`` texture stores normal X/Y in R/G, ambient occlusion in B
(0 = fully occluded, 255 = unoccluded), and an optional heightmap in A.
"""

import logging
from typing import Optional

import numpy as np

from ..config import ConverterConfig
from ..core import (
    InvalidBufferError,
    MissingChannelError,
    TextureData,
    extract_channels,
)
from .inverse import reconstruct_normal_map_blue_channel
from .workflow import round_half_up

logger = logging.getLogger("pbr_bridge.normal")


class NormalMapProcessor:
    """Derive packed-convention outputs from a LabPBR normal texture."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        """Initialize processor with the converter configuration."""
        self.config = config or ConverterConfig()
        self.cfg = self.config.normal

    def extract_height_map(self, normal_texture: TextureData) -> TextureData:
        """Copy the alpha plane into a single-channel heightmap."""
        if not normal_texture.has_alpha:
            raise MissingChannelError(
                "Normal texture does not have an alpha channel for heightmap extraction"
            )
        planes = extract_channels(normal_texture)
        logger.debug(
            "Extracted %dx%d heightmap (range %d-%d)",
            planes.width, planes.height, int(planes.a.min()), int(planes.a.max()),
        )
        return TextureData(planes.width, planes.height, 1, planes.a)

    def reconstruct_normal_map(self, normal_texture: TextureData) -> TextureData:
        """Return an RGB normal map with B rebuilt from X/Y."""
        planes = extract_channels(normal_texture)
        return self.create_directx_normal_map(
            planes.r, planes.g, planes.width, planes.height
        )

    def create_directx_normal_map(self, normal_x, normal_y,
                                  width: int, height: int) -> TextureData:
        """Build an RGB normal map from independent X and Y planes."""
        x = np.asarray(normal_x, dtype=np.uint8).reshape(-1)
        y = np.asarray(normal_y, dtype=np.uint8).reshape(-1)
        count = width * height
        if x.size != count or y.size != count:
            raise InvalidBufferError(
                f"Normal planes hold {x.size}/{y.size} values, expected {count}"
            )
        blue = reconstruct_normal_map_blue_channel(x, y)
        return TextureData(width, height, 3, np.stack([x, y, blue], axis=-1))

    def bake_ao_into_base_color(self, ao_plane, base_color: TextureData,
                                strength: Optional[float] = None) -> TextureData:
        """Darken base color RGB by the AO plane; alpha is passed through.

        ``out = round(in * (1 - (1 - ao/255) * strength))`` with the default
        strength of 0.5, so full occlusion halves the color.
        """
        ao = np.asarray(ao_plane, dtype=np.float64).reshape(-1)
        if ao.size != base_color.pixel_count:
            raise InvalidBufferError(
                f"AO plane holds {ao.size} values but base color has "
                f"{base_color.pixel_count} pixels"
            )
        strength = self.cfg.ao_strength if strength is None else float(strength)

        pixels = base_color.data.reshape(-1, base_color.channels).astype(np.float64)
        ao_factor = 1.0 - ao / 255.0
        shade = 1.0 - ao_factor * strength
        out = pixels.copy()
        color_channels = min(3, base_color.channels)
        out[:, :color_channels] = round_half_up(
            pixels[:, :color_channels] * shade[:, None]
        )
        return TextureData(
            base_color.width, base_color.height, base_color.channels,
            np.clip(out, 0, 255).astype(np.uint8),
        )
