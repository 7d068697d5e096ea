"""Convert packed MER texture sets to LabPBR specular textures."""

import logging
import os
from typing import Optional

import numpy as np

from ..config import ConversionDirection, ConverterConfig
from ..core import (
    ChannelPlanes,
    ConversionResult,
    InvalidDimensionsError,
    TextureData,
    TextureNotFoundError,
    check_output_path,
    combine_channels,
    extract_channels,
    find_color_texture,
    get_specular_texture_path,
    load_texture,
    make_planes,
    save_texture,
)
from .workflow import (
    DEFAULT_POROSITY,
    convert_emissive,
    convert_porosity,
    convert_subsurface,
    get_predefined_metal,
    is_metallic,
    metallic_to_f0,
    roughness_to_smoothness,
)

logger = logging.getLogger("pbr_bridge.labpbr")


class LabPBRConverter:
    """Build a LabPBR ``_s`` texture from a MER texture and its base color."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        """Initialize converter with the converter configuration."""
        self.config = config or ConverterConfig()
        self.cfg = self.config.output

    def create_specular_texture(self, mer: ChannelPlanes,
                                color: ChannelPlanes) -> TextureData:
        """Map MER planes plus base color planes onto a 4-channel specular texture.

        R is smoothness from roughness. G is a predefined metal guessed from
        the base color where the pixel is metallic, else F0 from metallic.
        B packs subsurface where the MER alpha is non-zero, else the default
        porosity. A is emission capped at 254.
        """
        if (mer.width, mer.height) != (color.width, color.height):
            raise InvalidDimensionsError(
                f"MER texture is {mer.width}x{mer.height} but color texture is "
                f"{color.width}x{color.height}"
            )

        smoothness = roughness_to_smoothness(mer.roughness)
        reflectance = np.where(
            is_metallic(mer.metallic),
            get_predefined_metal(color.r, color.g, color.b),
            metallic_to_f0(mer.metallic),
        )

        porosity = np.full(mer.pixel_count, convert_porosity(DEFAULT_POROSITY),
                           dtype=np.uint8)
        if mer.subsurface is not None:
            porous_or_sss = np.where(
                mer.subsurface > 0, convert_subsurface(mer.subsurface), porosity
            )
        else:
            porous_or_sss = porosity

        emission = convert_emissive(mer.emissive)
        return combine_channels(make_planes(
            smoothness, reflectance, porous_or_sss, mer.width, mer.height,
            a=emission,
        ))

    def convert_texture(self, mer_path: str, color_path: Optional[str] = None,
                        output_dir: Optional[str] = None) -> ConversionResult:
        """Convert one MER texture and write ``<base>_s.<fmt>``.

        The color texture is looked up next to the MER texture when not
        given. Failures are recorded on the returned result, never raised.
        """
        result = ConversionResult(
            source_path=mer_path,
            direction=ConversionDirection.BEDROCK_TO_LABPBR,
        )
        output_dir = output_dir or self.cfg.output_dir or None

        try:
            if not color_path:
                color_path = find_color_texture(mer_path)
                if not color_path:
                    raise TextureNotFoundError(
                        "Could not find corresponding color texture"
                    )
                result.add_message(f"Found color texture: {os.path.basename(color_path)}")

            result.add_message("Loading textures...")
            mer_texture = load_texture(mer_path)
            color_texture = load_texture(color_path)

            result.add_message("Extracting channels...")
            mer_planes = extract_channels(mer_texture)
            color_planes = extract_channels(color_texture)

            result.add_message("Creating specular texture...")
            specular = self.create_specular_texture(mer_planes, color_planes)

            specular_path = get_specular_texture_path(
                color_path, output_dir, self.cfg.format
            )
            check_output_path(specular_path, mer_path, color_path)
            save_texture(specular, specular_path, self.cfg.format, self.cfg.quality)
            result.output_paths["specular"] = specular_path
            result.add_message(
                f"Saved specular texture to: {os.path.basename(specular_path)}"
            )
            logger.info("Saved specular texture: %s", specular_path)
            result.success = True
        except Exception as e:
            logger.error("MER to LabPBR conversion failed for %s: %s", mer_path, e,
                         exc_info=True)
            result.fail(e)

        return result
