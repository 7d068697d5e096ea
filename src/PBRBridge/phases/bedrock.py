"""Convert LabPBR texture sets back to packed MER/MERS textures."""

import logging
import os
from typing import Optional, Tuple

import numpy as np

from ..config import (
    AO_BAKED_SUFFIX,
    BEDROCK_NORMAL_SUFFIX,
    ConversionDirection,
    ConverterConfig,
    HEIGHTMAP_SUFFIX,
    MER_SUFFIX,
    MERS_SUFFIX,
)
from ..core import (
    ChannelPlanes,
    ConversionResult,
    TextureData,
    check_output_path,
    combine_channels,
    extract_channels,
    get_output_path,
    load_texture,
    make_planes,
    save_texture,
)
from .inverse import f0_to_metallic, smoothness_to_bedrock_roughness
from .normal import NormalMapProcessor
from .workflow import SUBSURFACE_MIN

logger = logging.getLogger("pbr_bridge.bedrock")


def scan_for_subsurface(porosity_or_subsurface) -> bool:
    """Return True when any pixel of the specular B plane encodes subsurface."""
    return bool(np.any(np.asarray(porosity_or_subsurface) >= SUBSURFACE_MIN))


class BedrockConverter:
    """Build MER/MERS, normal, heightmap, and AO-baked textures from LabPBR."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        """Initialize converter with the converter configuration."""
        self.config = config or ConverterConfig()
        self.cfg = self.config.output
        self.normal_cfg = self.config.normal
        self.normals = NormalMapProcessor(self.config)

    def create_mer_texture(self, specular: ChannelPlanes) -> Tuple[TextureData, str]:
        """Map specular planes onto a 4-channel MER texture.

        Returns the texture and the filename suffix to save it under. The
        whole B plane is scanned before any output is built: with no
        subsurface pixel the alpha plane is fully opaque and the suffix is
        ``_mer``, otherwise alpha carries the subsurface values (opaque
        elsewhere) and the suffix is ``_mers``.
        """
        has_subsurface = scan_for_subsurface(specular.porosity_or_subsurface)

        metallic = f0_to_metallic(specular.reflectance)
        roughness = smoothness_to_bedrock_roughness(specular.smoothness)
        # No emission inverse in this direction.
        emissive = np.zeros(specular.pixel_count, dtype=np.uint8)

        if has_subsurface:
            b = specular.porosity_or_subsurface
            alpha = np.where(b >= SUBSURFACE_MIN, b, 255).astype(np.uint8)
        else:
            alpha = np.full(specular.pixel_count, 255, dtype=np.uint8)

        texture = combine_channels(make_planes(
            metallic, emissive, roughness, specular.width, specular.height,
            a=alpha,
        ))
        return texture, MERS_SUFFIX if has_subsurface else MER_SUFFIX

    def _save(self, texture: TextureData, base_path: str, suffix: str,
              output_dir: Optional[str], sources: Tuple[str, ...] = ()) -> str:
        path = get_output_path(base_path, suffix, output_dir, self.cfg.format)
        check_output_path(path, *sources)
        save_texture(texture, path, self.cfg.format, self.cfg.quality)
        logger.info("Saved %s", path)
        return path

    def convert_labpbr_to_bedrock(self, specular_path: str, normal_path: str,
                                  base_path: str,
                                  output_dir: Optional[str] = None) -> ConversionResult:
        """Convert one LabPBR set and write the packed outputs.

        Always writes ``<base>_mer`` or ``<base>_mers`` and ``<base>_normal``.
        Writes ``<base>_heightmap`` when height extraction is enabled and the
        normal texture has alpha, and ``<base>_withAO`` when AO baking is
        enabled. Failures are recorded on the result, never raised.
        """
        result = ConversionResult(
            source_path=specular_path,
            direction=ConversionDirection.LABPBR_TO_BEDROCK,
        )
        output_dir = output_dir or self.cfg.output_dir or os.path.dirname(specular_path)

        sources = (specular_path, normal_path, base_path)
        try:
            result.add_message("Loading textures...")
            specular_texture = load_texture(specular_path)
            normal_texture = load_texture(normal_path)
            base_texture = load_texture(base_path)

            result.add_message("Extracting channels...")
            specular = extract_channels(specular_texture)
            normal = extract_channels(normal_texture)

            result.add_message("Creating MER texture...")
            mer_texture, mer_suffix = self.create_mer_texture(specular)
            mer_path = self._save(mer_texture, base_path, mer_suffix, output_dir,
                                  sources)
            result.output_paths["mer"] = mer_path
            label = "MERS" if mer_suffix == MERS_SUFFIX else "MER"
            result.add_message(f"Saved {label} texture to: {os.path.basename(mer_path)}")

            result.add_message("Creating Bedrock normal map...")
            bedrock_normal = self.normals.reconstruct_normal_map(normal_texture)
            normal_out = self._save(bedrock_normal, base_path, BEDROCK_NORMAL_SUFFIX,
                                    output_dir, sources)
            result.output_paths["bedrock_normal"] = normal_out
            result.add_message(f"Saved normal map to: {os.path.basename(normal_out)}")

            if self.normal_cfg.extract_height and normal_texture.has_alpha:
                result.add_message("Extracting heightmap...")
                height_map = self.normals.extract_height_map(normal_texture)
                height_out = self._save(height_map, base_path, HEIGHTMAP_SUFFIX,
                                        output_dir, sources)
                result.output_paths["height_map"] = height_out
                result.add_message(f"Saved heightmap to: {os.path.basename(height_out)}")

            if self.normal_cfg.bake_ao:
                result.add_message("Baking AO into base color...")
                baked = self.normals.bake_ao_into_base_color(
                    normal.ambient_occlusion, base_texture
                )
                baked_out = self._save(baked, base_path, AO_BAKED_SUFFIX, output_dir,
                                       sources)
                result.output_paths["base_color_with_ao"] = baked_out
                result.add_message(
                    f"Saved base color with AO to: {os.path.basename(baked_out)}"
                )

            result.success = True
        except Exception as e:
            logger.error("LabPBR to MER conversion failed for %s: %s", specular_path, e,
                         exc_info=True)
            result.fail(e)

        return result
