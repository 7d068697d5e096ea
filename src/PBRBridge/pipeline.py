"""Direction-aware conversion of single texture sets and whole directories.

`BidirectionalConverter` asks the format detector which convention an input
uses (unless a direction is forced), gathers the sibling textures the chosen
direction needs, and hands them to the matching phase converter.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import (
    ConversionDirection,
    ConverterConfig,
    MER_SUFFIX,
    MERS_SUFFIX,
    NORMAL_SUFFIX,
    SPECULAR_SUFFIX,
    TextureFormat,
)
from .core import (
    AmbiguousFormatError,
    ConversionResult,
    DetectionResult,
    TextureNotFoundError,
    detect_format,
    detect_format_with_content,
    find_set_sibling,
    find_texture_files,
    group_texture_sets,
    is_mer_texture,
    split_source_suffix,
)
from .phases.bedrock import BedrockConverter
from .phases.labpbr import LabPBRConverter

logger = logging.getLogger("pbr_bridge")

_FORMAT_DIRECTIONS = {
    TextureFormat.BEDROCK: ConversionDirection.BEDROCK_TO_LABPBR,
    TextureFormat.LABPBR: ConversionDirection.LABPBR_TO_BEDROCK,
}


class BidirectionalConverter:
    """Convert texture sets in whichever direction they need."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        """Initialize converter and its per-direction phase converters."""
        self.config = config or ConverterConfig()
        self.labpbr = LabPBRConverter(self.config)
        self.bedrock = BedrockConverter(self.config)

    def _detect(self, texture_path: str) -> DetectionResult:
        if self.config.detection.content_fallback:
            return detect_format_with_content(texture_path, self.config)
        return detect_format(texture_path, self.config)

    def _mer_source(self, texture_path: str) -> str:
        """Return the MER texture of the set ``texture_path`` belongs to.

        An unsuffixed input with no ``_mer``/``_mers`` sibling is taken as
        the MER texture itself; a ``_s`` or ``_n`` input never is.
        """
        if is_mer_texture(texture_path):
            return texture_path
        mer_path = (find_set_sibling(texture_path, MER_SUFFIX)
                    or find_set_sibling(texture_path, MERS_SUFFIX))
        if mer_path:
            return mer_path
        _, suffix = split_source_suffix(Path(texture_path).stem)
        if suffix:
            raise TextureNotFoundError(f"Could not find MER texture for {texture_path}")
        return texture_path

    def _labpbr_sources(self, texture_path: str,
                        detection: DetectionResult) -> Tuple[str, str, str]:
        """Return the ``(specular, normal, base)`` textures of a LabPBR set."""
        _, suffix = split_source_suffix(Path(texture_path).stem)
        if suffix == SPECULAR_SUFFIX:
            specular_path = texture_path
        else:
            specular_path = (find_set_sibling(texture_path, SPECULAR_SUFFIX)
                             or detection.specular_texture_path)
        if suffix == NORMAL_SUFFIX:
            normal_path = texture_path
        else:
            normal_path = find_set_sibling(texture_path, NORMAL_SUFFIX)
        base_path = find_set_sibling(texture_path)
        if not (specular_path and normal_path and base_path):
            raise TextureNotFoundError(
                "Could not find required textures for LabPBR to Bedrock conversion"
            )
        return specular_path, normal_path, base_path

    def convert_auto(self, texture_path: str, output_dir: Optional[str] = None,
                     direction: ConversionDirection = ConversionDirection.AUTO
                     ) -> ConversionResult:
        """Convert the set ``texture_path`` belongs to.

        ``direction`` forces a conversion direction; with ``AUTO`` it comes
        from detection, and an undetectable format fails the call with an
        ``AmbiguousFormatError`` message. Source textures are looked up by
        name for the chosen direction, whichever format detection favoured.
        """
        detection = self._detect(texture_path)
        if direction == ConversionDirection.AUTO:
            direction = _FORMAT_DIRECTIONS.get(detection.format, ConversionDirection.AUTO)

        result = ConversionResult(source_path=texture_path, direction=direction)
        result.add_message(
            f"Detected format: {detection.format.value} "
            f"(confidence: {detection.confidence:.2f})"
        )

        try:
            if direction == ConversionDirection.BEDROCK_TO_LABPBR:
                result.add_message("Converting from Bedrock to LabPBR format...")
                inner = self.labpbr.convert_texture(
                    self._mer_source(texture_path), None, output_dir
                )
            elif direction == ConversionDirection.LABPBR_TO_BEDROCK:
                result.add_message("Converting from LabPBR to Bedrock format...")
                specular_path, normal_path, base_path = self._labpbr_sources(
                    texture_path, detection
                )
                inner = self.bedrock.convert_labpbr_to_bedrock(
                    specular_path, normal_path, base_path, output_dir
                )
            else:
                raise AmbiguousFormatError(
                    f"Could not determine texture format of {texture_path}; "
                    "force a conversion direction"
                )
        except Exception as e:
            logger.error("Conversion failed for %s: %s", texture_path, e, exc_info=True)
            result.fail(e)
            return result

        result.success = inner.success
        result.messages.extend(inner.messages)
        result.output_paths = inner.output_paths
        return result

    def convert_directory(self, input_dir: str, output_dir: Optional[str] = None,
                          direction: ConversionDirection = ConversionDirection.AUTO,
                          recursive: Optional[bool] = None) -> List[ConversionResult]:
        """Convert every texture set under ``input_dir``, one set at a time.

        The members of a set are tried in sorted order until one converts;
        a set that never converts is reported by its last failure and the
        batch moves on. Returns one result per set.
        """
        batch = self.config.batch
        if recursive is None:
            recursive = batch.recursive
        if not os.path.isdir(input_dir):
            raise TextureNotFoundError(f"Input directory not found: {input_dir}")

        files = find_texture_files(input_dir, recursive, batch.supported_formats)
        sets = group_texture_sets(files)
        logger.info("Found %d texture files in %d sets in %s",
                    len(files), len(sets), input_dir)

        results: List[ConversionResult] = []
        for key, members in tqdm(sets.items(), desc="Converting", unit="set",
                                 disable=not batch.show_progress):
            logger.info("Processing texture set: %s", key)
            for path in members:
                try:
                    result = self.convert_auto(path, output_dir, direction)
                except Exception as e:
                    logger.error("Unexpected failure for %s: %s", path, e, exc_info=True)
                    result = ConversionResult(source_path=path, direction=direction)
                    result.fail(e)
                if result.success:
                    break
                logger.debug("Set %s not converted from %s", key, path)
            results.append(result)

        self._log_summary(results)
        return results

    @staticmethod
    def summarize(results: List[ConversionResult]) -> Dict[str, int]:
        """Count successful and failed conversions."""
        succeeded = sum(1 for r in results if r.success)
        return {"total": len(results), "succeeded": succeeded,
                "failed": len(results) - succeeded}

    def _log_summary(self, results: List[ConversionResult]):
        summary = self.summarize(results)
        logger.info(
            "Conversion complete: %d succeeded, %d failed",
            summary["succeeded"], summary["failed"],
        )
