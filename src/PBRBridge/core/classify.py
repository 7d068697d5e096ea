"""Texture-set format detection by filename suffix, siblings, and content."""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from ..config import (
    ConversionDirection,
    ConverterConfig,
    MER_SUFFIX,
    MERS_SUFFIX,
    NORMAL_SUFFIX,
    SPECULAR_SUFFIX,
    TextureFormat,
)
from .channels import extract_channels
from .errors import ConversionError
from .io import load_texture
from .paths import find_set_sibling, split_set_suffix, split_source_suffix
from .records import DetectionResult, TextureData

logger = logging.getLogger("pbr_bridge.detect")

_LABPBR_MARKERS = (SPECULAR_SUFFIX, NORMAL_SUFFIX)
_BEDROCK_MARKERS = (MER_SUFFIX, MERS_SUFFIX)


def detect_format(texture_path: str,
                  config: Optional[ConverterConfig] = None) -> DetectionResult:
    """Classify the texture set ``texture_path`` belongs to by naming alone.

    The input may be any member of a set (base, ``_mer``, ``_s`` or ``_n``).
    Each format collects points for a matching suffix on the input, for its
    sibling files being present, and for the base texture being present.
    The strictly higher score wins; a tie or no evidence at all gives
    ``UNKNOWN``. Only sibling paths that exist are filled in.
    """
    weights = (config or ConverterConfig()).detection
    _, suffix = split_source_suffix(Path(texture_path).stem)

    base_path = find_set_sibling(texture_path)
    specular_path = find_set_sibling(texture_path, SPECULAR_SUFFIX)
    normal_path = find_set_sibling(texture_path, NORMAL_SUFFIX)
    mer_path = (find_set_sibling(texture_path, MER_SUFFIX)
                or find_set_sibling(texture_path, MERS_SUFFIX))

    labpbr_score = 0.0
    bedrock_score = 0.0
    if suffix in _LABPBR_MARKERS:
        labpbr_score += weights.suffix_weight
    if suffix in _BEDROCK_MARKERS:
        bedrock_score += weights.suffix_weight
    if specular_path and normal_path:
        labpbr_score += weights.sibling_weight
    if mer_path:
        bedrock_score += weights.sibling_weight
    if base_path:
        labpbr_score += weights.base_weight
        bedrock_score += weights.base_weight

    logger.debug(
        "Detection scores for %s: labpbr=%.2f bedrock=%.2f",
        texture_path, labpbr_score, bedrock_score,
    )

    if labpbr_score > bedrock_score:
        return DetectionResult(
            format=TextureFormat.LABPBR,
            confidence=round(labpbr_score, 4),
            base_texture_path=base_path,
            specular_texture_path=specular_path,
            normal_texture_path=normal_path,
        )
    if bedrock_score > labpbr_score:
        return DetectionResult(
            format=TextureFormat.BEDROCK,
            confidence=round(bedrock_score, 4),
            base_texture_path=base_path,
            mer_texture_path=mer_path,
        )
    if labpbr_score > 0:
        logger.debug("Tied detection scores for %s; format is ambiguous", texture_path)
    return DetectionResult()


def analyze_texture_content(texture: TextureData,
                            tolerance: float = 30.0) -> TextureFormat:
    """Guess the format of a single texture from its mean R/G/B values.

    Bright red with dark green reads as a LabPBR specular map (high
    smoothness, dielectric F0); bright blue with dark red reads as packed
    MER (rough, non-metallic). Means near neutral gray are most likely a
    normal map, which says nothing about the format.
    """
    planes = extract_channels(texture)
    r_mean = float(np.mean(planes.r))
    g_mean = float(np.mean(planes.g))
    b_mean = float(np.mean(planes.b))

    if r_mean > 150 and g_mean < 100:
        return TextureFormat.LABPBR
    if b_mean > 150 and r_mean < 100:
        return TextureFormat.BEDROCK
    if (abs(r_mean - 128) < tolerance
            and abs(g_mean - 128) < tolerance
            and abs(b_mean - 128) < tolerance):
        logger.debug(
            "Content looks like a normal map (r=%.1f, g=%.1f, b=%.1f); "
            "format undetermined", r_mean, g_mean, b_mean,
        )
    return TextureFormat.UNKNOWN


def detect_format_with_content(texture_path: str,
                               config: Optional[ConverterConfig] = None) -> DetectionResult:
    """Detect by naming first, then fall back to pixel statistics.

    Content-only guesses carry ``detection.content_confidence`` (0.2 by
    default) so they never outrank a naming-based result.
    """
    config = config or ConverterConfig()
    result = detect_format(texture_path, config)
    if result.format != TextureFormat.UNKNOWN or not os.path.isfile(texture_path):
        return result

    try:
        texture = load_texture(texture_path)
        fmt = analyze_texture_content(texture, config.detection.normal_map_tolerance)
    except (ConversionError, IOError) as e:
        logger.warning("Content analysis failed for %s: %s", texture_path, e)
        return result

    if fmt == TextureFormat.LABPBR:
        return DetectionResult(
            format=fmt,
            confidence=config.detection.content_confidence,
            specular_texture_path=texture_path,
        )
    if fmt == TextureFormat.BEDROCK:
        return DetectionResult(
            format=fmt,
            confidence=config.detection.content_confidence,
            mer_texture_path=texture_path,
        )
    return result


def detect_format_in_directory(directory: str,
                               config: Optional[ConverterConfig] = None) -> Dict[str, DetectionResult]:
    """Detect every texture set in one directory, keyed by base name.

    Only results above ``detection.directory_min_confidence`` are kept.
    """
    config = config or ConverterConfig()
    results: Dict[str, DetectionResult] = {}
    if not os.path.isdir(directory):
        logger.warning("Directory not found: %s", directory)
        return results

    supported = {ext.lower() for ext in config.batch.supported_formats}
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if Path(name).suffix.lower() not in supported or not os.path.isfile(path):
            continue
        result = detect_format(path, config)
        if result.confidence > config.detection.directory_min_confidence:
            base, _ = split_set_suffix(Path(name).stem)
            results[base] = result
    return results


def determine_conversion_direction(texture_path: str,
                                   config: Optional[ConverterConfig] = None) -> ConversionDirection:
    """Map the detected format to the direction that converts away from it.

    ``AUTO`` means the format is unknown; the caller must force a
    direction or give up.
    """
    fmt = detect_format(texture_path, config).format
    if fmt == TextureFormat.BEDROCK:
        return ConversionDirection.BEDROCK_TO_LABPBR
    if fmt == TextureFormat.LABPBR:
        return ConversionDirection.LABPBR_TO_BEDROCK
    return ConversionDirection.AUTO
