"""Define typed configuration models and shared enums for the converter.

Use `ConverterConfig` to load, validate, and persist runtime settings.
"""

import os
import logging
import yaml
from dataclasses import dataclass, field
from typing import List
from enum import Enum, IntEnum

logger = logging.getLogger("pbr_bridge.config")

_SUPPORTED_CONFIG_VERSION = 1


class TextureFormat(Enum):
    """Material-encoding convention of a texture set."""

    BEDROCK = "bedrock"
    LABPBR = "labpbr"
    UNKNOWN = "unknown"


class ConversionDirection(Enum):
    """Direction a conversion runs in."""

    BEDROCK_TO_LABPBR = "to-labpbr"
    LABPBR_TO_BEDROCK = "to-bedrock"
    AUTO = "auto"


class PredefinedMetal(IntEnum):
    """Reserved LabPBR reflectance codes naming a specific metal."""

    IRON = 230
    GOLD = 231
    ALUMINUM = 232
    CHROME = 233
    COPPER = 234
    LEAD = 235
    PLATINUM = 236
    SILVER = 237


# Filename suffixes that form the contract with resource packs.
MER_SUFFIX = "_mer"
MERS_SUFFIX = "_mers"
SPECULAR_SUFFIX = "_s"
NORMAL_SUFFIX = "_n"
BEDROCK_NORMAL_SUFFIX = "_normal"
HEIGHTMAP_SUFFIX = "_heightmap"
AO_BAKED_SUFFIX = "_withAO"

OUTPUT_FORMATS = ("png", "jpg", "tga")


@dataclass
class OutputConfig:
    """Store settings for writing converted textures."""

    format: str = "png"  # png | jpg | tga
    quality: int = 8  # 1-10
    output_dir: str = ""  # empty = next to the source texture


@dataclass
class NormalConfig:
    """Store settings for normal, height, and AO outputs."""

    extract_height: bool = True
    bake_ao: bool = False
    ao_strength: float = 0.5


@dataclass
class DetectionConfig:
    """Store weights for naming-based format detection."""

    suffix_weight: float = 0.4
    sibling_weight: float = 0.3
    base_weight: float = 0.1
    content_fallback: bool = False
    content_confidence: float = 0.2
    normal_map_tolerance: float = 30.0
    directory_min_confidence: float = 0.3


@dataclass
class BatchConfig:
    """Store settings for directory conversion."""

    recursive: bool = False
    supported_formats: List[str] = field(default_factory=lambda: [
        ".png", ".jpg", ".jpeg", ".tga",
    ])
    show_progress: bool = True


@dataclass
class ConverterConfig:
    """Master converter configuration."""

    config_version: int = 1
    log_level: str = "INFO"
    log_file: str = ""

    output: OutputConfig = field(default_factory=OutputConfig)
    normal: NormalConfig = field(default_factory=NormalConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "ConverterConfig":
        """Load converter configuration from YAML or return defaults."""
        if not os.path.exists(path):
            logger.info("Config file '%s' not found. Using defaults.", path)
            config = cls()
            config.validate()
            return config
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(
                f"Failed to parse YAML config '{path}': {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Config file '{path}' must contain a YAML mapping, "
                f"got {type(data).__name__}"
            )
        yaml_version = data.get("config_version", 1)
        if isinstance(yaml_version, int) and yaml_version > _SUPPORTED_CONFIG_VERSION:
            logger.warning(
                "Config file '%s' has config_version=%d, but this build only "
                "supports up to version %d. Some settings may be ignored.",
                path, yaml_version, _SUPPORTED_CONFIG_VERSION,
            )
        config = cls()
        _merge_dict_to_dataclass(config, data)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
        return config

    def to_yaml(self, path: str):
        """Write converter configuration to a YAML file."""
        import dataclasses
        import threading as _th
        data = dataclasses.asdict(self)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        ext = os.path.splitext(path)[1]
        tmp_path = f"{path}.tmp.{os.getpid()}.{_th.get_ident()}{ext}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def validate(self):
        """Check all settings and raise one ValueError listing every problem."""
        errors = []

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if str(self.log_level).upper() not in valid_levels:
            errors.append(f"log_level must be one of {sorted(valid_levels)}")

        # Output
        fmt = str(self.output.format).lower()
        if fmt not in OUTPUT_FORMATS:
            errors.append(
                f"output.format must be one of {list(OUTPUT_FORMATS)}, "
                f"got '{self.output.format}'"
            )
        if not (1 <= self.output.quality <= 10):
            errors.append("output.quality must be in [1, 10]")

        # Normal / AO
        if not (0.0 <= self.normal.ao_strength <= 1.0):
            errors.append("normal.ao_strength must be in [0, 1]")

        # Detection
        for name in ("suffix_weight", "sibling_weight", "base_weight",
                     "content_confidence", "directory_min_confidence"):
            value = getattr(self.detection, name)
            if not (0.0 <= value <= 1.0):
                errors.append(f"detection.{name} must be in [0, 1]")
        total = (
            self.detection.suffix_weight
            + self.detection.sibling_weight
            + self.detection.base_weight
        )
        if total > 1.0 + 1e-9:
            errors.append(
                "detection weights (suffix + sibling + base) must not exceed 1.0"
            )
        if not (0.0 < self.detection.normal_map_tolerance <= 128.0):
            errors.append("detection.normal_map_tolerance must be in (0, 128]")

        # Batch
        if not self.batch.supported_formats:
            errors.append("batch.supported_formats must not be empty")
        for ext in self.batch.supported_formats:
            if not isinstance(ext, str) or not ext.startswith("."):
                errors.append(
                    f"batch.supported_formats entries must start with '.', got {ext!r}"
                )

        if fmt == "tga":
            logger.warning(
                "output.format is 'tga', which cannot be encoded. "
                "Every conversion will fail at the save step."
            )

        if errors:
            raise ValueError(
                "Configuration validation failed:\n" +
                "\n".join(f"  - {e}" for e in errors)
            )


def _merge_dict_to_dataclass(obj, data: dict, _path: str = ""):
    import dataclasses
    for key, value in data.items():
        if hasattr(obj, key):
            field_val = getattr(obj, key)
            if dataclasses.is_dataclass(field_val) and isinstance(value, dict):
                _merge_dict_to_dataclass(field_val, value, f"{_path}{key}.")
            else:
                full_key = f"{_path}{key}"
                if value is None and field_val is not None:
                    logger.warning(
                        "Config key '%s' is null but field default is %s. "
                        "Using default value.",
                        full_key, type(field_val).__name__,
                    )
                    continue
                expected_type = type(field_val)
                # Allow int->float and exact float->int promotion
                if (field_val is not None
                        and not isinstance(value, expected_type)
                        and not (expected_type is float
                                 and isinstance(value, int))
                        and not (expected_type is int
                                 and isinstance(value, float)
                                 and value == int(value))):
                    logger.warning(
                        "Config type mismatch for '%s': expected %s, got %s (%r). "
                        "Using default value.",
                        full_key, expected_type.__name__, type(value).__name__, value,
                    )
                    continue
                if (expected_type is int and isinstance(value, float)
                        and value == int(value)):
                    value = int(value)
                setattr(obj, key, value)
        else:
            full_key = f"{_path}{key}"
            logger.warning("Unknown config key ignored: '%s'", full_key)
