"""Core utilities -- re-exports all public symbols for convenience."""

from .errors import (
    ConversionError,
    TextureNotFoundError,
    InvalidBufferError,
    InvalidDimensionsError,
    MissingChannelError,
    UnsupportedFormatError,
    EncodeError,
    AmbiguousFormatError,
    OutputConflictError,
)
from .records import TextureData, ChannelPlanes, DetectionResult, ConversionResult
from .channels import (
    extract_channels,
    combine_channels,
    make_planes,
    extract_mer_channels,
    extract_specular_channels,
    extract_normal_channels,
)
from .io import load_texture, save_texture, resolve_format
from .paths import (
    split_set_suffix,
    split_source_suffix,
    find_set_sibling,
    check_output_path,
    texture_set_key,
    get_output_path,
    get_specular_texture_path,
    is_mer_texture,
    find_color_texture,
    find_labpbr_base_texture,
)
from .classify import (
    detect_format,
    detect_format_with_content,
    detect_format_in_directory,
    analyze_texture_content,
    determine_conversion_direction,
)
from .scanning import find_texture_files, group_texture_sets
from .logging import setup_logging

__all__ = [
    "ConversionError", "TextureNotFoundError", "InvalidBufferError",
    "InvalidDimensionsError", "MissingChannelError", "UnsupportedFormatError",
    "EncodeError", "AmbiguousFormatError", "OutputConflictError",
    "TextureData", "ChannelPlanes", "DetectionResult", "ConversionResult",
    "extract_channels", "combine_channels", "make_planes",
    "extract_mer_channels", "extract_specular_channels", "extract_normal_channels",
    "load_texture", "save_texture", "resolve_format",
    "split_set_suffix", "split_source_suffix", "find_set_sibling",
    "check_output_path", "texture_set_key", "get_output_path",
    "get_specular_texture_path", "is_mer_texture", "find_color_texture",
    "find_labpbr_base_texture",
    "detect_format", "detect_format_with_content", "detect_format_in_directory",
    "analyze_texture_content", "determine_conversion_direction",
    "find_texture_files", "group_texture_sets",
    "setup_logging",
]
