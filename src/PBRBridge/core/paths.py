"""Filename conventions for texture sets and derived outputs."""

import os
from pathlib import Path
from typing import Optional, Tuple

from ..config import (
    AO_BAKED_SUFFIX,
    BEDROCK_NORMAL_SUFFIX,
    HEIGHTMAP_SUFFIX,
    MER_SUFFIX,
    MERS_SUFFIX,
    NORMAL_SUFFIX,
    SPECULAR_SUFFIX,
)
from .errors import OutputConflictError

# Longest first so "_mers" is not mistaken for "_s".
_SET_SUFFIXES = (
    HEIGHTMAP_SUFFIX,
    BEDROCK_NORMAL_SUFFIX,
    AO_BAKED_SUFFIX,
    MERS_SUFFIX,
    MER_SUFFIX,
    SPECULAR_SUFFIX,
    NORMAL_SUFFIX,
)

# Suffixes naming the source textures of a set, as opposed to derived outputs.
_SOURCE_SUFFIXES = (MERS_SUFFIX, MER_SUFFIX, SPECULAR_SUFFIX, NORMAL_SUFFIX)

# Name decorations stripped from a source stem when naming outputs.
_COLOR_DECORATIONS = ("_diffuse", "_color")


def split_set_suffix(stem: str) -> Tuple[str, str]:
    """Split a file stem into ``(base_name, suffix)`` for known set suffixes.

    Returns an empty suffix when the stem carries none of them.
    """
    for suffix in _SET_SUFFIXES:
        if stem.endswith(suffix) and len(stem) > len(suffix):
            return stem[: -len(suffix)], suffix
    return stem, ""


def split_source_suffix(stem: str) -> Tuple[str, str]:
    """Like `split_set_suffix`, but only strips ``_mer``, ``_mers``, ``_s`` and ``_n``.

    Stems ending in a derived-output suffix are returned whole.
    """
    base, suffix = split_set_suffix(stem)
    if suffix not in _SOURCE_SUFFIXES:
        return stem, ""
    return base, suffix


def find_set_sibling(path: str, suffix: str = "") -> Optional[str]:
    """Return ``<dir>/<base><suffix><ext>`` for the set of ``path`` if it exists."""
    p = Path(path)
    base, _ = split_source_suffix(p.stem)
    candidate = p.parent / f"{base}{suffix}{p.suffix}"
    return str(candidate) if candidate.is_file() else None


def check_output_path(output_path: str, *source_paths: Optional[str]) -> None:
    """Raise `OutputConflictError` if ``output_path`` names one of the sources."""
    target = os.path.realpath(output_path)
    for source in source_paths:
        if source and os.path.realpath(source) == target:
            raise OutputConflictError(
                f"Output {output_path} would overwrite source texture {source}"
            )


def texture_set_key(path: str) -> str:
    """Return ``<dir>/<base_name>`` identifying the texture set of ``path``."""
    p = Path(path)
    base, _ = split_set_suffix(p.stem)
    return os.path.join(str(p.parent), base)


def output_extension(source_path: str, fmt: Optional[str] = None) -> str:
    """Return the extension for an output file, preferring an explicit format."""
    if fmt:
        return "." + fmt.lower().lstrip(".")
    return Path(source_path).suffix or ".png"


def get_output_path(source_path: str, suffix: str, output_dir: Optional[str] = None,
                    fmt: Optional[str] = None) -> str:
    """Return ``<output_dir>/<stem><suffix><ext>`` for a derived texture.

    ``output_dir`` defaults to the directory of ``source_path``.
    """
    p = Path(source_path)
    directory = output_dir or str(p.parent)
    return os.path.join(directory, p.stem + suffix + output_extension(source_path, fmt))


def _strip_decorations(stem: str) -> str:
    base, suffix = split_set_suffix(stem)
    if suffix not in (MER_SUFFIX, MERS_SUFFIX):
        base = stem
    for decoration in _COLOR_DECORATIONS:
        if base.endswith(decoration) and len(base) > len(decoration):
            base = base[: -len(decoration)]
    return base


def get_specular_texture_path(source_path: str, output_dir: Optional[str] = None,
                              fmt: Optional[str] = None) -> str:
    """Return the LabPBR ``_s`` path for a MER or color texture."""
    p = Path(source_path)
    directory = output_dir or str(p.parent)
    base = _strip_decorations(p.stem)
    return os.path.join(
        directory, base + SPECULAR_SUFFIX + output_extension(source_path, fmt or "png")
    )


def is_mer_texture(path: str) -> bool:
    """Return True when the file stem marks a packed MER/MERS texture."""
    _, suffix = split_set_suffix(Path(path).stem.lower())
    return suffix in (MER_SUFFIX, MERS_SUFFIX)


def find_color_texture(mer_path: str) -> Optional[str]:
    """Locate the base color texture next to a MER texture.

    Tries ``<base><ext>``, ``<base>_color<ext>`` and ``<base>_diffuse<ext>``,
    then the same names with ``.png``.
    """
    p = Path(mer_path)
    base = split_set_suffix(p.stem)[0] if is_mer_texture(mer_path) else p.stem
    extensions = [p.suffix] if p.suffix.lower() == ".png" else [p.suffix, ".png"]
    for ext in extensions:
        for name in (base, base + "_color", base + "_diffuse"):
            candidate = p.parent / f"{name}{ext}"
            if candidate.is_file() and candidate != p:
                return str(candidate)
    return None


def find_labpbr_base_texture(specular_path: str) -> Optional[str]:
    """Locate the unsuffixed base color texture next to a LabPBR ``_s`` texture."""
    p = Path(specular_path)
    base, suffix = split_set_suffix(p.stem)
    if suffix != SPECULAR_SUFFIX:
        return None
    candidate = p.parent / f"{base}{p.suffix}"
    if candidate.is_file():
        return str(candidate)
    return None

