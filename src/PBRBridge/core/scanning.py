"""Directory scanning and texture-set grouping."""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .paths import texture_set_key

logger = logging.getLogger("pbr_bridge")

DEFAULT_SUPPORTED_FORMATS = (".png", ".jpg", ".jpeg", ".tga")


def find_texture_files(directory: str, recursive: bool = False,
                       supported_formats: Optional[Iterable[str]] = None) -> List[str]:
    """List texture files under ``directory`` in a stable, sorted order.

    Files reached through symlinks that resolve outside ``directory`` are
    skipped.
    """
    supported = {
        ext.lower() for ext in (supported_formats or DEFAULT_SUPPORTED_FORMATS)
    }
    root_real = os.path.realpath(directory)
    found = []

    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for fname in sorted(files):
            if Path(fname).suffix.lower() not in supported:
                continue
            fpath = os.path.join(root, fname)
            real_fpath = os.path.realpath(fpath)
            try:
                if os.path.commonpath([root_real, real_fpath]) != root_real:
                    logger.warning("Skipping file outside input root: %s", fpath)
                    continue
            except ValueError:
                logger.warning("Skipping file with incompatible path root: %s", fpath)
                continue
            found.append(fpath)
        if not recursive:
            break

    logger.debug("Found %d texture files in %s (recursive=%s)",
                 len(found), directory, recursive)
    return found


def group_texture_sets(paths: Iterable[str]) -> Dict[str, List[str]]:
    """Group files by ``<dir>/<base_name>``, keeping first-seen order."""
    groups: Dict[str, List[str]] = {}
    for path in paths:
        groups.setdefault(texture_set_key(path), []).append(path)
    return groups
