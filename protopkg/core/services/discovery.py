"""
Schema discovery — find every .proto file below a source root.

Paths are canonicalized (symlinks resolved, made absolute) so later
comparisons and relative-path computations are unambiguous.
"""

from __future__ import annotations

import logging
from pathlib import Path

from protopkg.core.errors import DiscoveryError

logger = logging.getLogger(__name__)


def canonical_root(root: Path) -> Path:
    """Canonicalize a directory that must already exist.

    Raises:
        DiscoveryError: If the path does not exist, is inaccessible,
            or is not a directory.
    """
    try:
        resolved = Path(root).resolve(strict=True)
    except OSError as e:
        raise DiscoveryError(f"Cannot resolve schema root {root}: {e}") from e

    if not resolved.is_dir():
        raise DiscoveryError(f"Schema root is not a directory: {resolved}")
    return resolved


def find_files(root: Path, suffixes: list[str] | tuple[str, ...]) -> list[Path]:
    """Canonical paths of regular files below ``root`` matching any suffix.

    Non-regular files and other suffixes are skipped silently. The
    result is sorted.
    """
    found: set[Path] = set()
    for path in root.rglob("*"):
        if path.suffix not in suffixes:
            continue
        if not path.is_file():
            continue
        found.add(path.resolve())
    return sorted(found)


def discover_schemas(root: Path, suffix: str = ".proto") -> list[Path]:
    """Collect every schema file below ``root``, recursively.

    Args:
        root: Schema source directory.
        suffix: Schema file extension, including the dot.

    Returns:
        Sorted canonical absolute paths.

    Raises:
        DiscoveryError: If the root cannot be canonicalized.
    """
    resolved = canonical_root(root)
    schemas = find_files(resolved, (suffix,))
    logger.info("Discovered %d %s files under %s", len(schemas), suffix, resolved)
    return schemas
