"""Locate independently installed sub-projects under the project root."""

import logging
from pathlib import Path

from hooksmith.updater.classifier import MANIFEST_NAME

logger = logging.getLogger(__name__)

SUBPROJECT_GLOB = f"plugins/*/{MANIFEST_NAME}"


def discover_subprojects(root: Path, pattern: str = SUBPROJECT_GLOB) -> list[Path]:
    """Find every directory under ``root`` holding a manifest matching ``pattern``.

    Args:
        root: Project root the pattern is relative to.
        pattern: Glob of the form ``<subdir>/*/<manifest>``, either relative
            to ``root`` or absolute and inside it.

    Returns:
        Sorted, deduplicated absolute directory paths. Empty if nothing
        matched or the glob failed.
    """
    root = Path(root)
    try:
        if Path(pattern).is_absolute():
            pattern = Path(pattern).resolve().relative_to(root.resolve()).as_posix()
        matches = list(root.glob(pattern))
    except (OSError, ValueError, NotImplementedError) as e:
        logger.error("GlobError: could not expand %r under %s: %s", pattern, root, e)
        return []

    directories = {match.parent.resolve() for match in matches if match.is_file()}
    return sorted(directories)
