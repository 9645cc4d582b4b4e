# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Artifact cleanup.

`viperctl clean` removes exactly the files the pipeline generates (the
assembly source, the object file and the linked binary) by name. It never
globs and never recurses, so it can't touch anything the pipeline didn't
write. Missing artifacts are fine; running it twice leaves the same state as
running it once.

Nothing else in viperctl deletes artifacts. The pipeline does not clean
before a run.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from viperctl.logging.logger import get_logger
from viperctl.utils.paths import validate_path_within_project

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanResult:
    """Outcome of a cleanup operation."""

    removed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    freed_bytes: int = 0


def _artifact_path(project_root: Path, name: str) -> Path:
    """
    Join and check an artifact name.

    Only the parent directory is resolved. The artifact itself may be a
    symlink, and resolving it would point the unlink at the link's target.
    """
    candidate = project_root / name
    if candidate.name in ("", ".", ".."):
        raise ValueError(f"Artifact name '{name}' does not name a file")
    validate_path_within_project(candidate.parent, project_root)
    return candidate


def clean_artifacts(project_root: Path, artifact_names: Iterable[str]) -> CleanResult:
    """
    Delete the named artifacts from the project root.

    Every name is validated before anything is deleted, so a config with an
    artifact name like `../important` fails without side effects.

    Args:
        project_root: Directory the artifacts live in.
        artifact_names: File names relative to project_root.

    Returns:
        CleanResult listing what was removed, what wasn't there, and any
        deletion that failed (a directory in the way, a permission problem).

    Raises:
        ValueError: If an artifact name resolves outside the project root.
    """
    targets = [_artifact_path(project_root, name) for name in artifact_names]

    removed: list[str] = []
    missing: list[str] = []
    errors: list[str] = []
    freed_bytes = 0

    for target in targets:
        if not target.exists() and not target.is_symlink():
            missing.append(str(target))
            continue
        if target.is_dir() and not target.is_symlink():
            errors.append(f"Refusing to remove directory {target}")
            continue
        try:
            size = target.lstat().st_size
            target.unlink(missing_ok=True)
        except OSError as err:
            errors.append(f"Failed to remove {target}: {err}")
            continue
        removed.append(str(target))
        freed_bytes += size
        _logger.debug("Removed artifact", extra={"path": str(target)})

    _logger.info(
        "Cleanup complete",
        extra={
            "project_root": str(project_root),
            "removed": len(removed),
            "missing": len(missing),
            "errors": len(errors),
        },
    )

    return CleanResult(
        removed=removed,
        missing=missing,
        errors=errors,
        freed_bytes=freed_bytes,
    )
