# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for viperctl.

All path helpers live here:
  - the project root is the Viper compiler checkout, not this package
  - artifact paths must stay inside the project root
"""

from pathlib import Path
from typing import Optional

PROJECT_MARKERS: tuple[str, ...] = ("viper.yaml", "Cargo.toml")


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """
    Walk up from `start` (default: the working directory) to find the project root.

    The project root is the nearest directory holding a viper.yaml or a
    Cargo.toml. If no ancestor has either, the starting directory itself is
    the root, which matches how the Makefile always ran from wherever it was
    invoked.
    """
    origin = (start or Path.cwd()).resolve()
    current = origin
    while True:
        if any((current / marker).is_file() for marker in PROJECT_MARKERS):
            return current
        if current == current.parent:
            return origin
        current = current.parent


def validate_path_within_project(target: Path, project_root: Path) -> Path:
    """
    Make sure a path doesn't escape the project directory.

    Both paths are resolved before comparing, so `../../etc/passwd` style
    artifact names get caught.

    Returns:
        The resolved absolute path if it's safe.

    Raises:
        ValueError: If the path escapes the project root.
    """
    resolved_target = target.resolve()
    resolved_root = project_root.resolve()

    if resolved_target != resolved_root and resolved_root not in resolved_target.parents:
        raise ValueError(
            f"Path '{target}' resolves to '{resolved_target}' which is outside "
            f"the project root '{resolved_root}'. This is not allowed."
        )

    return resolved_target
