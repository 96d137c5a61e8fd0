"""
Project root discovery and project-scoped paths.

Only the CLI layer discovers the project root; everything below it
receives the root explicitly.
"""

from pathlib import Path
from typing import Optional, Union

from knowns.constants import (
    CONFIG_FILE,
    IMPORTS_DIR,
    KNOWNS_DIR,
    LINKED_METADATA_SUFFIX,
    MAX_PROJECT_ROOT_DEPTH,
    METADATA_FILE,
)

PathLike = Union[str, Path]


def find_project_root(start_path: Optional[PathLike] = None) -> Optional[Path]:
    """
    Walk up from start_path looking for a .knowns/ directory.

    Returns:
        The directory containing .knowns/, or None if not found
    """
    current = Path(start_path or Path.cwd()).resolve()

    for _ in range(MAX_PROJECT_ROOT_DEPTH):
        if (current / KNOWNS_DIR).is_dir():
            return current
        if current.parent == current:
            return None
        current = current.parent

    return None


def get_knowns_dir(project_root: PathLike) -> Path:
    return Path(project_root) / KNOWNS_DIR


def get_config_path(project_root: PathLike) -> Path:
    return get_knowns_dir(project_root) / CONFIG_FILE


def get_imports_dir(project_root: PathLike) -> Path:
    return get_knowns_dir(project_root) / IMPORTS_DIR


def get_import_dir(project_root: PathLike, name: str) -> Path:
    return get_imports_dir(project_root) / name


def get_metadata_path(project_root: PathLike, name: str) -> Path:
    """Metadata for copy-mode imports lives inside the import folder."""
    return get_import_dir(project_root, name) / METADATA_FILE


def get_linked_metadata_path(project_root: PathLike, name: str) -> Path:
    """Metadata for linked imports sits beside the symlink, never behind it."""
    return get_imports_dir(project_root) / f"{name}{LINKED_METADATA_SUFFIX}"
