"""
Filesystem helpers for the download directory.
"""

import logging
import shutil
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Subdirectory holding the weights of a transformers asset
MODEL_DIRECTORY = "model"


def is_existing_path(path: PathLike) -> bool:
    """Check whether a path exists."""
    return Path(path).exists()


def delete_directory_if_empty(path: PathLike) -> bool:
    """Delete a directory if it holds no entries. Returns True when deleted."""
    directory = Path(path)
    if not directory.is_dir():
        return False
    if any(directory.iterdir()):
        return False
    directory.rmdir()
    return True


def remove_directory(path: PathLike, stop_at: PathLike) -> bool:
    """
    Remove a directory tree, then every parent left empty by the removal.

    Parents are visited from the deepest upward. The walk stops at the first
    non-empty ancestor and never deletes `stop_at` itself.

    Args:
        path: Directory to remove
        stop_at: Upper bound of the cleanup

    Returns:
        False if the path did not exist, True otherwise
    """
    target = Path(path)
    boundary = Path(stop_at).resolve()

    if not target.exists():
        return False

    parent = target.resolve().parent
    shutil.rmtree(target)
    logger.debug(f"Removed {target}")

    while parent != boundary and boundary in parent.parents:
        if not delete_directory_if_empty(parent):
            break
        logger.debug(f"Removed empty directory {parent}")
        parent = parent.parent

    return True


def remove_asset_physically(download_dir: PathLike, name: str) -> bool:
    """Remove a downloaded asset from the download directory."""
    return remove_directory(Path(download_dir) / name, stop_at=download_dir)


def is_single_level(directory: Path) -> bool:
    return (directory / MODEL_DIRECTORY).is_dir() or any(p.is_file() for p in directory.iterdir())


def list_downloaded_names(download_dir: PathLike, known: tuple = ()) -> list[str]:
    """
    List asset names present under the download directory.

    Assets are laid out as `<owner>/<repository>` the way hub identifiers are
    written. Known single-level names are reported as is, and so is any
    top-level directory holding files or a `model` directory.
    """
    root = Path(download_dir)
    if not root.exists():
        return []

    names = []
    for owner in sorted(p for p in root.iterdir() if p.is_dir()):
        if owner.name in known or is_single_level(owner):
            names.append(owner.name)
            continue
        for repository in sorted(p for p in owner.iterdir() if p.is_dir()):
            names.append(f"{owner.name}/{repository.name}")
    return names
