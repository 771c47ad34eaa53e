"""
Small helpers shared by the test modules.
"""
import os
from pathlib import Path


def marker_exists(path: Path, strategy: str) -> bool:
    """Whether the on-disk lock resource for `strategy` is present."""
    if strategy == "directory":
        return path.is_dir()
    return path.is_file()


def remove_marker(path: Path) -> None:
    """Delete a lock resource behind its holder's back."""
    if path.is_dir():
        os.rmdir(path)
    else:
        os.unlink(path)
