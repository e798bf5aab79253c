"""
Path utilities for mirror operations.

This module provides helpers for temporary files, atomic moves and
tree removal used while staging and swapping mirror content.
"""

import os
import shutil
from pathlib import Path
from typing import Union

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

PathLike = Union[str, Path]


class TempFileManager:
    """Manages temporary file creation and cleanup."""

    @staticmethod
    def generate_temp_path(base_path: PathLike, suffix: str = "tmp") -> Path:
        """Generate a process-unique temporary path next to base_path."""
        return Path(f"{base_path}.{suffix}.{os.getpid()}")

    @staticmethod
    def cleanup_temp_file(temp_path: PathLike) -> None:
        """Remove a temporary file if present, logging instead of raising."""
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.debug("Failed to cleanup temp file %s: %s", temp_path, e)

    @staticmethod
    def atomic_move(src_path: PathLike, dest_path: PathLike) -> None:
        """Rename src over dest in one step."""
        try:
            os.replace(src_path, dest_path)
        except OSError as e:
            logger.error("Failed to move %s to %s: %s", src_path, dest_path, e)
            raise

    @staticmethod
    def remove_path(path: PathLike) -> None:
        """Remove a file, symlink or directory tree. Missing paths are ignored."""
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
