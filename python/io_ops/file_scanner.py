"""
File discovery for the mirror directory.

Walks a directory tree and yields its regular files in directory-entry
order, skipping any excluded subtrees.
"""

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)


class FileStats:
    """Container for file processing statistics."""

    def __init__(self):
        self.total_files = 0
        self.total_size = 0
        self.skipped_files = 0
        self.error_files = 0

    def add_file(self, file_size: int) -> None:
        """Add a successfully processed file."""
        self.total_files += 1
        self.total_size += file_size

    def skip_file(self) -> None:
        """Record a skipped file."""
        self.skipped_files += 1

    def error_file(self) -> None:
        """Record a file processing error."""
        self.error_files += 1


class FileScanner:
    """Scans a directory for regular files."""

    def __init__(self, exclude: Optional[Iterable[Path]] = None):
        self.exclude = {Path(p).absolute() for p in (exclude or ())}

    def is_excluded(self, path: Path) -> bool:
        return path.absolute() in self.exclude

    def iter_files(self, source_path: Path) -> Iterator[Path]:
        """
        Yield regular files below source_path.

        Order follows os.scandir within each directory, files of a directory
        before its subdirectories. Symlinks are not followed. Directories that
        cannot be listed are logged and skipped.
        """
        stack = [Path(source_path)]
        while stack:
            directory = stack.pop()
            try:
                with os.scandir(directory) as it:
                    entries = list(it)
            except OSError as e:
                logger.warning("Cannot list directory %s: %s", directory, e)
                continue

            subdirs: List[Path] = []
            for entry in entries:
                path = Path(entry.path)
                if self.is_excluded(path):
                    logger.debug("Excluded from scan: %s", path)
                    continue
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(path)
                elif entry.is_file(follow_symlinks=False):
                    yield path

            # reversed so the first listed subdirectory is visited first
            stack.extend(reversed(subdirs))

    def scan_directory(self, source_path: Path) -> List[Path]:
        """Return the regular files below source_path, or [] if it is missing."""
        source_path = Path(source_path)
        if not source_path.is_dir():
            return []
        return list(self.iter_files(source_path))
