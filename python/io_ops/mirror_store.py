"""
Local mirror lifecycle: layout, staging and archive swap-in.

The state directory holds the unpacked repository entries directly, next to
the config record and a scratch directory that only exists during a sync.
"""

import os
import zipfile
from pathlib import Path
from typing import Iterable, Optional, Set

from colored_logger import get_colored_logger
from settings import ARCHIVE_NAME, CONFIG_FILE_NAME, SCRATCH_DIR_NAME, SETTINGS_FILE_NAME
from sync.errors import ArchiveCorrupt, FilesystemFailure

from .archive_security import (
    ArchiveLimitsExceededError,
    PathSecurityError,
    SecurityValidator,
)
from .path_utils import TempFileManager

logger = get_colored_logger(__name__)

UNPACK_DIR_NAME = "unpacked"


class MirrorStore:
    """
    Owns the on-disk mirror rooted at `root`.

    Archive contents are unpacked into scratch space first and each top-level
    entry is then swapped into the root, replacing the old entry wholesale.
    """

    def __init__(
        self,
        root: Path,
        scratch_name: str = SCRATCH_DIR_NAME,
        archive_name: str = ARCHIVE_NAME,
        reserved_names: Optional[Iterable[str]] = None,
        validator: Optional[SecurityValidator] = None,
    ):
        self.root = Path(root)
        self.scratch_dir = self.root / scratch_name
        self.archive_name = archive_name
        self.reserved_names: Set[str] = {scratch_name, CONFIG_FILE_NAME, SETTINGS_FILE_NAME}
        self.reserved_names.update(reserved_names or ())
        self.validator = validator or SecurityValidator()

    def exists(self) -> bool:
        return self.root.exists()

    def ensure_layout(self) -> None:
        """Create the root and scratch directories if missing."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.scratch_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"Cannot create mirror layout at {self.root}: {e}") from e

    def stage_archive(self, chunks: Iterable[bytes]) -> Path:
        """
        Write a byte stream to the staged archive file.

        The file is flushed and closed before returning. On any failure the
        partial file is removed; OS errors become FilesystemFailure and
        anything else raised by the iterator propagates unchanged.
        """
        staged = self.scratch_dir / self.archive_name
        written = 0
        try:
            with staged.open("wb") as f:
                for chunk in chunks:
                    if not chunk:
                        continue
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            TempFileManager.cleanup_temp_file(staged)
            raise FilesystemFailure(f"Cannot write staged archive {staged}: {e}") from e
        except BaseException:
            TempFileManager.cleanup_temp_file(staged)
            raise

        logger.debug("Staged %d bytes at %s", written, staged)
        return staged

    def replace_with_archive(self, staged_archive: Path) -> None:
        """
        Unpack the staged archive and swap its entries into the mirror root.

        The previous mirror is untouched until the archive has been fully
        validated and extracted. The scratch directory is removed last.
        """
        unpack_dir = self.scratch_dir / UNPACK_DIR_NAME
        self._extract(Path(staged_archive), unpack_dir)

        try:
            entries = sorted(os.listdir(unpack_dir))
        except OSError as e:
            raise FilesystemFailure(f"Cannot read unpacked archive: {e}") from e

        for name in entries:
            if name in self.reserved_names:
                logger.warning("Archive entry '%s' clashes with a reserved name, skipped", name)
                continue
            self._swap_entry(unpack_dir / name, self.root / name)

        try:
            TempFileManager.remove_path(self.scratch_dir)
        except OSError as e:
            raise FilesystemFailure(f"Cannot remove scratch directory {self.scratch_dir}: {e}") from e

        logger.debug("Installed %d entr%s into %s", len(entries), "y" if len(entries) == 1 else "ies", self.root)

    def discard(self) -> None:
        """Remove the whole mirror root."""
        try:
            TempFileManager.remove_path(self.root)
        except OSError as e:
            raise FilesystemFailure(f"Cannot remove mirror at {self.root}: {e}") from e

    def _extract(self, archive_path: Path, unpack_dir: Path) -> None:
        try:
            TempFileManager.remove_path(unpack_dir)
        except OSError as e:
            raise FilesystemFailure(f"Cannot clear {unpack_dir}: {e}") from e

        try:
            with zipfile.ZipFile(archive_path, "r") as zipf:
                self.validator.validate_archive(zipf)
                bad_member = zipf.testzip()
                if bad_member is not None:
                    raise ArchiveCorrupt(f"CRC check failed for member {bad_member!r}")
                zipf.extractall(unpack_dir)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            raise ArchiveCorrupt(f"Cannot read archive {archive_path}: {e}") from e
        except (PathSecurityError, ArchiveLimitsExceededError) as e:
            raise ArchiveCorrupt(f"Archive rejected: {e}") from e
        except NotImplementedError as e:
            # unsupported compression method
            raise ArchiveCorrupt(f"Cannot decompress archive {archive_path}: {e}") from e
        except OSError as e:
            raise FilesystemFailure(f"Cannot extract archive {archive_path}: {e}") from e

    def _swap_entry(self, source: Path, target: Path) -> None:
        try:
            if target.exists() or target.is_symlink():
                # move the old entry aside first so the swap itself is a rename
                retired = TempFileManager.generate_temp_path(target, "old")
                TempFileManager.atomic_move(target, retired)
                TempFileManager.atomic_move(source, target)
                TempFileManager.remove_path(retired)
            else:
                TempFileManager.atomic_move(source, target)
        except OSError as e:
            raise FilesystemFailure(f"Cannot install {target.name} into mirror: {e}") from e
