"""
Security validation for downloaded archives.

Member names are checked before anything is extracted so a hostile archive
cannot write outside the unpack directory, and declared sizes are checked
against limits so a decompression bomb is rejected up front.
"""

import zipfile
from pathlib import PurePosixPath, PureWindowsPath
from typing import List

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

MAX_UNPACKED_SIZE = 2 * 1024 * 1024 * 1024  # 2GB uncompressed
MAX_MEMBERS_PER_ARCHIVE = 100000


class ArchiveLimitsExceededError(Exception):
    """Raised when archive size or member count limits are exceeded."""

    pass


class PathSecurityError(Exception):
    """Raised when an archive member would escape the extraction directory."""

    pass


class SecurityValidator:
    """Validates zip members before extraction."""

    def __init__(
        self,
        max_unpacked_size: int = MAX_UNPACKED_SIZE,
        max_members: int = MAX_MEMBERS_PER_ARCHIVE,
    ):
        self.max_unpacked_size = max_unpacked_size
        self.max_members = max_members

    def is_safe_member_name(self, name: str) -> bool:
        """True if the member name is a relative path with no parent references."""
        if not name or "\x00" in name:
            return False

        normalized = name.replace("\\", "/")
        if normalized.startswith("/"):
            return False

        if PureWindowsPath(name).drive:
            return False

        return ".." not in PurePosixPath(normalized).parts

    def check_archive_limits(self, total_size: int, total_members: int) -> None:
        """Raise ArchiveLimitsExceededError when the archive is too large."""
        if total_members > self.max_members:
            raise ArchiveLimitsExceededError(
                f"archive has {total_members} members (limit {self.max_members})"
            )
        if total_size > self.max_unpacked_size:
            raise ArchiveLimitsExceededError(
                f"archive unpacks to {total_size} bytes (limit {self.max_unpacked_size})"
            )

    def validate_archive(self, zipf: zipfile.ZipFile) -> List[zipfile.ZipInfo]:
        """
        Validate every member of an open archive.

        Returns:
            The archive members, in archive order.

        Raises:
            PathSecurityError: A member name is absolute or climbs out with "..".
            ArchiveLimitsExceededError: Declared sizes or counts exceed limits.
        """
        members = zipf.infolist()
        for info in members:
            if not self.is_safe_member_name(info.filename):
                logger.warning("Unsafe archive member blocked: %s", info.filename)
                raise PathSecurityError(f"unsafe member name: {info.filename!r}")

        self.check_archive_limits(sum(i.file_size for i in members), len(members))
        return members
