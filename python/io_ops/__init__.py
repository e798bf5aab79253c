from .path_utils import TempFileManager
from .archive_security import (
    SecurityValidator,
    ArchiveLimitsExceededError,
    PathSecurityError,
)
from .file_scanner import FileScanner, FileStats

# Mirror lifecycle built on the components above
from .mirror_store import MirrorStore

__all__ = [
    "MirrorStore",
    # Security components
    "SecurityValidator",
    "ArchiveLimitsExceededError",
    "PathSecurityError",
    # File scanning components
    "FileScanner",
    "FileStats",
    # Path utilities
    "TempFileManager",
]
