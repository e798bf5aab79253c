"""
Error taxonomy for mirror synchronization.

Every sync failure is fatal to the current operation and is raised to the
caller as a SyncError subclass. DecodeWarning is the one non-fatal condition:
the content loader records it and moves on.
"""


class SyncError(Exception):
    """Base class for failures while fetching or installing the mirror."""


class NetworkFailure(SyncError):
    """Raised on transport errors, non-2xx responses and timeouts."""


class ArchiveCorrupt(SyncError):
    """Raised when the downloaded archive cannot be decompressed safely."""


class FilesystemFailure(SyncError):
    """Raised when creating, writing or deleting mirror files fails."""


class ConfigMissing(SyncError):
    """Raised when the repository reference is absent or unreadable."""


class DecodeWarning(UserWarning):
    """Recorded when a mirrored file had bytes that were not valid UTF-8."""

    def __init__(self, path, replaced: int):
        super().__init__(f"{path}: {replaced} undecodable byte sequence(s) replaced")
        self.path = path
        self.replaced = replaced
