from .errors import (
    SyncError,
    NetworkFailure,
    ArchiveCorrupt,
    FilesystemFailure,
    ConfigMissing,
    DecodeWarning,
)
from .reference import RepositoryReference, ReferenceStore
from .controller import SyncController

__all__ = [
    "SyncController",
    "RepositoryReference",
    "ReferenceStore",
    # Errors
    "SyncError",
    "NetworkFailure",
    "ArchiveCorrupt",
    "FilesystemFailure",
    "ConfigMissing",
    "DecodeWarning",
]
