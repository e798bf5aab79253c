from .archive_client import ArchiveClient

__all__ = ["ArchiveClient"]
