"""
Fetch-and-install orchestration for the local mirror.

A sync is strictly sequential: the archive is streamed to the staging file,
the file is closed, and only then is it unpacked into the mirror.
"""

from typing import Iterable, Iterator

import requests

from api.archive_client import ArchiveClient
from colored_logger import get_colored_logger

from .errors import NetworkFailure
from .reference import ReferenceStore, RepositoryReference

logger = get_colored_logger(__name__)


class SyncController:
    def __init__(self, store, references: ReferenceStore, client: ArchiveClient, chunk_size: int = 8192):
        """
        :param store: The MirrorStore that receives the archive.
        :param references: Where the RepositoryReference is persisted.
        :param client: HTTP client for the archive endpoint.
        :param chunk_size: Bytes read from the response per write.
        """
        self.store = store
        self.references = references
        self.client = client
        self.chunk_size = chunk_size

    def fetch_and_install(self, ref: RepositoryReference) -> None:
        """
        Download the repository archive and install it into the mirror.

        Raises NetworkFailure, ArchiveCorrupt or FilesystemFailure. Nothing is
        retried.
        """
        self.store.ensure_layout()

        url = self.client.archive_url(ref.url)
        logger.progress("Downloading %s", url)
        try:
            with self.client.open_archive(ref.url, ref.token) as response:
                staged = self.store.stage_archive(
                    self._stream(response.iter_content(chunk_size=self.chunk_size), url)
                )
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"Failed to download {url}: {e}") from e

        logger.progress("Unpacking %s", staged.name)
        self.store.replace_with_archive(staged)
        logger.success("Mirror updated from %s", ref.url)

    @staticmethod
    def _stream(chunks: Iterable[bytes], url: str) -> Iterator[bytes]:
        # requests exceptions are OSErrors; they must not reach the store as such
        try:
            yield from chunks
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"Download of {url} interrupted: {e}") from e

    def persist_reference(self, ref: RepositoryReference) -> None:
        self.references.save(ref)

    def load_reference(self) -> RepositoryReference:
        return self.references.load()
