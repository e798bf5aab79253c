import requests
from typing import Dict, Optional

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)


class ArchiveClient:
    """HTTP access to a repository's default-branch archive."""

    USER_AGENT = "stock/1.0 (+notes mirror)"

    def __init__(self, archive_suffix: str, timeout: float):
        self.archive_suffix = archive_suffix
        self.timeout = timeout

    def archive_url(self, repo_url: str) -> str:
        return f"{repo_url.rstrip('/')}{self.archive_suffix}"

    def build_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"User-Agent": self.USER_AGENT}
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def open_archive(self, repo_url: str, token: Optional[str] = None) -> requests.Response:
        """
        Issue a streaming GET for the archive and return the open response.

        The caller owns the response and must close it. Non-2xx statuses raise
        requests.HTTPError after the response has been closed.
        """
        url = self.archive_url(repo_url)
        logger.debug(
            "Requesting %s (%s)", url, "authenticated" if token else "anonymous"
        )
        response = requests.get(
            url,
            headers=self.build_headers(token),
            stream=True,
            timeout=self.timeout,
        )
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            response.close()
            raise
        return response
