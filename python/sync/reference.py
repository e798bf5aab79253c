"""Persistence of the repository reference (remote URL and optional token)."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from colored_logger import get_colored_logger
from io_ops.path_utils import TempFileManager

from .errors import ConfigMissing, FilesystemFailure

logger = get_colored_logger(__name__)


@dataclass(frozen=True)
class RepositoryReference:
    """Identifies the remote repository and the credential used to fetch it."""

    url: str
    token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"repoUrl": self.url, "token": self.token}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryReference":
        url = data.get("repoUrl")
        if not isinstance(url, str) or not url.strip():
            raise ValueError("repoUrl is missing or empty")
        token = data.get("token") or None
        if token is not None and not isinstance(token, str):
            raise ValueError("token must be a string or null")
        return cls(url=url.strip(), token=token)


class ReferenceStore:
    """Reads and writes the single RepositoryReference record as JSON."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, ref: RepositoryReference) -> None:
        """Write the record atomically, replacing any previous one."""
        temp_path = TempFileManager.generate_temp_path(self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as f:
                json.dump(ref.to_dict(), f, indent=2)
            if os.name == "posix":
                # the record may hold an access token
                os.chmod(temp_path, 0o600)
            TempFileManager.atomic_move(temp_path, self.path)
        except OSError as e:
            TempFileManager.cleanup_temp_file(temp_path)
            raise FilesystemFailure(f"Cannot write config {self.path}: {e}") from e

        logger.debug("Repository reference saved to %s", self.path)

    def load(self) -> RepositoryReference:
        if not self.path.is_file():
            raise ConfigMissing(f"Config file not found at {self.path}")

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigMissing(f"Config file {self.path} is unreadable: {e}") from e

        if not isinstance(data, dict):
            raise ConfigMissing(f"Config file {self.path} is not a JSON object")

        try:
            return RepositoryReference.from_dict(data)
        except ValueError as e:
            raise ConfigMissing(f"Config file {self.path} is invalid: {e}") from e
