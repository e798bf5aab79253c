import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

DEFAULT_STATE_DIR = "~/.stock"
CONFIG_FILE_NAME = "config.json"
SETTINGS_FILE_NAME = "settings.json"
SCRATCH_DIR_NAME = "temp"
ARCHIVE_NAME = "stock-master.zip"

DEFAULTS: Dict[str, Any] = {
    "archive_suffix": "/archive/master.zip",
    "request_timeout": 30.0,
    "chunk_size": 8192,
    "log_level": "WARNING",
}

# Environment variable -> settings key
ENV_OVERRIDES = {
    "STOCK_ARCHIVE_SUFFIX": "archive_suffix",
    "STOCK_REQUEST_TIMEOUT": "request_timeout",
    "STOCK_CHUNK_SIZE": "chunk_size",
    "STOCK_LOG_LEVEL": "log_level",
}


def _load_env_file(env_path: str) -> None:
    """
    Simple .env file parser that doesn't require external dependencies.
    Loads key=value pairs from .env file into os.environ.
    """
    if not os.path.isfile(env_path):
        return

    try:
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()

                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    if key:
                        os.environ[key] = value

        logger.debug(".env file loaded from %s", env_path)

    except OSError as e:
        logger.warning("Failed to load .env file: %s", e)


_env_file_paths = [".env", "../.env"]
for env_path in _env_file_paths:
    if os.path.isfile(env_path):
        _load_env_file(env_path)
        break


class Settings:
    """
    Runtime settings for stock.

    Values are resolved from, in increasing priority: built-in defaults,
    `settings.json` inside the state directory, `STOCK_*` environment
    variables, and explicit keyword overrides (the CLI flags).
    """

    def __init__(
        self,
        state_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> None:
        environ = os.environ if environ is None else environ

        raw_dir = state_dir or environ.get("STOCK_HOME") or DEFAULT_STATE_DIR
        self.state_dir: Path = Path(raw_dir).expanduser()

        self.raw: Dict[str, Any] = dict(DEFAULTS)
        self.raw.update(self._load_json(self.settings_file))
        for env_key, setting_key in ENV_OVERRIDES.items():
            if environ.get(env_key):
                self.raw[setting_key] = environ[env_key]
        self.raw.update({k: v for k, v in overrides.items() if v is not None})

        self.archive_suffix: str = self._as_suffix(self.raw["archive_suffix"])
        self.request_timeout: float = self._as_positive(
            "request_timeout", self.raw["request_timeout"], float
        )
        self.chunk_size: int = self._as_positive(
            "chunk_size", self.raw["chunk_size"], int
        )
        self.log_level: str = str(self.raw["log_level"]).upper()

        logger.debug("Settings resolved for state directory '%s'.", self.state_dir)

    @property
    def config_file(self) -> Path:
        return self.state_dir / CONFIG_FILE_NAME

    @property
    def scratch_dir(self) -> Path:
        return self.state_dir / SCRATCH_DIR_NAME

    @property
    def settings_file(self) -> Path:
        return self.state_dir / SETTINGS_FILE_NAME

    def _load_json(self, path: Path) -> Dict[str, Any]:
        """
        Loads optional JSON overrides from the given path.

        :param path: The path to the JSON file.
        :return: The parsed mapping, or an empty dict if missing or invalid.
        """
        if not path.is_file():
            return {}

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Error loading settings file '%s': %s", path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Settings file '%s' is not a JSON object, ignoring.", path)
            return {}

        unknown = set(data) - set(DEFAULTS)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))
        return {k: v for k, v in data.items() if k in DEFAULTS}

    @staticmethod
    def _as_positive(name: str, value: Any, cast):
        try:
            converted = cast(value)
        except (TypeError, ValueError):
            converted = None

        if converted is None or converted <= 0:
            logger.warning(
                "Invalid value %r for %s, using default %r.", value, name, DEFAULTS[name]
            )
            return DEFAULTS[name]
        return converted

    @staticmethod
    def _as_suffix(value: Any) -> str:
        suffix = str(value).strip()
        if not suffix:
            return DEFAULTS["archive_suffix"]
        return suffix if suffix.startswith("/") else f"/{suffix}"
