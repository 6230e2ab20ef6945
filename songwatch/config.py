"""Configuration loading for the library sync watcher.

Configuration is read once at startup into an immutable ``SyncConfig`` which
is passed explicitly to every component that needs it. Two file formats are
accepted:

  - a dotenv file (``SONGWATCH_*`` keys), the default
  - the legacy ``config.json`` with ``BaseURL``, ``WatchDir``, ``WatchTimeSec``
"""

import json
import logging
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from songwatch.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("songwatch.env")

DEFAULT_EXTENSION = "mp3"
DEFAULT_FILE_PATTERNS = ("*.mp3", "*.MP3")
DEFAULT_TRASH_MARKER = ".Trash"

# dotenv key → SyncConfig field
_ENV_KEYS = {
    "SONGWATCH_BASE_URL": "base_url",
    "SONGWATCH_WATCH_DIR": "watch_dir",
    "SONGWATCH_POLL_INTERVAL": "poll_interval",
    "SONGWATCH_EXTENSION": "extension",
    "SONGWATCH_FILE_PATTERNS": "file_patterns",
    "SONGWATCH_TRASH_MARKER": "trash_marker",
    "SONGWATCH_QUEUE_SIZE": "queue_size",
    "SONGWATCH_REQUEST_TIMEOUT": "request_timeout",
}

# legacy config.json key → SyncConfig field
_JSON_KEYS = {
    "BaseURL": "base_url",
    "WatchDir": "watch_dir",
    "WatchTimeSec": "poll_interval",
    "Extension": "extension",
    "FilePatterns": "file_patterns",
    "TrashMarker": "trash_marker",
    "QueueSize": "queue_size",
    "RequestTimeoutSec": "request_timeout",
}


class SyncConfig(BaseModel):
    """Process-wide settings, immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(min_length=1, description="Library sync endpoint")
    watch_dir: Path
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds between polls")
    extension: str = Field(default=DEFAULT_EXTENSION, min_length=1)
    file_patterns: tuple[str, ...] = DEFAULT_FILE_PATTERNS
    trash_marker: str = DEFAULT_TRASH_MARKER
    queue_size: int = Field(default=1, ge=1, description="Pending events kept before dropping")
    request_timeout: float | None = Field(
        default=None, gt=0, description="Seconds per request; None waits indefinitely"
    )

    @field_validator("watch_dir")
    @classmethod
    def _absolute_watch_dir(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".")

    @field_validator("file_patterns", mode="before")
    @classmethod
    def _split_patterns(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return value

    @field_validator("request_timeout", mode="before")
    @classmethod
    def _blank_timeout(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_config(path: str | Path) -> SyncConfig:
    """Load and validate a configuration file.

    Args:
        path: A dotenv file, or a ``.json`` file in the legacy format.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Configuration file not found: {config_path}")

    if config_path.suffix.lower() == ".json":
        raw = _read_json(config_path)
    else:
        raw = _read_dotenv(config_path)

    try:
        config = SyncConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc

    logger.debug(
        "Loaded config from %s: watch_dir=%s poll_interval=%ss",
        config_path,
        config.watch_dir,
        config.poll_interval,
    )
    return config


def _read_dotenv(path: Path) -> dict:
    values = dotenv_values(path)
    return {
        field: values[key]
        for key, field in _ENV_KEYS.items()
        if values.get(key) is not None
    }


def _read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Unable to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root in {path} must be an object")
    return {field: data[key] for key, field in _JSON_KEYS.items() if key in data}
