"""User settings for GuardFX."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from guardfx.utils.io import atomic_write_text

logger = logging.getLogger(__name__)

# Default settings location
DEFAULT_HOME_DIR = Path.home() / ".guardfx"
SETTINGS_FILE_NAME = "settings.json"
HOME_ENV_VAR = "GUARDFX_HOME"

_config: Config | None = None  # pylint: disable=invalid-name


@dataclass
class Config:
    """Application settings.

    Attributes:
        clipboard_clear_seconds: Seconds before a copied code is wiped from
            the clipboard. 0 disables auto-clear.
        log_level: Name of the logging level for the GuardFX loggers.
        mask_secrets: Whether the manage screen hides secrets by default.
    """

    clipboard_clear_seconds: int = 30
    log_level: str = "INFO"
    mask_secrets: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create settings from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def get_home_dir() -> Path:
    """Return the directory holding settings, secrets and logs."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_HOME_DIR


def load_config(path: Path | None = None) -> Config:
    """Load settings from disk.

    Missing or malformed files fall back to defaults.
    """
    path = path or get_home_dir() / SETTINGS_FILE_NAME
    if not path.exists():
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return Config()

    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: not a JSON object", path)
        return Config()
    return Config.from_dict(data)


def save_config(config: Config, path: Path | None = None) -> None:
    """Persist settings to disk."""
    path = path or get_home_dir() / SETTINGS_FILE_NAME
    atomic_write_text(path, json.dumps(config.to_dict(), indent=2))


def get_config() -> Config:
    """Return the process-wide settings, loading them on first use."""
    global _config  # pylint: disable=global-statement

    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached settings so the next get_config() reloads."""
    global _config  # pylint: disable=global-statement

    _config = None
