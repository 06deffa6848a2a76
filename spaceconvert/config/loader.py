"""Configuration loading utilities."""

import json
import os
import stat
from pathlib import Path

from loguru import logger

from spaceconvert.config.schema import Config

SECRET_KEYS = ("accessToken", "password")


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".spaceconvert" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Environment variables prefixed with ``SPACECONVERT_`` fill in values the
    file leaves out, e.g. ``SPACECONVERT_MATRIX__ACCESS_TOKEN``.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            current_mode = stat.S_IMODE(os.stat(path).st_mode)
            if current_mode != 0o600:
                logger.warning(
                    f"Config file has insecure permissions: {oct(current_mode)}. "
                    f"Fixing to 0o600 (owner read/write only)..."
                )
                os.chmod(path, 0o600)
        except OSError as e:
            logger.warning(f"Could not verify config permissions: {e}")

        try:
            with open(path) as f:
                data = json.load(f)
            return Config(**data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}. Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file with secure permissions.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    # Access tokens live in this directory
    os.chmod(path.parent, 0o700)

    data = config.model_dump(by_alias=True)

    # Unset secrets stay out of the file so SPACECONVERT_MATRIX__* env vars can supply them
    matrix = data.get("matrix", {})
    for key in SECRET_KEYS:
        if not matrix.get(key):
            matrix.pop(key, None)

    with open(path, "w") as f:
        json.dump(data, f, indent=2)

    os.chmod(path, 0o600)
    logger.debug(f"Config saved with secure permissions: {path}")
