"""Loading and saving the configuration file."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import tomli_w

from .errors import ConfigError, ConfigNotFoundError, PorterIOError, TomlSerializeError
from .models import ConfigFile

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".oss-porter.toml"


def get_default_config_path() -> Path:
    """Return the configuration file path in the user's home directory."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise ConfigError("Could not determine user's home directory.") from exc
    return home / CONFIG_FILE_NAME


def _resolve(path_override: Path | str | None) -> Path:
    return Path(path_override) if path_override is not None else get_default_config_path()


def load_config(path_override: Path | str | None = None) -> ConfigFile:
    """Read and parse the configuration file."""
    config_path = _resolve(path_override)
    log.debug("Attempting to load configuration from: %s", config_path)

    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(config_path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise PorterIOError(exc, config_path) from exc

    try:
        return ConfigFile.from_dict(tomllib.loads(content))
    except (tomllib.TOMLDecodeError, ValueError) as exc:
        raise ConfigError(
            f"Failed to parse config file '{config_path}': {exc}"
        ) from exc


def save_config(config: ConfigFile, path_override: Path | str | None = None) -> None:
    """Write the configuration file, creating its directory if needed."""
    config_path = _resolve(path_override)
    log.debug("Attempting to save configuration to: %s", config_path)

    parent = config_path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PorterIOError(exc, parent) from exc

    try:
        text = tomli_w.dumps(config.to_dict())
    except (TypeError, ValueError) as exc:
        raise TomlSerializeError(str(exc)) from exc

    try:
        config_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise PorterIOError(exc, config_path) from exc

    log.info("Successfully saved configuration to %s", config_path)