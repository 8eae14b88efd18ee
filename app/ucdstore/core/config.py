"""Store configuration and settings.

This module provides the configuration model and I/O functions for a
ucdstore installation: where the local mirror lives, which remote API
feeds it, and how aggressively operations run.

Configuration is stored in ~/.config/ucdstore/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ucdstore.core.paths import get_config_path, get_default_store_path

logger = logging.getLogger(__name__)

# Default public API serving the Unicode Character Database
DEFAULT_API_URL = "https://api.ucdjs.dev"

DEFAULT_CONCURRENCY = 5


class StoreConfig(BaseModel):
    """Configuration for a local UCD store.

    Attributes:
        base_path: Root directory of the local mirror.
        api_url: Base URL of the remote UCD API.
        versions: Versions managed by the store. Empty means every version
            the remote registry lists.
        concurrency: Default number of concurrent file operations (1-64).
        include: Glob patterns selecting files to keep.
        exclude: Glob patterns selecting files to drop.
        disable_default_exclusions: Turn off the built-in archive/PDF exclusions.
        timeout_seconds: HTTP timeout for remote requests.
    """

    model_config = ConfigDict(extra="forbid")

    base_path: Annotated[
        Path,
        Field(description="Root directory of the local mirror"),
    ] = Field(default_factory=get_default_store_path)
    api_url: Annotated[
        str,
        Field(description="Base URL of the remote UCD API"),
    ] = DEFAULT_API_URL
    versions: Annotated[
        list[str],
        Field(description="Versions managed by the store (empty = all)"),
    ] = Field(default_factory=list)
    concurrency: Annotated[
        int,
        Field(ge=1, le=64, description="Concurrent file operations (1-64)"),
    ] = DEFAULT_CONCURRENCY
    include: Annotated[
        list[str],
        Field(description="Glob patterns of files to include"),
    ] = Field(default_factory=list)
    exclude: Annotated[
        list[str],
        Field(description="Glob patterns of files to exclude"),
    ] = Field(default_factory=list)
    disable_default_exclusions: Annotated[
        bool,
        Field(description="Disable built-in exclusions (*.zip, *.pdf, .DS_Store)"),
    ] = False
    timeout_seconds: Annotated[
        float,
        Field(gt=0, le=600, description="HTTP timeout in seconds"),
    ] = 30.0

    @field_validator("api_url")
    @classmethod
    def _validate_api_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"api_url must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    @property
    def filters(self) -> list[str]:
        """Combined filter list with exclusions expressed as `!pattern`."""
        return [*self.include, *(f"!{pattern}" for pattern in self.exclude)]


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content doesn't match the schema."""


def load_config(path: Path | None = None) -> StoreConfig:
    """Load store configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated StoreConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return StoreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> StoreConfig:
    """Load the store configuration, falling back to defaults when absent.

    Parse and validation errors still propagate.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Loaded or default StoreConfig.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return StoreConfig()


def save_config(config: StoreConfig, path: Path | None = None) -> Path:
    """Save store configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The StoreConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: StoreConfig) -> dict[str, object]:
    """Convert StoreConfig to a dictionary for TOML serialization.

    Empty lists and default-valued switches are left out to keep the file clean.

    Args:
        config: The StoreConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "base_path": str(config.base_path),
        "api_url": config.api_url,
        "concurrency": config.concurrency,
    }

    if config.versions:
        result["versions"] = list(config.versions)
    if config.include:
        result["include"] = list(config.include)
    if config.exclude:
        result["exclude"] = list(config.exclude)
    if config.disable_default_exclusions:
        result["disable_default_exclusions"] = True
    if config.timeout_seconds != 30.0:  # Only include if non-default
        result["timeout_seconds"] = config.timeout_seconds

    return result
