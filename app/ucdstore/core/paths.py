"""XDG-compliant path management for ucdstore.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and store data.

XDG defaults:
- Config: ~/.config/ucdstore/
- Data: ~/.local/share/ucdstore/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "ucdstore"

# File name of the store manifest inside a store root
STORE_MANIFEST_NAME = ".ucd-store.json"

# File name of the per-version snapshot
SNAPSHOT_FILE_NAME = "snapshot.json"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/ucdstore/ (or XDG_CONFIG_HOME/ucdstore/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Get the data directory path.

    The data directory is the default root of the local mirror when no
    explicit base path is configured.

    Returns:
        Path to ~/.local/share/ucdstore/ (or XDG_DATA_HOME/ucdstore/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/ucdstore/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_store_path() -> Path:
    """Get the default local store root.

    Returns:
        Path to ~/.local/share/ucdstore/store.
    """
    return get_data_dir() / "store"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_data_dir() -> Path:
    """Create the data directory if it doesn't exist.

    Returns:
        Path to the data directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_data_dir(), "data")
