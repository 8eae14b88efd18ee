"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

import asyncio
from collections.abc import Coroutine
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import typer

from ucdstore.bridge.errors import BridgeError, PathSafetyError
from ucdstore.core.config import ConfigError, StoreConfig, load_config_or_default
from ucdstore.lockfile.errors import LockfileError
from ucdstore.store.errors import StoreError
from ucdstore.store.store import UCDStore, create_store_from_config
from ucdstore.utils.formatting import print_error
from ucdstore.utils.glob import GlobError

T = TypeVar("T")

# Errors reported as a one-line message with exit code 1
CLI_ERRORS: tuple[type[Exception], ...] = (
    StoreError,
    BridgeError,
    PathSafetyError,
    LockfileError,
    GlobError,
    ConfigError,
)


class OutputFormat(str, Enum):
    """Output format options for store commands."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> StoreConfig:
    """Load the configuration selected by the global options.

    Args:
        ctx: Typer context carrying ``config_path`` and ``store_path``.

    Returns:
        Loaded (or default) configuration with the store path override applied.
    """
    obj = ctx.obj or {}
    try:
        config = load_config_or_default(obj.get("config_path"))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    store_path: Path | None = obj.get("store_path")
    if store_path is not None:
        config = config.model_copy(update={"base_path": store_path})
    return config


def build_store(
    ctx: typer.Context,
    versions: list[str] | None = None,
    concurrency: int | None = None,
) -> UCDStore:
    """Create an uninitialized store from the CLI configuration.

    Args:
        ctx: Typer context.
        versions: Versions requested on the command line.
        concurrency: Concurrency override.

    Returns:
        UCDStore; call ``init()`` before use.
    """
    config = get_config(ctx)
    overrides: dict[str, object] = {}
    if versions:
        overrides["versions"] = versions
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    try:
        return create_store_from_config(config, **overrides)
    except CLI_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, reporting store-domain errors and exiting with code 1."""
    try:
        return asyncio.run(coro)
    except CLI_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
