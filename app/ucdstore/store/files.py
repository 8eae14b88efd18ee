"""Read access to the files of a mirrored version."""

import logging
from collections.abc import Iterable

from ucdstore.bridge.base import (
    Capability,
    FileEntry,
    FSEntry,
    assert_capability,
    flatten_file_paths,
)
from ucdstore.bridge.errors import BridgeFileNotFoundError
from ucdstore.bridge.resolver import resolve_safe_path
from ucdstore.core.paths import SNAPSHOT_FILE_NAME
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import StoreFileNotFoundError, StoreFilterError

logger = logging.getLogger(__name__)


async def get_file_tree(
    ctx: StoreContext,
    version: str,
    filters: Iterable[str] | None = None,
) -> list[FSEntry]:
    """List a version's files as a tree.

    Args:
        ctx: Store context.
        version: Managed version.
        filters: Additional include/exclude patterns for this call.

    Returns:
        Filtered listing with paths relative to the version directory.
        Empty if nothing has been mirrored yet.

    Raises:
        BridgeUnsupportedOperation: If the bridge cannot list directories.
        StoreVersionNotFoundError: If the version is not managed.
        InvalidGlobPatternError: If a filter is invalid.
    """
    assert_capability(ctx.bridge, Capability.LISTDIR, "get_file_tree")
    ctx.resolve_versions([version])

    version_dir = ctx.version_path(version)
    if not await ctx.bridge.exists(version_dir):
        return []

    entries = await ctx.bridge.listdir(version_dir, recursive=True)
    entries = [
        entry
        for entry in entries
        if not (isinstance(entry, FileEntry) and entry.path == SNAPSHOT_FILE_NAME)
    ]
    return ctx.path_filter.filter_tree(entries, filters)


async def get_file_paths(
    ctx: StoreContext,
    version: str,
    filters: Iterable[str] | None = None,
) -> list[str]:
    """List a version's file paths, flattened from ``get_file_tree``."""
    return flatten_file_paths(await get_file_tree(ctx, version, filters))


async def get_file(
    ctx: StoreContext,
    version: str,
    path: str,
    filters: Iterable[str] | None = None,
) -> str:
    """Read one file of a version.

    Args:
        ctx: Store context.
        version: Managed version.
        path: Path relative to the version directory.
        filters: Additional include/exclude patterns for this call.

    Returns:
        File content.

    Raises:
        StoreVersionNotFoundError: If the version is not managed.
        StoreFilterError: If the store filters exclude the path.
        StoreFileNotFoundError: If the file is not in the store.
        PathSafetyError: If the path is unsafe.
    """
    ctx.resolve_versions([version])
    relative = resolve_safe_path("/", path).lstrip("/")

    if not ctx.path_filter(relative, filters):
        raise StoreFilterError(path)

    logger.debug("Reading %s/%s", version, relative)
    try:
        return await ctx.bridge.read(ctx.version_path(version, relative))
    except BridgeFileNotFoundError as e:
        raise StoreFileNotFoundError(version, path) from e
