"""File-level comparison of two managed versions.

Each side of a comparison is read either from the local mirror or from the
remote manifest and content source, depending on the ``CompareMode``.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ucdstore.bridge.base import Capability, has_capability
from ucdstore.core.config import DEFAULT_CONCURRENCY
from ucdstore.lockfile.hashing import compute_content_hash
from ucdstore.store import files as file_ops
from ucdstore.store.context import StoreContext, validate_concurrency
from ucdstore.store.models import ExpectedFile, VersionComparison
from ucdstore.utils.concurrency import run_limited

logger = logging.getLogger(__name__)


class CompareMode(str, Enum):
    """Where the files of a version are read from."""

    PREFER_LOCAL = "prefer-local"
    LOCAL = "local"
    API = "api"


@dataclass(slots=True)
class _Side:
    version: str
    paths: list[str]
    # None when the side is read from the local mirror.
    remote: dict[str, ExpectedFile] | None = None


async def compare(
    ctx: StoreContext,
    from_version: str,
    to_version: str,
    *,
    mode: CompareMode | tuple[CompareMode, CompareMode] = CompareMode.PREFER_LOCAL,
    filters: Iterable[str] | None = None,
    include_file_hashes: bool = True,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> VersionComparison:
    """Compare the files of two versions.

    Files are matched by their path relative to the version directory. The
    snapshot file is never part of a comparison.

    Args:
        ctx: Store context.
        from_version: Managed version to compare from.
        to_version: Managed version to compare to.
        mode: Source for both sides, or a ``(from, to)`` pair.
        filters: Additional include/exclude patterns for this call.
        include_file_hashes: Read common files and compare their content
            hashes. Without it every common file counts as unchanged.
        concurrency: Maximum number of files read at once.

    Returns:
        Added, removed, modified and unchanged files, each sorted.

    Raises:
        StoreConfigurationError: If concurrency is less than 1.
        StoreVersionNotFoundError: If either version is not managed.
        BridgeUnsupportedOperation: If a local side cannot be listed.
        StoreUpstreamError: If a remote side's manifest cannot be fetched.
    """
    validate_concurrency(concurrency)
    ctx.resolve_versions([from_version, to_version])
    from_mode, to_mode = mode if isinstance(mode, tuple) else (mode, mode)

    source = await _open_side(ctx, from_version, from_mode, filters)
    target = await _open_side(ctx, to_version, to_mode, filters)

    source_paths = set(source.paths)
    target_paths = set(target.paths)
    common = sorted(source_paths & target_paths)

    modified: list[str] = []
    unchanged: list[str] = []
    if include_file_hashes:

        async def _differs(path: str) -> bool:
            before = await _read(ctx, source, path)
            after = await _read(ctx, target, path)
            return compute_content_hash(before) != compute_content_hash(after)

        flags = await run_limited(common, _differs, concurrency)
        for path, differs in zip(common, flags, strict=True):
            (modified if differs else unchanged).append(path)
    else:
        unchanged = common

    comparison = VersionComparison(
        from_version=from_version,
        to_version=to_version,
        added=tuple(sorted(target_paths - source_paths)),
        removed=tuple(sorted(source_paths - target_paths)),
        modified=tuple(modified),
        unchanged=tuple(unchanged),
        from_total=len(source_paths),
        to_total=len(target_paths),
    )
    logger.info(
        "Compare %s -> %s: %d added, %d removed, %d modified",
        from_version,
        to_version,
        len(comparison.added),
        len(comparison.removed),
        len(comparison.modified),
    )
    return comparison


async def _open_side(
    ctx: StoreContext,
    version: str,
    mode: CompareMode,
    filters: Iterable[str] | None,
) -> _Side:
    """List the files of one side from the source its mode selects."""
    if mode is CompareMode.LOCAL or (
        mode is CompareMode.PREFER_LOCAL and await _is_mirrored(ctx, version)
    ):
        logger.debug("Comparing %s from the local mirror", version)
        return _Side(version, await file_ops.get_file_paths(ctx, version, filters))

    logger.debug("Comparing %s from the remote manifest", version)
    expected = await ctx.expected_files(version, filters)
    remote = {f.relative_path(version): f for f in expected}
    return _Side(version, list(remote), remote)


async def _is_mirrored(ctx: StoreContext, version: str) -> bool:
    if not has_capability(ctx.bridge, Capability.LISTDIR):
        return False
    return await ctx.bridge.exists(ctx.version_path(version))


async def _read(ctx: StoreContext, side: _Side, path: str) -> str | bytes:
    if side.remote is None:
        return await file_ops.get_file(ctx, side.version, path)
    fetched = await ctx.content_source.fetch_file_content(side.version, side.remote[path].path)
    return fetched.content
