"""Drift analysis between the manifest and the local mirror.

Drift is recomputed from the bridge on every call; nothing is cached, since
the mirror may change out-of-band between calls.
"""

import logging
from collections.abc import Iterable

from ucdstore.bridge.base import Capability, assert_capability, flatten_file_paths
from ucdstore.core.paths import SNAPSHOT_FILE_NAME
from ucdstore.store.context import StoreContext
from ucdstore.store.models import VersionAnalysis

logger = logging.getLogger(__name__)


async def analyze(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
) -> list[VersionAnalysis]:
    """Compute drift for each requested version.

    Args:
        ctx: Store context.
        versions: Versions to analyze. None means every managed version.

    Returns:
        One VersionAnalysis per version, in request order.

    Raises:
        BridgeUnsupportedOperation: If the bridge cannot list directories.
        StoreVersionNotFoundError: If a version is not managed.
        StoreUpstreamError: If the manifest source fails.
    """
    assert_capability(ctx.bridge, Capability.LISTDIR, "analyze")
    targets = ctx.resolve_versions(versions)
    return [await analyze_version(ctx, version) for version in targets]


async def analyze_version(ctx: StoreContext, version: str) -> VersionAnalysis:
    """Compute drift for a single version.

    Args:
        ctx: Store context.
        version: Managed version.

    Returns:
        Drift report for the version.
    """
    expected = [f.relative_path(version) for f in await ctx.expected_files(version)]
    actual = await list_version_files(ctx, version)

    actual_set = set(actual)
    expected_set = set(expected)

    files = tuple(path for path in expected if path in actual_set)
    missing = tuple(path for path in expected if path not in actual_set)
    orphaned = tuple(sorted(path for path in actual if path not in expected_set))

    logger.debug(
        "Analyzed %s: %d present, %d missing, %d orphaned",
        version,
        len(files),
        len(missing),
        len(orphaned),
    )
    return VersionAnalysis(
        version=version,
        files=files,
        missing_files=missing,
        orphaned_files=orphaned,
    )


async def list_version_files(ctx: StoreContext, version: str) -> list[str]:
    """List files stored for a version, relative to its directory.

    The version's snapshot file is not part of the mirrored data and is
    left out.

    Args:
        ctx: Store context.
        version: Managed version.

    Returns:
        Relative file paths; empty if the version directory does not exist.
    """
    version_dir = ctx.version_path(version)
    if not await ctx.bridge.exists(version_dir):
        return []
    entries = await ctx.bridge.listdir(version_dir, recursive=True)
    return [path for path in flatten_file_paths(entries) if path != SNAPSHOT_FILE_NAME]
