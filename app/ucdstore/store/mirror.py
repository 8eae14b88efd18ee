"""Mirror expected files from the content source into the store."""

import logging
from collections.abc import Collection, Iterable, Mapping

from ucdstore.bridge.base import Capability, assert_capability
from ucdstore.bridge.errors import BridgeError
from ucdstore.core.config import DEFAULT_CONCURRENCY
from ucdstore.lockfile.hashing import compute_file_hash, content_size
from ucdstore.lockfile.models import Snapshot, SnapshotFile
from ucdstore.lockfile.snapshot import read_snapshot_or_default, snapshot_entry, write_snapshot
from ucdstore.store.context import StoreContext, validate_concurrency
from ucdstore.store.models import ExpectedFile, FailedFile, FileOperation, MirrorResult
from ucdstore.utils.concurrency import run_limited

logger = logging.getLogger(__name__)


async def mirror(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
    force: bool = False,
    files: Mapping[str, Collection[str]] | None = None,
) -> list[MirrorResult]:
    """Download missing (or all, with ``force``) expected files.

    Every expected file is attempted; a file that fails lands in ``failed``
    without affecting the others.

    Args:
        ctx: Store context.
        versions: Versions to mirror. None means every managed version.
        concurrency: Maximum number of files processed at once.
        dry_run: Categorize without fetching or writing.
        force: Re-download files that are already present.
        files: Optional per-version restriction to these relative paths.

    Returns:
        One MirrorResult per version, in request order.

    Raises:
        StoreConfigurationError: If concurrency is less than 1.
        BridgeUnsupportedOperation: If the bridge cannot write or mkdir.
        StoreVersionNotFoundError: If a version is not managed.
    """
    validate_concurrency(concurrency)
    assert_capability(ctx.bridge, [Capability.WRITE, Capability.MKDIR], "mirror")
    targets = ctx.resolve_versions(versions)

    results: list[MirrorResult] = []
    for version in targets:
        restrict = None if files is None else set(files.get(version, ()))
        results.append(
            await mirror_version(
                ctx,
                version,
                concurrency=concurrency,
                dry_run=dry_run,
                force=force,
                restrict=restrict,
            )
        )
    return results


async def mirror_version(
    ctx: StoreContext,
    version: str,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
    force: bool = False,
    restrict: Collection[str] | None = None,
) -> MirrorResult:
    """Mirror a single version.

    A present file is skipped unless its snapshot entry disagrees with it on
    hash or size, in which case it is downloaded again.

    Args:
        ctx: Store context.
        version: Managed version.
        concurrency: Maximum number of files processed at once.
        dry_run: Categorize without fetching or writing.
        force: Re-download files that are already present.
        restrict: Only consider these relative paths.

    Returns:
        Categorized outcome for the version.
    """
    expected = await ctx.expected_files(version)
    work = [f for f in expected if restrict is None or f.relative_path(version) in restrict]

    result = MirrorResult(version=version)
    written: dict[str, SnapshotFile] = {}
    recorded: dict[str, SnapshotFile] = {}
    if work and not force:
        previous = await read_snapshot_or_default(ctx.bridge, ctx.base_path, version)
        recorded = previous.files if previous is not None else {}

    if work and not dry_run:
        version_dir = ctx.version_path(version)
        if not await ctx.bridge.exists(version_dir):
            await ctx.bridge.mkdir(version_dir)

    async def _mirror_file(expected_file: ExpectedFile) -> None:
        relative = expected_file.relative_path(version)
        target = ctx.version_path(version, relative)
        try:
            if not force and await ctx.bridge.exists(target):
                if await _matches_snapshot(ctx, target, recorded.get(relative)):
                    result.skipped.append(relative)
                    return
                logger.info("%s/%s differs from its snapshot entry", version, relative)
            if dry_run:
                result.mirrored.append(relative)
                return

            fetched = await ctx.content_source.fetch_file_content(version, expected_file.path)
            await ctx.bridge.write(target, fetched.content)
            written[relative] = snapshot_entry(fetched.content)
            result.mirrored.append(relative)
            logger.debug("Mirrored %s/%s", version, relative)
        except Exception as e:
            logger.debug("Failed to mirror %s/%s: %s", version, relative, e)
            result.failed.append(FailedFile(relative, FileOperation.DOWNLOAD, str(e)))

    await run_limited(work, _mirror_file, concurrency)

    if not dry_run and result.mirrored:
        await _rewrite_snapshot(ctx, version, expected, written)

    logger.info(
        "Mirror %s: %d mirrored, %d skipped, %d failed",
        version,
        len(result.mirrored),
        len(result.skipped),
        len(result.failed),
    )
    return result.finalize()


async def _rewrite_snapshot(
    ctx: StoreContext,
    version: str,
    expected: list[ExpectedFile],
    written: Mapping[str, SnapshotFile],
) -> None:
    """Rewrite the version snapshot in full from the expected files present."""
    previous = await read_snapshot_or_default(ctx.bridge, ctx.base_path, version)
    known = previous.files if previous is not None else {}

    entries: dict[str, SnapshotFile] = {}
    for expected_file in expected:
        relative = expected_file.relative_path(version)
        if relative in written:
            entries[relative] = written[relative]
            continue

        target = ctx.version_path(version, relative)
        if not await ctx.bridge.exists(target):
            continue
        if relative in known:
            entries[relative] = known[relative]
            continue
        try:
            entries[relative] = snapshot_entry(await ctx.bridge.read(target))
        except (BridgeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not hash %s/%s for the snapshot: %s", version, relative, e)

    snapshot = Snapshot(unicode_version=version, files=dict(sorted(entries.items())))
    await write_snapshot(ctx.bridge, ctx.base_path, version, snapshot)


async def _matches_snapshot(ctx: StoreContext, target: str, entry: SnapshotFile | None) -> bool:
    """Whether a present file agrees with its snapshot entry.

    Files without an entry count as matching. Unreadable files do not.
    """
    if entry is None:
        return True
    try:
        content = await ctx.bridge.read(target)
    except (BridgeError, OSError) as e:
        logger.debug("Could not read %s for verification: %s", target, e)
        return False
    return compute_file_hash(content) == entry.file_hash and content_size(content) == entry.size
