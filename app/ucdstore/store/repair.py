"""Converge each version towards its manifest.

Repair restores missing files through the mirror primitive and removes
orphans through the clean primitive. Unlike a plain clean, an orphan that
has already disappeared by the time it is removed counts as a failure:
repair acted on drift it detected itself, so the state changing under it
is reported.
"""

import logging
from collections.abc import Iterable

from ucdstore.bridge.base import Capability, assert_capability
from ucdstore.bridge.errors import BridgeError
from ucdstore.core.config import DEFAULT_CONCURRENCY
from ucdstore.store.analyze import analyze_version
from ucdstore.store.clean import remove_empty_directories, remove_files
from ucdstore.store.context import StoreContext, validate_concurrency
from ucdstore.store.errors import StoreError
from ucdstore.store.mirror import mirror_version
from ucdstore.store.models import FailedFile, FileOperation, MirrorResult, RepairResult

logger = logging.getLogger(__name__)

DOWNLOAD_FAILED = "Failed to download file"


async def repair(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
) -> list[RepairResult]:
    """Restore missing files and remove orphaned ones.

    Versions are processed independently: a version whose analysis fails
    is reported with a failed ``analyze`` entry and the others still run.

    Args:
        ctx: Store context.
        versions: Versions to repair. None means every managed version.
        concurrency: Maximum number of files processed at once.
        dry_run: Categorize without writing or removing anything.

    Returns:
        One RepairResult per version, in request order.

    Raises:
        StoreConfigurationError: If concurrency is less than 1.
        BridgeUnsupportedOperation: If the bridge lacks a needed capability.
        StoreVersionNotFoundError: If a version is not managed.
    """
    validate_concurrency(concurrency)
    assert_capability(
        ctx.bridge,
        [Capability.WRITE, Capability.MKDIR, Capability.LISTDIR, Capability.RM],
        "repair",
    )
    targets = ctx.resolve_versions(versions)
    return [
        await repair_version(ctx, version, concurrency=concurrency, dry_run=dry_run)
        for version in targets
    ]


async def repair_version(
    ctx: StoreContext,
    version: str,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
) -> RepairResult:
    """Repair a single version.

    Args:
        ctx: Store context.
        version: Managed version.
        concurrency: Maximum number of files processed at once.
        dry_run: Categorize without writing or removing anything.

    Returns:
        Categorized outcome for the version.
    """
    result = RepairResult(version=version)

    try:
        analysis = await analyze_version(ctx, version)
    except (StoreError, BridgeError, OSError) as e:
        logger.warning("Could not analyze %s: %s", version, e)
        result.failed.append(FailedFile(version, FileOperation.ANALYZE, str(e)))
        return result

    result.skipped.extend(analysis.files)

    if analysis.missing_files:
        await _restore(ctx, version, analysis.missing_files, result, concurrency, dry_run)

    if analysis.orphaned_files:
        outcome = await remove_files(
            ctx,
            version,
            analysis.orphaned_files,
            concurrency=concurrency,
            dry_run=dry_run,
            strict_missing=True,
        )
        result.removed.extend(outcome.deleted)
        result.failed.extend(outcome.failed)
        if not dry_run:
            await remove_empty_directories(ctx, version, outcome.deleted)

    logger.info(
        "Repair %s: %d restored, %d removed, %d skipped, %d failed",
        version,
        len(result.restored),
        len(result.removed),
        len(result.skipped),
        len(result.failed),
    )
    return result.finalize()


async def _restore(
    ctx: StoreContext,
    version: str,
    missing: tuple[str, ...],
    result: RepairResult,
    concurrency: int,
    dry_run: bool,
) -> None:
    """Mirror the missing files and fold the outcome into ``result``."""
    try:
        mirrored: MirrorResult = await mirror_version(
            ctx,
            version,
            concurrency=concurrency,
            dry_run=dry_run,
            restrict=set(missing),
        )
    except Exception as e:
        logger.warning("Mirror failed while repairing %s: %s", version, e)
        result.failed.extend(FailedFile(path, FileOperation.DOWNLOAD, str(e)) for path in missing)
        return

    restored = set(mirrored.mirrored)
    present = set(mirrored.skipped)
    failures = {failure.file_path: failure for failure in mirrored.failed}
    for path in missing:
        if path in restored:
            result.restored.append(path)
        elif path in present:
            # Reappeared between analysis and mirroring
            result.skipped.append(path)
        elif path in failures:
            result.failed.append(failures[path])
        else:
            # Dropped from the manifest between analysis and mirroring
            result.failed.append(FailedFile(path, FileOperation.DOWNLOAD, DOWNLOAD_FAILED))
