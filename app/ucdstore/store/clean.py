"""Remove orphaned files and the directories they leave behind."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ucdstore.bridge.base import Capability, assert_capability
from ucdstore.bridge.errors import BridgeError
from ucdstore.core.config import DEFAULT_CONCURRENCY
from ucdstore.store.analyze import analyze_version
from ucdstore.store.context import StoreContext, validate_concurrency
from ucdstore.store.models import CleanResult, FailedFile, FileOperation, VersionAnalysis
from ucdstore.utils.concurrency import run_limited
from ucdstore.utils.paths import join_store_path, parent_directories

logger = logging.getLogger(__name__)

FILE_DOES_NOT_EXIST = "File does not exist"


@dataclass(slots=True)
class RemovalOutcome:
    """Categorized outcome of removing a set of files from one version."""

    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[FailedFile] = field(default_factory=list)


async def clean(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
    directories: Iterable[str] | None = None,
    drift: Iterable[VersionAnalysis] | None = None,
) -> list[CleanResult]:
    """Delete orphaned files, then prune directories left empty.

    Args:
        ctx: Store context.
        versions: Versions to clean. None means every managed version.
        concurrency: Maximum number of files removed at once.
        dry_run: Categorize without removing anything.
        directories: Extra directories, relative to each version, to prune
            when empty.
        drift: Precomputed analyses to take orphans from instead of
            analyzing again.

    Returns:
        One CleanResult per version, in request order.

    Raises:
        StoreConfigurationError: If concurrency is less than 1.
        BridgeUnsupportedOperation: If the bridge cannot list or remove.
        StoreVersionNotFoundError: If a version is not managed.
    """
    validate_concurrency(concurrency)
    assert_capability(
        ctx.bridge,
        [Capability.EXISTS, Capability.LISTDIR, Capability.RM],
        "clean",
    )
    targets = ctx.resolve_versions(versions)
    precomputed = {analysis.version: analysis for analysis in drift or []}
    extra_directories = list(directories or [])

    results: list[CleanResult] = []
    for version in targets:
        analysis = precomputed.get(version) or await analyze_version(ctx, version)
        outcome = await remove_files(
            ctx,
            version,
            analysis.orphaned_files,
            concurrency=concurrency,
            dry_run=dry_run,
        )

        result = CleanResult(
            version=version,
            deleted=outcome.deleted,
            skipped=outcome.skipped,
            failed=outcome.failed,
        )
        if not dry_run:
            result.removed_directories = await remove_empty_directories(
                ctx,
                version,
                outcome.deleted,
                extra_directories,
            )

        logger.info(
            "Clean %s: %d deleted, %d skipped, %d failed",
            version,
            len(result.deleted),
            len(result.skipped),
            len(result.failed),
        )
        results.append(result.finalize())
    return results


async def remove_files(
    ctx: StoreContext,
    version: str,
    paths: Iterable[str],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
    strict_missing: bool = False,
) -> RemovalOutcome:
    """Remove files from a version directory.

    Args:
        ctx: Store context.
        version: Managed version.
        paths: Paths relative to the version directory.
        concurrency: Maximum number of files removed at once.
        dry_run: Categorize without removing anything.
        strict_missing: Report files that are already gone as failed
            instead of skipped.

    Returns:
        Deleted, skipped and failed paths.
    """
    outcome = RemovalOutcome()

    async def _remove(relative: str) -> None:
        target = ctx.version_path(version, relative)
        try:
            if not await ctx.bridge.exists(target):
                if strict_missing:
                    outcome.failed.append(
                        FailedFile(relative, FileOperation.REMOVE, FILE_DOES_NOT_EXIST)
                    )
                else:
                    outcome.skipped.append(relative)
                return
            if not dry_run:
                await ctx.bridge.rm(target)
            outcome.deleted.append(relative)
            logger.debug("Removed %s/%s", version, relative)
        except Exception as e:
            logger.debug("Failed to remove %s/%s: %s", version, relative, e)
            outcome.failed.append(FailedFile(relative, FileOperation.REMOVE, str(e)))

    await run_limited(list(dict.fromkeys(paths)), _remove, concurrency)
    return outcome


async def remove_empty_directories(
    ctx: StoreContext,
    version: str,
    removed_paths: Iterable[str],
    directories: Iterable[str] = (),
) -> list[str]:
    """Remove directories left empty, deepest first, version root last.

    Args:
        ctx: Store context.
        version: Managed version.
        removed_paths: Paths, relative to the version directory, whose
            ancestors are candidates.
        directories: Further candidate directories, relative to the
            version directory.

    Returns:
        Removed directories, relative to the store root.
    """
    candidates: set[str] = set()
    for relative in removed_paths:
        candidates.update(parent_directories(relative))
    for directory in directories:
        directory = directory.strip("/")
        if directory:
            candidates.add(directory)
            candidates.update(parent_directories(directory))

    ordered = sorted(candidates, key=lambda d: (-d.count("/"), d))
    ordered.append("")

    removed: list[str] = []
    for relative in ordered:
        target = ctx.version_path(version, relative)
        try:
            if not await ctx.bridge.exists(target):
                continue
            if await ctx.bridge.listdir(target):
                continue
            await ctx.bridge.rm(target)
        except (BridgeError, OSError) as e:
            logger.warning("Could not remove directory %s: %s", target, e)
            continue
        removed.append(join_store_path(version, relative))
        logger.debug("Removed empty directory %s", target)
    return removed
