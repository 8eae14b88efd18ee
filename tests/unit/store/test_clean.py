"""Unit tests for cleaning orphaned files."""

from pathlib import Path

import pytest
from conftest import FakeUpstream
from ucdstore.bridge.base import FSEntry
from ucdstore.bridge.errors import BridgeError
from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.store.clean import (
    FILE_DOES_NOT_EXIST,
    clean,
    remove_empty_directories,
    remove_files,
)
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import StoreConfigurationError
from ucdstore.store.models import FailedFile, FileOperation, VersionAnalysis


class FailingRmBridge(MemoryFileSystemBridge):
    """Memory bridge whose rm always fails."""

    async def rm(self, path: str, *, recursive: bool = False, force: bool = False) -> None:
        msg = f"permission denied: {path}"
        raise BridgeError(msg)


class StaleListingBridge(LocalFileSystemBridge):
    """Local bridge whose listings always look empty."""

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        return []


@pytest.fixture
def local_store(tmp_path: Path, upstream: FakeUpstream) -> StoreContext:
    """Context over a local directory with nested orphans."""
    version_dir = tmp_path / "16.0.0"
    (version_dir / "old" / "deep").mkdir(parents=True)
    (version_dir / "A.txt").write_text("a", encoding="utf-8")
    (version_dir / "old" / "deep" / "x.txt").write_text("x", encoding="utf-8")
    return StoreContext(
        bridge=LocalFileSystemBridge(tmp_path),
        manifest_source=upstream,
        content_source=upstream,
        versions={"16.0.0": "16.0.0"},
    )


class TestClean:
    """Tests for clean function."""

    @pytest.mark.asyncio
    async def test_removes_orphans(
        self, store_context: StoreContext, drifted_bridge: MemoryFileSystemBridge
    ) -> None:
        """Orphaned files are deleted and expected files kept."""
        [result] = await clean(store_context)

        assert result.deleted == ["orphan.txt"]
        assert result.failed == []
        assert result.removed_directories == []
        assert drifted_bridge.files == {"16.0.0/A.txt": "content of A.txt\n"}

    @pytest.mark.asyncio
    async def test_dry_run(
        self, store_context: StoreContext, drifted_bridge: MemoryFileSystemBridge
    ) -> None:
        """A dry run reports deletions without removing anything."""
        [result] = await clean(store_context, dry_run=True)

        assert result.deleted == ["orphan.txt"]
        assert await drifted_bridge.exists("16.0.0/orphan.txt")

    @pytest.mark.asyncio
    async def test_missing_files_never_touched(self, store_context: StoreContext) -> None:
        """clean does not create or report missing files."""
        [result] = await clean(store_context)

        assert not await store_context.bridge.exists("16.0.0/B.txt")
        assert "B.txt" not in result.deleted

    @pytest.mark.asyncio
    async def test_precomputed_drift_skips_vanished(self, store_context: StoreContext) -> None:
        """Orphans that are already gone are skipped."""
        drift = [
            VersionAnalysis(
                version="16.0.0",
                files=("A.txt",),
                missing_files=(),
                orphaned_files=("ghost.txt", "orphan.txt"),
            )
        ]

        [result] = await clean(store_context, drift=drift)

        assert result.deleted == ["orphan.txt"]
        assert result.skipped == ["ghost.txt"]

    @pytest.mark.asyncio
    async def test_rm_failure(self, upstream: FakeUpstream) -> None:
        """A failing removal is recorded and does not raise."""
        ctx = StoreContext(
            bridge=FailingRmBridge({"16.0.0/A.txt": "a", "16.0.0/orphan.txt": "o"}),
            manifest_source=upstream,
            content_source=upstream,
            versions={"16.0.0": "16.0.0"},
        )

        [result] = await clean(ctx)

        assert result.deleted == []
        assert result.failed == [
            FailedFile("orphan.txt", FileOperation.REMOVE, "permission denied: 16.0.0/orphan.txt"),
        ]

    @pytest.mark.asyncio
    async def test_invalid_concurrency(self, store_context: StoreContext) -> None:
        """Concurrency below 1 is a configuration error."""
        with pytest.raises(StoreConfigurationError):
            await clean(store_context, concurrency=0)


class TestCleanDirectories:
    """Tests for pruning directories after cleaning."""

    @pytest.mark.asyncio
    async def test_empty_directories_removed(
        self, local_store: StoreContext, tmp_path: Path
    ) -> None:
        """Directories emptied by the clean are removed deepest first."""
        [result] = await clean(local_store)

        assert result.deleted == ["old/deep/x.txt"]
        assert result.removed_directories == ["16.0.0/old/deep", "16.0.0/old"]
        assert not (tmp_path / "16.0.0" / "old").exists()
        assert (tmp_path / "16.0.0" / "A.txt").exists()

    @pytest.mark.asyncio
    async def test_version_root_removed_when_empty(
        self, tmp_path: Path, upstream_factory: type[FakeUpstream]
    ) -> None:
        """The version directory itself goes last once it is empty."""
        (tmp_path / "16.0.0" / "junk").mkdir(parents=True)
        (tmp_path / "16.0.0" / "junk" / "x.txt").write_text("x", encoding="utf-8")
        upstream = upstream_factory({"16.0.0": ["A.txt"]})
        ctx = StoreContext(
            bridge=LocalFileSystemBridge(tmp_path),
            manifest_source=upstream,
            content_source=upstream,
            versions={"16.0.0": "16.0.0"},
        )

        [result] = await clean(ctx)

        assert result.removed_directories == ["16.0.0/junk", "16.0.0"]
        assert not (tmp_path / "16.0.0").exists()

    @pytest.mark.asyncio
    async def test_extra_directories(self, local_store: StoreContext, tmp_path: Path) -> None:
        """Extra directories are pruned when empty."""
        (tmp_path / "16.0.0" / "empty" / "dir").mkdir(parents=True)

        [result] = await clean(local_store, directories=["empty/dir"])

        assert "16.0.0/empty/dir" in result.removed_directories
        assert "16.0.0/empty" in result.removed_directories

    @pytest.mark.asyncio
    async def test_dry_run_keeps_directories(
        self, local_store: StoreContext, tmp_path: Path
    ) -> None:
        """Nothing is pruned on a dry run."""
        [result] = await clean(local_store, dry_run=True)

        assert result.removed_directories == []
        assert (tmp_path / "16.0.0" / "old" / "deep" / "x.txt").exists()

    @pytest.mark.asyncio
    async def test_directory_filled_after_listing_is_kept(
        self, tmp_path: Path, upstream: FakeUpstream
    ) -> None:
        """A directory that gains content after listing is not removed with it."""
        (tmp_path / "16.0.0" / "old" / "deep").mkdir(parents=True)
        (tmp_path / "16.0.0" / "old" / "deep" / "x.txt").write_text("x", encoding="utf-8")
        ctx = StoreContext(
            bridge=StaleListingBridge(tmp_path),
            manifest_source=upstream,
            content_source=upstream,
            versions={"16.0.0": "16.0.0"},
        )

        removed = await remove_empty_directories(ctx, "16.0.0", [], ["old"])

        assert removed == []
        assert (tmp_path / "16.0.0" / "old" / "deep" / "x.txt").exists()


class TestRemoveFiles:
    """Tests for remove_files function."""

    @pytest.mark.asyncio
    async def test_strict_missing(self, store_context: StoreContext) -> None:
        """With strict_missing, absent files are failures rather than skips."""
        outcome = await remove_files(store_context, "16.0.0", ["ghost.txt"], strict_missing=True)

        assert outcome.skipped == []
        assert outcome.failed == [
            FailedFile("ghost.txt", FileOperation.REMOVE, FILE_DOES_NOT_EXIST),
        ]

    @pytest.mark.asyncio
    async def test_duplicates_removed_once(self, store_context: StoreContext) -> None:
        """Duplicate paths are only attempted once."""
        outcome = await remove_files(store_context, "16.0.0", ["orphan.txt", "orphan.txt"])

        assert outcome.deleted == ["orphan.txt"]
