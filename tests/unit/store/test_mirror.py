"""Unit tests for mirroring."""

from pathlib import Path

import pytest
from conftest import FakeUpstream
from ucdstore.bridge.base import Capability, FileSystemBridge
from ucdstore.bridge.errors import BridgeUnsupportedOperation
from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.lockfile import compute_file_hash, read_snapshot
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import StoreConfigurationError
from ucdstore.store.mirror import mirror
from ucdstore.store.models import FailedFile, FileOperation


class ReadOnlyMemoryBridge(MemoryFileSystemBridge):
    """Memory bridge without write support."""

    capabilities = frozenset({Capability.READ, Capability.EXISTS, Capability.LISTDIR})


def make_context(bridge: FileSystemBridge, upstream: FakeUpstream) -> StoreContext:
    return StoreContext(
        bridge=bridge,
        manifest_source=upstream,
        content_source=upstream,
        versions={"16.0.0": "16.0.0"},
    )


class TestMirror:
    """Tests for mirror function."""

    @pytest.mark.asyncio
    async def test_mirrors_missing_files(
        self, store_context: StoreContext, upstream: FakeUpstream
    ) -> None:
        """Missing files are fetched and present ones skipped."""
        [result] = await mirror(store_context)

        assert result.mirrored == ["B.txt", "nested/C.txt"]
        assert result.skipped == ["A.txt"]
        assert result.failed == []
        assert sorted(upstream.fetched) == ["B.txt", "nested/C.txt"]
        content = await store_context.bridge.read("16.0.0/nested/C.txt")
        assert content == "content of nested/C.txt\n"

    @pytest.mark.asyncio
    async def test_orphans_untouched(self, store_context: StoreContext) -> None:
        """Mirroring never removes files."""
        await mirror(store_context)

        assert await store_context.bridge.exists("16.0.0/orphan.txt")

    @pytest.mark.asyncio
    async def test_partial_failure(
        self, drifted_bridge: MemoryFileSystemBridge, upstream_factory: type[FakeUpstream]
    ) -> None:
        """One failing file does not stop the others."""
        upstream = upstream_factory(
            {"16.0.0": ["A.txt", "B.txt", "nested/C.txt"]},
            fail={"B.txt"},
        )
        ctx = make_context(drifted_bridge, upstream)

        [result] = await mirror(ctx, force=True)

        assert result.mirrored == ["A.txt", "nested/C.txt"]
        assert result.failed == [
            FailedFile("B.txt", FileOperation.DOWNLOAD, "upstream refused B.txt"),
        ]
        assert not await drifted_bridge.exists("16.0.0/B.txt")

    @pytest.mark.asyncio
    async def test_dry_run(
        self,
        store_context: StoreContext,
        upstream: FakeUpstream,
        drifted_bridge: MemoryFileSystemBridge,
    ) -> None:
        """A dry run categorizes without fetching or writing."""
        before = drifted_bridge.files

        [result] = await mirror(store_context, dry_run=True)

        assert result.mirrored == ["B.txt", "nested/C.txt"]
        assert result.skipped == ["A.txt"]
        assert upstream.fetched == []
        assert drifted_bridge.files == before

    @pytest.mark.asyncio
    async def test_force(self, store_context: StoreContext) -> None:
        """force re-downloads files that are already present."""
        [result] = await mirror(store_context, force=True)

        assert result.mirrored == ["A.txt", "B.txt", "nested/C.txt"]
        assert result.skipped == []

    @pytest.mark.asyncio
    async def test_restrict_files(
        self, store_context: StoreContext, upstream: FakeUpstream
    ) -> None:
        """Only the listed files are considered when a restriction is given."""
        [result] = await mirror(store_context, files={"16.0.0": ["B.txt"]})

        assert result.mirrored == ["B.txt"]
        assert upstream.fetched == ["B.txt"]

    @pytest.mark.asyncio
    async def test_second_run_skips_everything(self, store_context: StoreContext) -> None:
        """Mirroring twice leaves nothing to do the second time."""
        await mirror(store_context)
        [result] = await mirror(store_context)

        assert result.mirrored == []
        assert result.skipped == ["A.txt", "B.txt", "nested/C.txt"]

    @pytest.mark.asyncio
    async def test_redownloads_file_that_differs_from_snapshot(
        self, store_context: StoreContext, upstream: FakeUpstream
    ) -> None:
        """A present file whose hash no longer matches its snapshot entry is fetched again."""
        await mirror(store_context)
        await store_context.bridge.write("16.0.0/B.txt", "tampered\n")
        upstream.fetched.clear()

        [result] = await mirror(store_context)

        assert result.mirrored == ["B.txt"]
        assert result.skipped == ["A.txt", "nested/C.txt"]
        assert upstream.fetched == ["B.txt"]
        assert await store_context.bridge.read("16.0.0/B.txt") == "content of B.txt\n"

    @pytest.mark.asyncio
    async def test_size_mismatch_reported_in_dry_run(self, store_context: StoreContext) -> None:
        """A dry run lists a drifted file as to be mirrored without touching it."""
        await mirror(store_context)
        await store_context.bridge.write("16.0.0/A.txt", "content of A.txt\nextra\n")

        [result] = await mirror(store_context, dry_run=True)

        assert result.mirrored == ["A.txt"]
        assert await store_context.bridge.read("16.0.0/A.txt") == "content of A.txt\nextra\n"

    @pytest.mark.asyncio
    async def test_present_file_without_snapshot_entry_skipped(
        self, store_context: StoreContext
    ) -> None:
        """Files the snapshot does not list are trusted as they are."""
        await store_context.bridge.write("16.0.0/A.txt", "local edit\n")

        [result] = await mirror(store_context)

        assert "A.txt" in result.skipped
        assert await store_context.bridge.read("16.0.0/A.txt") == "local edit\n"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrency", [0, -3])
    async def test_invalid_concurrency(
        self, store_context: StoreContext, concurrency: int
    ) -> None:
        """Concurrency below 1 is a configuration error."""
        with pytest.raises(StoreConfigurationError, match="Concurrency"):
            await mirror(store_context, concurrency=concurrency)

    @pytest.mark.asyncio
    async def test_requires_write(self, upstream: FakeUpstream) -> None:
        """A read-only bridge fails before anything is fetched."""
        ctx = make_context(ReadOnlyMemoryBridge(), upstream)

        with pytest.raises(BridgeUnsupportedOperation, match="mirror"):
            await mirror(ctx)

        assert upstream.fetched == []


class TestMirrorSnapshot:
    """Tests for the snapshot written after mirroring."""

    @pytest.mark.asyncio
    async def test_snapshot_covers_present_files(self, store_context: StoreContext) -> None:
        """The snapshot lists every expected file present after mirroring."""
        await mirror(store_context)

        snapshot = await read_snapshot(store_context.bridge, "", "16.0.0")

        assert list(snapshot.files) == ["A.txt", "B.txt", "nested/C.txt"]
        assert snapshot.files["B.txt"].file_hash == compute_file_hash("content of B.txt\n")
        assert "orphan.txt" not in snapshot.files

    @pytest.mark.asyncio
    async def test_dry_run_writes_no_snapshot(self, store_context: StoreContext) -> None:
        """No snapshot is written on a dry run."""
        await mirror(store_context, dry_run=True)

        assert not await store_context.bridge.exists("16.0.0/snapshot.json")

    @pytest.mark.asyncio
    async def test_local_disk(self, tmp_path: Path, upstream: FakeUpstream) -> None:
        """Mirroring into an empty directory creates the version tree."""
        ctx = make_context(LocalFileSystemBridge(tmp_path), upstream)

        [result] = await mirror(ctx, concurrency=1)

        assert result.mirrored == ["A.txt", "B.txt", "nested/C.txt"]
        assert (tmp_path / "16.0.0" / "nested" / "C.txt").is_file()
        assert (tmp_path / "16.0.0" / "snapshot.json").is_file()
