"""Unit tests for version comparison."""

import pytest
from conftest import FakeUpstream
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.store.compare import CompareMode, compare
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import StoreConfigurationError, StoreVersionNotFoundError


@pytest.fixture
def two_versions() -> FakeUpstream:
    """Upstream publishing 15.0.0 and 16.0.0."""
    return FakeUpstream(
        {
            "15.0.0": ["A.txt", "B.txt"],
            "16.0.0": ["A.txt", "B.txt", "C.txt"],
        }
    )


def make_context(bridge: MemoryFileSystemBridge, upstream: FakeUpstream) -> StoreContext:
    return StoreContext(
        bridge=bridge,
        manifest_source=upstream,
        content_source=upstream,
        versions={"15.0.0": "15.0.0", "16.0.0": "16.0.0"},
    )


@pytest.fixture
def mirrored_bridge() -> MemoryFileSystemBridge:
    """Both versions mirrored, with one change of each kind between them."""
    return MemoryFileSystemBridge(
        {
            "15.0.0/A.txt": "same\n",
            "15.0.0/B.txt": "old\n",
            "15.0.0/Gone.txt": "gone\n",
            "15.0.0/snapshot.json": "{}",
            "16.0.0/A.txt": "same\n",
            "16.0.0/B.txt": "new\n",
            "16.0.0/New.txt": "new file\n",
            "16.0.0/snapshot.json": "{}",
        }
    )


class TestCompare:
    """Tests for compare function."""

    @pytest.mark.asyncio
    async def test_local_changes(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """Added, removed, modified and unchanged files are told apart."""
        ctx = make_context(mirrored_bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0")

        assert result.added == ("New.txt",)
        assert result.removed == ("Gone.txt",)
        assert result.modified == ("B.txt",)
        assert result.unchanged == ("A.txt",)
        assert (result.from_total, result.to_total) == (3, 3)
        assert two_versions.fetched == []

    @pytest.mark.asyncio
    async def test_without_hashes(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """Without hashing every common file counts as unchanged."""
        ctx = make_context(mirrored_bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0", include_file_hashes=False)

        assert result.modified == ()
        assert result.unchanged == ("A.txt", "B.txt")

    @pytest.mark.asyncio
    async def test_api_mode(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """API mode ignores the mirror and reads the remote manifest and content."""
        ctx = make_context(mirrored_bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0", mode=CompareMode.API)

        assert result.added == ("C.txt",)
        assert result.removed == ()
        assert result.unchanged == ("A.txt", "B.txt")
        assert sorted(two_versions.fetched) == ["A.txt", "A.txt", "B.txt", "B.txt"]

    @pytest.mark.asyncio
    async def test_prefer_local_falls_back_to_api(self, two_versions: FakeUpstream) -> None:
        """A version that is not mirrored is read from the API."""
        bridge = MemoryFileSystemBridge(
            {
                "16.0.0/A.txt": "content of A.txt\n",
                "16.0.0/B.txt": "changed\n",
            }
        )
        ctx = make_context(bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0")

        assert result.modified == ("B.txt",)
        assert result.unchanged == ("A.txt",)
        assert result.added == ()
        assert sorted(two_versions.fetched) == ["A.txt", "B.txt"]

    @pytest.mark.asyncio
    async def test_local_mode_on_unmirrored_version(self, two_versions: FakeUpstream) -> None:
        """Local mode never reaches the API; an unmirrored version has no files."""
        bridge = MemoryFileSystemBridge({"16.0.0/A.txt": "a\n"})
        ctx = make_context(bridge, two_versions)

        result = await compare(ctx, "16.0.0", "15.0.0", mode=CompareMode.LOCAL)

        assert result.removed == ("A.txt",)
        assert result.to_total == 0
        assert two_versions.fetched == []

    @pytest.mark.asyncio
    async def test_mode_per_side(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """A (from, to) pair picks the source of each side."""
        ctx = make_context(mirrored_bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0", mode=(CompareMode.LOCAL, CompareMode.API))

        assert result.added == ("C.txt",)
        assert result.removed == ("Gone.txt",)
        assert result.modified == ("A.txt", "B.txt")
        assert sorted(two_versions.fetched) == ["A.txt", "B.txt"]

    @pytest.mark.asyncio
    async def test_filters(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """Per-call filters apply to both sides."""
        ctx = make_context(mirrored_bridge, two_versions)

        result = await compare(ctx, "15.0.0", "16.0.0", filters=["!**/B.txt"])

        assert result.modified == ()
        assert result.unchanged == ("A.txt",)
        assert (result.from_total, result.to_total) == (2, 2)

    @pytest.mark.asyncio
    async def test_unmanaged_version(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """Both versions must be managed."""
        ctx = make_context(mirrored_bridge, two_versions)

        with pytest.raises(StoreVersionNotFoundError):
            await compare(ctx, "15.0.0", "1.0.0")

    @pytest.mark.asyncio
    async def test_invalid_concurrency(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """Concurrency below 1 is a configuration error."""
        ctx = make_context(mirrored_bridge, two_versions)

        with pytest.raises(StoreConfigurationError, match="Concurrency"):
            await compare(ctx, "15.0.0", "16.0.0", concurrency=0)

    @pytest.mark.asyncio
    async def test_to_dict(
        self, mirrored_bridge: MemoryFileSystemBridge, two_versions: FakeUpstream
    ) -> None:
        """The JSON form carries files and counts."""
        ctx = make_context(mirrored_bridge, two_versions)

        data = (await compare(ctx, "15.0.0", "16.0.0")).to_dict()

        assert data["from"] == "15.0.0"
        assert data["files"]["modified"] == ["B.txt"]
        assert data["counts"] == {
            "fromTotal": 3,
            "toTotal": 3,
            "added": 1,
            "removed": 1,
            "modified": 1,
            "unchanged": 1,
        }
