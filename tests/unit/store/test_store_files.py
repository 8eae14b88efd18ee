"""Unit tests for reading mirrored files."""

import pytest
from ucdstore.bridge.base import DirectoryEntry, FileEntry
from ucdstore.bridge.errors import PathTraversalError
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import (
    StoreFileNotFoundError,
    StoreFilterError,
    StoreVersionNotFoundError,
)
from ucdstore.store.files import get_file, get_file_paths, get_file_tree
from ucdstore.utils.glob import InvalidGlobPatternError


@pytest.fixture
def mirrored_context(store_context: StoreContext) -> StoreContext:
    """Context whose bridge holds a mirrored version with a snapshot."""
    store_context.bridge = MemoryFileSystemBridge(
        {
            "16.0.0/Blocks.txt": "blocks",
            "16.0.0/Unihan.zip": "zip",
            "16.0.0/snapshot.json": "{}",
            "16.0.0/auxiliary/WordBreakTest.txt": "test",
            "16.0.0/extracted/DerivedAge.txt": "age",
        }
    )
    return store_context


class TestGetFileTree:
    """Tests for get_file_tree function."""

    @pytest.mark.asyncio
    async def test_tree(self, mirrored_context: StoreContext) -> None:
        """The tree omits the snapshot and default exclusions."""
        tree = await get_file_tree(mirrored_context, "16.0.0")

        assert tree == [
            FileEntry(name="Blocks.txt", path="Blocks.txt"),
            DirectoryEntry(
                name="auxiliary",
                path="auxiliary",
                children=(FileEntry(name="WordBreakTest.txt", path="auxiliary/WordBreakTest.txt"),),
            ),
            DirectoryEntry(
                name="extracted",
                path="extracted",
                children=(FileEntry(name="DerivedAge.txt", path="extracted/DerivedAge.txt"),),
            ),
        ]

    @pytest.mark.asyncio
    async def test_extra_filters(self, mirrored_context: StoreContext) -> None:
        """Per-call filters narrow the tree and drop emptied directories."""
        paths = await get_file_paths(mirrored_context, "16.0.0", ["!**/*Test*"])

        assert paths == ["Blocks.txt", "extracted/DerivedAge.txt"]

    @pytest.mark.asyncio
    async def test_not_mirrored(self, store_context: StoreContext) -> None:
        """A version without a directory has an empty tree."""
        store_context.bridge = MemoryFileSystemBridge()

        assert await get_file_tree(store_context, "16.0.0") == []

    @pytest.mark.asyncio
    async def test_unknown_version(self, mirrored_context: StoreContext) -> None:
        """Unmanaged versions are rejected."""
        with pytest.raises(StoreVersionNotFoundError):
            await get_file_tree(mirrored_context, "1.0.0")

    @pytest.mark.asyncio
    async def test_invalid_filter(self, mirrored_context: StoreContext) -> None:
        """Invalid per-call filters raise."""
        with pytest.raises(InvalidGlobPatternError):
            await get_file_paths(mirrored_context, "16.0.0", ["{a,b"])


class TestGetFile:
    """Tests for get_file function."""

    @pytest.mark.asyncio
    async def test_read(self, mirrored_context: StoreContext) -> None:
        """Files are read relative to the version directory."""
        assert await get_file(mirrored_context, "16.0.0", "extracted/DerivedAge.txt") == "age"

    @pytest.mark.asyncio
    async def test_leading_slash(self, mirrored_context: StoreContext) -> None:
        """A leading slash still refers to the version directory."""
        assert await get_file(mirrored_context, "16.0.0", "/Blocks.txt") == "blocks"

    @pytest.mark.asyncio
    async def test_missing(self, mirrored_context: StoreContext) -> None:
        """Missing files raise StoreFileNotFoundError."""
        with pytest.raises(StoreFileNotFoundError):
            await get_file(mirrored_context, "16.0.0", "Scripts.txt")

    @pytest.mark.asyncio
    async def test_filtered(self, mirrored_context: StoreContext) -> None:
        """Files excluded by the filters cannot be read."""
        with pytest.raises(StoreFilterError):
            await get_file(mirrored_context, "16.0.0", "Unihan.zip")

    @pytest.mark.asyncio
    async def test_traversal(self, mirrored_context: StoreContext) -> None:
        """Paths escaping the version directory are rejected."""
        with pytest.raises(PathTraversalError):
            await get_file(mirrored_context, "16.0.0", "../15.1.0/Blocks.txt")
