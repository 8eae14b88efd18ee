"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import posixpath

import pytest
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.store.context import StoreContext
from ucdstore.store.models import ExpectedFile, FetchedContent, VersionInfo


class FakeUpstream:
    """In-process manifest source, content source and version registry.

    Files are declared per version as relative paths; their remote path is
    ``/<version>/ucd/<relative>`` and their store path ``/<version>/<relative>``.
    """

    def __init__(
        self,
        files: dict[str, list[str]],
        *,
        fail: set[str] | None = None,
        mapped: dict[str, str] | None = None,
    ) -> None:
        self.files = files
        self.fail = fail or set()
        self.mapped = mapped or {}
        self.fetched: list[str] = []

    async def get_expected_files(self, version: str) -> list[ExpectedFile]:
        return [
            ExpectedFile(
                name=posixpath.basename(path),
                path=f"/{version}/ucd/{path}",
                store_path=f"/{version}/{path}",
            )
            for path in self.files[version]
        ]

    async def fetch_file_content(self, version: str, path: str) -> FetchedContent:
        relative = path.removeprefix(f"/{version}/ucd/")
        if relative in self.fail:
            msg = f"upstream refused {relative}"
            raise RuntimeError(msg)
        self.fetched.append(relative)
        return FetchedContent(content=f"content of {relative}\n", content_type="text/plain")

    async def list_versions(self) -> list[VersionInfo]:
        return [
            VersionInfo(version=version, mapped_version=self.mapped.get(version, version))
            for version in self.files
        ]


@pytest.fixture
def upstream() -> FakeUpstream:
    """Upstream expecting A.txt, B.txt and nested/C.txt for 16.0.0."""
    return FakeUpstream({"16.0.0": ["A.txt", "B.txt", "nested/C.txt"]})


@pytest.fixture
def drifted_bridge() -> MemoryFileSystemBridge:
    """Memory bridge holding one expected file and one orphan for 16.0.0."""
    return MemoryFileSystemBridge(
        {
            "16.0.0/A.txt": "content of A.txt\n",
            "16.0.0/orphan.txt": "stale\n",
        }
    )


@pytest.fixture
def store_context(upstream: FakeUpstream, drifted_bridge: MemoryFileSystemBridge) -> StoreContext:
    """Store context over the drifted memory bridge managing 16.0.0."""
    return StoreContext(
        bridge=drifted_bridge,
        manifest_source=upstream,
        content_source=upstream,
        versions={"16.0.0": "16.0.0"},
    )


@pytest.fixture
def upstream_factory() -> type[FakeUpstream]:
    """The FakeUpstream class, for tests that need a custom file set."""
    return FakeUpstream
