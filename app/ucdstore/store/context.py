"""Shared state handed to every store operation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ucdstore.store.errors import (
    StoreConfigurationError,
    StoreUpstreamError,
    StoreVersionNotFoundError,
)
from ucdstore.utils.filter import PathFilter, create_path_filter
from ucdstore.utils.paths import join_store_path

if TYPE_CHECKING:
    from ucdstore.bridge.base import FileSystemBridge
    from ucdstore.store.client import ContentSource, ManifestSource
    from ucdstore.store.models import ExpectedFile


@dataclass(slots=True)
class StoreContext:
    """Collaborators and settings of a store instance.

    Attributes:
        bridge: Bridge holding the local mirror.
        manifest_source: Provides the expected files per version.
        content_source: Provides remote file content.
        base_path: Store root inside the bridge.
        versions: Managed versions, mapped to their backing UCD version.
        path_filter: Store-wide include/exclude filter.
    """

    bridge: FileSystemBridge
    manifest_source: ManifestSource
    content_source: ContentSource
    base_path: str = ""
    versions: dict[str, str] = field(default_factory=dict)
    path_filter: PathFilter = field(default_factory=create_path_filter)

    def version_path(self, version: str, *parts: str) -> str:
        """Path of a version directory, or of a file inside it."""
        return join_store_path(self.base_path, version, *parts)

    def resolve_versions(self, versions: Iterable[str] | None) -> list[str]:
        """Validate requested versions, defaulting to all managed versions.

        Args:
            versions: Requested versions, or None for all.

        Returns:
            Versions to operate on, in request order.

        Raises:
            StoreVersionNotFoundError: If a version is not managed.
        """
        if versions is None:
            return list(self.versions)
        resolved = list(dict.fromkeys(versions))
        for version in resolved:
            if version not in self.versions:
                raise StoreVersionNotFoundError(version)
        return resolved

    async def expected_files(
        self,
        version: str,
        extra_filters: Iterable[str] | None = None,
    ) -> list[ExpectedFile]:
        """Expected files of a version after applying the store filters.

        Args:
            version: Managed version.
            extra_filters: Additional patterns for this call.

        Returns:
            Expected files in manifest order, without duplicates.

        Raises:
            StoreUpstreamError: If the manifest source fails.
        """
        try:
            files = await self.manifest_source.get_expected_files(version)
        except StoreUpstreamError:
            raise
        except Exception as e:
            msg = f"Failed to fetch expected files for version '{version}': {e}"
            raise StoreUpstreamError(msg) from e

        extra = list(extra_filters or [])
        seen: set[str] = set()
        result: list[ExpectedFile] = []
        for expected in files:
            relative = expected.relative_path(version)
            if relative in seen or not self.path_filter(relative, extra):
                continue
            seen.add(relative)
            result.append(expected)
        return result


def validate_concurrency(concurrency: int) -> None:
    """Reject concurrency settings below 1.

    Raises:
        StoreConfigurationError: If concurrency is less than 1.
    """
    if concurrency < 1:
        msg = "Concurrency must be at least 1"
        raise StoreConfigurationError(msg)
