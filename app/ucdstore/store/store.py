"""UCD store facade.

``UCDStore`` ties a filesystem bridge to the remote collaborators and
exposes the reconciliation operations (analyze, mirror, clean, repair) and
read access to mirrored files. A store must be initialized with ``init()``
before use; initialization loads or bootstraps the store manifest
(``.ucd-store.json``) that lists the managed versions.

Example:
    >>> store = create_store(base_path="~/ucd", versions=["16.0.0"])
    >>> await store.init()
    >>> [report] = await store.analyze()
    >>> report.is_complete
    False
"""

import logging
from collections.abc import Collection, Iterable, Mapping
from pathlib import Path

import httpx

from ucdstore.bridge.base import Capability, FileSystemBridge, FSEntry, has_capability
from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.core.config import DEFAULT_API_URL, DEFAULT_CONCURRENCY, StoreConfig
from ucdstore.store import analyze as analyze_ops
from ucdstore.store import clean as clean_ops
from ucdstore.store import compare as compare_ops
from ucdstore.store import files as file_ops
from ucdstore.store import mirror as mirror_ops
from ucdstore.store import repair as repair_ops
from ucdstore.store.client import ContentSource, ManifestSource, UCDClient, VersionRegistry
from ucdstore.store.compare import CompareMode
from ucdstore.store.context import StoreContext
from ucdstore.store.errors import StoreConfigurationError, StoreNotInitializedError
from ucdstore.store.manifest import (
    read_store_manifest,
    store_manifest_exists,
    write_store_manifest,
)
from ucdstore.store.models import (
    CleanResult,
    MirrorResult,
    RepairResult,
    VersionAnalysis,
    VersionComparison,
)
from ucdstore.utils.filter import PathFilter, create_path_filter

logger = logging.getLogger(__name__)


class UCDStore:
    """A local mirror of one or more UCD versions.

    Attributes:
        bridge: Bridge holding the mirror.
        base_path: Store root inside the bridge.
        path_filter: Store-wide include/exclude filter.
    """

    def __init__(
        self,
        bridge: FileSystemBridge,
        *,
        manifest_source: ManifestSource,
        content_source: ContentSource,
        version_registry: VersionRegistry | None = None,
        base_path: str = "",
        versions: Iterable[str] | None = None,
        path_filter: PathFilter | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.bridge = bridge
        self.base_path = base_path
        self.path_filter = path_filter or create_path_filter()
        self.concurrency = concurrency
        self._manifest_source = manifest_source
        self._content_source = content_source
        self._version_registry = version_registry
        self._requested_versions = list(dict.fromkeys(versions or []))
        self._context: StoreContext | None = None

    @property
    def initialized(self) -> bool:
        return self._context is not None

    @property
    def versions(self) -> list[str]:
        """Managed versions; empty until the store is initialized."""
        return list(self._context.versions) if self._context is not None else []

    @property
    def context(self) -> StoreContext:
        """Context shared with the store operations.

        Raises:
            StoreNotInitializedError: If ``init()`` has not run yet.
        """
        if self._context is None:
            raise StoreNotInitializedError()
        return self._context

    async def init(self, *, persist: bool = True) -> list[str]:
        """Load the store manifest, creating it if needed.

        An existing manifest is extended with any requested versions it
        lacks. Without a manifest the managed versions are the requested
        ones or, if none were requested, every version the registry lists.
        The manifest is only written on bridges that can write.

        Args:
            persist: Write the manifest when it changed. Pass False for
                dry runs and read-only commands.

        Returns:
            Managed versions.

        Raises:
            StoreManifestError: If an existing manifest is malformed.
            StoreConfigurationError: If no versions could be determined.
            StoreUpstreamError: If the version registry fails.
        """
        versions: dict[str, str] = {}
        if await store_manifest_exists(self.bridge, self.base_path):
            versions = await read_store_manifest(self.bridge, self.base_path)
            logger.debug("Loaded store manifest with %d version(s)", len(versions))

        missing = [v for v in self._requested_versions if v not in versions]
        changed = bool(missing) or not versions
        if missing:
            versions.update(await self._map_versions(missing))
        elif not versions:
            versions = await self._registry_versions()

        if not versions:
            msg = "No versions to manage: pass versions or configure a version registry"
            raise StoreConfigurationError(msg)

        if changed and persist and has_capability(self.bridge, Capability.WRITE):
            await write_store_manifest(self.bridge, self.base_path, versions)

        self._context = StoreContext(
            bridge=self.bridge,
            manifest_source=self._manifest_source,
            content_source=self._content_source,
            base_path=self.base_path,
            versions=versions,
            path_filter=self.path_filter,
        )
        logger.info("Store initialized with %d version(s)", len(versions))
        return self.versions

    async def _registry_versions(self) -> dict[str, str]:
        if self._version_registry is None:
            return {}
        infos = await self._version_registry.list_versions()
        return {info.version: info.mapped_version for info in infos}

    async def _map_versions(self, requested: list[str]) -> dict[str, str]:
        """Map requested versions to their backing UCD versions."""
        known = await self._registry_versions()
        return {version: known.get(version, version) for version in requested}

    async def analyze(self, versions: Iterable[str] | None = None) -> list[VersionAnalysis]:
        """Compute drift per version. See ``ucdstore.store.analyze.analyze``."""
        return await analyze_ops.analyze(self.context, versions)

    async def mirror(
        self,
        versions: Iterable[str] | None = None,
        *,
        concurrency: int | None = None,
        dry_run: bool = False,
        force: bool = False,
        files: Mapping[str, Collection[str]] | None = None,
    ) -> list[MirrorResult]:
        """Download missing files. See ``ucdstore.store.mirror.mirror``."""
        return await mirror_ops.mirror(
            self.context,
            versions,
            concurrency=self.concurrency if concurrency is None else concurrency,
            dry_run=dry_run,
            force=force,
            files=files,
        )

    async def clean(
        self,
        versions: Iterable[str] | None = None,
        *,
        concurrency: int | None = None,
        dry_run: bool = False,
        directories: Iterable[str] | None = None,
        drift: Iterable[VersionAnalysis] | None = None,
    ) -> list[CleanResult]:
        """Remove orphaned files. See ``ucdstore.store.clean.clean``."""
        return await clean_ops.clean(
            self.context,
            versions,
            concurrency=self.concurrency if concurrency is None else concurrency,
            dry_run=dry_run,
            directories=directories,
            drift=drift,
        )

    async def repair(
        self,
        versions: Iterable[str] | None = None,
        *,
        concurrency: int | None = None,
        dry_run: bool = False,
    ) -> list[RepairResult]:
        """Restore missing and remove orphaned files. See ``ucdstore.store.repair.repair``."""
        return await repair_ops.repair(
            self.context,
            versions,
            concurrency=self.concurrency if concurrency is None else concurrency,
            dry_run=dry_run,
        )

    async def compare(
        self,
        from_version: str,
        to_version: str,
        *,
        mode: CompareMode | tuple[CompareMode, CompareMode] = CompareMode.PREFER_LOCAL,
        filters: Iterable[str] | None = None,
        include_file_hashes: bool = True,
        concurrency: int | None = None,
    ) -> VersionComparison:
        """Compare two versions file by file. See ``ucdstore.store.compare.compare``."""
        return await compare_ops.compare(
            self.context,
            from_version,
            to_version,
            mode=mode,
            filters=filters,
            include_file_hashes=include_file_hashes,
            concurrency=self.concurrency if concurrency is None else concurrency,
        )

    async def get_file_tree(
        self,
        version: str,
        filters: Iterable[str] | None = None,
    ) -> list[FSEntry]:
        return await file_ops.get_file_tree(self.context, version, filters)

    async def get_file_paths(
        self,
        version: str,
        filters: Iterable[str] | None = None,
    ) -> list[str]:
        return await file_ops.get_file_paths(self.context, version, filters)

    async def get_file(
        self,
        version: str,
        path: str,
        filters: Iterable[str] | None = None,
    ) -> str:
        return await file_ops.get_file(self.context, version, path, filters)


def create_store(
    *,
    base_path: str | Path | None = None,
    bridge: FileSystemBridge | None = None,
    api_url: str = DEFAULT_API_URL,
    versions: Iterable[str] | None = None,
    filters: Iterable[str] | None = None,
    disable_default_exclusions: bool = False,
    concurrency: int = DEFAULT_CONCURRENCY,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> UCDStore:
    """Create a store backed by the UCD API.

    Args:
        base_path: Local directory of the mirror. Ignored when ``bridge``
            is given.
        bridge: Bridge to use instead of a local one.
        api_url: Base URL of the UCD API.
        versions: Versions to manage.
        filters: Include patterns and ``!``-prefixed exclude patterns.
        disable_default_exclusions: Leave out the built-in exclusions.
        concurrency: Default concurrency for store operations.
        client: Shared httpx client for API requests.
        timeout: Request timeout in seconds when no client is given.

    Returns:
        Uninitialized UCDStore; call ``init()`` before use.

    Raises:
        StoreConfigurationError: If neither base_path nor bridge is given.
        InvalidGlobPatternError: If a filter is invalid.
    """
    if bridge is None:
        if base_path is None:
            msg = "Either base_path or bridge is required"
            raise StoreConfigurationError(msg)
        bridge = LocalFileSystemBridge(base_path)

    api = UCDClient(api_url, client=client, timeout=timeout)
    return UCDStore(
        bridge,
        manifest_source=api,
        content_source=api,
        version_registry=api,
        versions=versions,
        path_filter=create_path_filter(
            filters, disable_default_exclusions=disable_default_exclusions
        ),
        concurrency=concurrency,
    )


def create_store_from_config(config: StoreConfig, **overrides: object) -> UCDStore:
    """Create a store from a loaded StoreConfig.

    Args:
        config: Store configuration.
        **overrides: Keyword arguments for ``create_store`` taking precedence
            over the configuration.

    Returns:
        Uninitialized UCDStore.
    """
    options: dict[str, object] = {
        "base_path": config.base_path,
        "api_url": config.api_url,
        "versions": config.versions,
        "filters": config.filters,
        "disable_default_exclusions": config.disable_default_exclusions,
        "concurrency": config.concurrency,
        "timeout": config.timeout_seconds,
    }
    options.update(overrides)
    return create_store(**options)  # type: ignore[arg-type]
