"""Store reconciliation engine.

This module provides the UCDStore facade, the analyze/mirror/clean/repair
and compare operations it exposes, their result models, and the remote
collaborators that feed the store.
"""

from ucdstore.store.client import ContentSource, ManifestSource, UCDClient, VersionRegistry
from ucdstore.store.compare import CompareMode
from ucdstore.store.errors import (
    StoreConfigurationError,
    StoreError,
    StoreFileNotFoundError,
    StoreFilterError,
    StoreManifestError,
    StoreNotInitializedError,
    StoreUpstreamError,
    StoreVersionNotFoundError,
)
from ucdstore.store.models import (
    CleanResult,
    ExpectedFile,
    FailedFile,
    FetchedContent,
    FileOperation,
    MirrorResult,
    RepairResult,
    VersionAnalysis,
    VersionComparison,
    VersionInfo,
)
from ucdstore.store.result import OperationResult, try_operation
from ucdstore.store.store import UCDStore, create_store, create_store_from_config

__all__ = [
    "CleanResult",
    "CompareMode",
    "ContentSource",
    "ExpectedFile",
    "FailedFile",
    "FetchedContent",
    "FileOperation",
    "ManifestSource",
    "MirrorResult",
    "OperationResult",
    "RepairResult",
    "StoreConfigurationError",
    "StoreError",
    "StoreFileNotFoundError",
    "StoreFilterError",
    "StoreManifestError",
    "StoreNotInitializedError",
    "StoreUpstreamError",
    "StoreVersionNotFoundError",
    "UCDClient",
    "UCDStore",
    "VersionAnalysis",
    "VersionComparison",
    "VersionInfo",
    "VersionRegistry",
    "create_store",
    "create_store_from_config",
    "try_operation",
]
