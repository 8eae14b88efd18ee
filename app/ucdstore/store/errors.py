"""Exceptions raised by the store reconciliation engine.

These cover misuse and configuration problems. Expected per-file failures
during mirror, clean and repair are reported as ``FailedFile`` entries in
the operation results instead.
"""


class StoreError(Exception):
    """Base exception for store errors."""


class StoreConfigurationError(StoreError):
    """Raised when an operation is called with invalid settings."""


class StoreNotInitializedError(StoreError):
    """Raised when an operation runs before the store was initialized."""

    def __init__(self) -> None:
        super().__init__("Store is not initialized; call init() first")


class StoreVersionNotFoundError(StoreError):
    """Raised when a version is not managed by the store."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Version '{version}' is not managed by this store")


class StoreFileNotFoundError(StoreError):
    """Raised when a requested file is not in the store."""

    def __init__(self, version: str, path: str) -> None:
        self.version = version
        self.path = path
        super().__init__(f"File '{path}' not found in version '{version}'")


class StoreFilterError(StoreError):
    """Raised when a requested file is excluded by the store filters."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File '{path}' is excluded by the store filters")


class StoreManifestError(StoreError):
    """Raised when the store manifest (.ucd-store.json) is missing or malformed."""


class StoreUpstreamError(StoreError):
    """Raised when a remote collaborator cannot provide required data."""
