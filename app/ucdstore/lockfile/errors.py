"""Exceptions raised by the snapshot codec."""

from collections.abc import Iterable


class LockfileError(Exception):
    """Base exception for snapshot and lockfile errors."""


class LockfileInvalidError(LockfileError):
    """Raised when a snapshot cannot be read or is malformed.

    Attributes:
        path: Snapshot path that failed.
        reason: Short description such as "snapshot is empty".
        details: Individual validation messages, if any.
    """

    def __init__(self, path: str, reason: str, details: list[str] | None = None) -> None:
        self.path = path
        self.reason = reason
        self.details = details or []
        super().__init__(f"Invalid snapshot at {path}: {reason}")


class LockfileBridgeUnsupportedOperation(LockfileError):
    """Raised when the bridge cannot perform an operation the codec needs."""

    def __init__(
        self,
        operation: str,
        missing: Iterable[str],
        available: Iterable[str] = (),
    ) -> None:
        self.operation = operation
        self.missing = sorted(missing)
        self.available = sorted(available)
        super().__init__(
            f"Operation {operation!r} requires unsupported capabilities: "
            f"{', '.join(self.missing)} (available: {', '.join(self.available) or 'none'})"
        )
