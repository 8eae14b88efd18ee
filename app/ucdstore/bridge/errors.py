"""Exceptions raised by path resolution and filesystem bridges."""

from collections.abc import Iterable


class PathSafetyError(Exception):
    """Base exception for rejected paths."""


class IllegalCharacterInPathError(PathSafetyError):
    """Raised when a path contains a NUL byte or a control character."""

    def __init__(self, character: str) -> None:
        self.character = character
        super().__init__(f"Illegal character detected in path: {character!r}")


class PathTraversalError(PathSafetyError):
    """Raised when a path resolves outside of its base root."""

    def __init__(self, base_path: str, requested_path: str) -> None:
        self.base_path = base_path
        self.requested_path = requested_path
        super().__init__(f"Path traversal detected: {requested_path!r} escapes base {base_path!r}")


class FailedToDecodePathError(PathSafetyError):
    """Raised when percent-decoding a path does not settle."""

    def __init__(self) -> None:
        super().__init__("Failed to decode path: maximum decoding iterations exceeded")


class BridgeError(Exception):
    """Base exception for filesystem bridge failures."""


class BridgeUnsupportedOperation(BridgeError):
    """Raised when a bridge lacks a capability an operation requires."""

    def __init__(
        self,
        operation: str,
        missing: Iterable[str],
        available: Iterable[str] = (),
    ) -> None:
        self.operation = operation
        self.missing = sorted(missing)
        self.available = sorted(available)
        available_text = ", ".join(self.available) or "none"
        super().__init__(
            f"Operation {operation!r} requires unsupported capabilities: "
            f"{', '.join(self.missing)} (available: {available_text})"
        )


class BridgeFileNotFoundError(BridgeError):
    """Raised when a bridge is asked to read a path that does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No such file: {path}")


class BridgeRequestError(BridgeError):
    """Raised when a remote backend answers with an unusable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
