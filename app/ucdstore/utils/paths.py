"""Helpers for slash-separated store paths."""

import posixpath


def join_store_path(*parts: str) -> str:
    """Join path parts with ``/``, ignoring empty parts and ``.``."""
    cleaned = [part for part in parts if part not in ("", ".")]
    return posixpath.join(*cleaned) if cleaned else ""


def parent_directories(path: str, stop: str = "") -> list[str]:
    """List the ancestors of a path, nearest first, down to (excluding) ``stop``.

    Args:
        path: Slash-separated file path.
        stop: Ancestor at which to stop. Not included in the result.

    Returns:
        Ancestor directories ordered from deepest to shallowest.
    """
    parents: list[str] = []
    current = posixpath.dirname(path)
    while current and current != stop and current != "/":
        parents.append(current)
        current = posixpath.dirname(current)
    return parents
