"""Bridge construction from configuration."""

from typing import Any, Literal

from ucdstore.bridge.base import FileSystemBridge
from ucdstore.bridge.http import HTTPFileSystemBridge
from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.bridge.memory import MemoryFileSystemBridge

BridgeKind = Literal["local", "http", "memory"]

_BRIDGES: dict[str, type[FileSystemBridge]] = {
    "local": LocalFileSystemBridge,
    "http": HTTPFileSystemBridge,
    "memory": MemoryFileSystemBridge,
}


def create_bridge(kind: BridgeKind, **options: Any) -> FileSystemBridge:
    """Create a bridge of the given kind.

    Args:
        kind: Backend to use ("local", "http" or "memory").
        **options: Keyword arguments forwarded to the bridge constructor,
            e.g. ``base_path`` for local or ``base_url`` for http.

    Returns:
        Configured bridge instance.

    Raises:
        ValueError: If the kind is unknown.
    """
    try:
        bridge_cls = _BRIDGES[kind]
    except KeyError:
        msg = f"Unknown bridge kind: {kind!r} (expected one of {', '.join(sorted(_BRIDGES))})"
        raise ValueError(msg) from None
    return bridge_cls(**options)
