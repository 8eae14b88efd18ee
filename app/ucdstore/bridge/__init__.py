"""Filesystem bridges with capability negotiation and safe path resolution.

Public API:
- FileSystemBridge: Abstract bridge interface
- LocalFileSystemBridge / HTTPFileSystemBridge / MemoryFileSystemBridge: Backends
- create_bridge: Build a bridge from a backend name and options
- Capability, has_capability, assert_capability: Capability negotiation
- resolve_safe_path, is_within_base, decode_path_safely: Path safety helpers
"""

from ucdstore.bridge.base import (
    Capability,
    DirectoryEntry,
    FileEntry,
    FileSystemBridge,
    FSEntry,
    assert_capability,
    flatten_file_paths,
    has_capability,
)
from ucdstore.bridge.errors import (
    BridgeError,
    BridgeFileNotFoundError,
    BridgeRequestError,
    BridgeUnsupportedOperation,
    FailedToDecodePathError,
    IllegalCharacterInPathError,
    PathSafetyError,
    PathTraversalError,
)
from ucdstore.bridge.factory import create_bridge
from ucdstore.bridge.http import HTTPFileSystemBridge
from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.bridge.memory import MemoryFileSystemBridge
from ucdstore.bridge.resolver import decode_path_safely, is_within_base, resolve_safe_path

__all__ = [
    "BridgeError",
    "BridgeFileNotFoundError",
    "BridgeRequestError",
    "BridgeUnsupportedOperation",
    "Capability",
    "DirectoryEntry",
    "FSEntry",
    "FailedToDecodePathError",
    "FileEntry",
    "FileSystemBridge",
    "HTTPFileSystemBridge",
    "IllegalCharacterInPathError",
    "LocalFileSystemBridge",
    "MemoryFileSystemBridge",
    "PathSafetyError",
    "PathTraversalError",
    "assert_capability",
    "create_bridge",
    "decode_path_safely",
    "flatten_file_paths",
    "has_capability",
    "is_within_base",
    "resolve_safe_path",
]
