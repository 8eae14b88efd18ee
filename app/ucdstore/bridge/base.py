"""Filesystem bridge abstraction.

A bridge wraps one storage backend behind a uniform async operation set.
``read`` and ``exists`` are mandatory; ``write``, ``listdir``, ``mkdir``
and ``rm`` are optional and advertised through a fixed ``capabilities``
set on each bridge class. Callers check capabilities with
``assert_capability`` before doing any work so that an unsupported
operation fails before the first byte is touched.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Literal, NoReturn

from ucdstore.bridge.errors import BridgeUnsupportedOperation


class Capability(str, Enum):
    """Operations a bridge can perform."""

    READ = "read"
    WRITE = "write"
    EXISTS = "exists"
    LISTDIR = "listdir"
    MKDIR = "mkdir"
    RM = "rm"


REQUIRED_CAPABILITIES: frozenset[Capability] = frozenset({Capability.READ, Capability.EXISTS})


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A file in a directory listing.

    Attributes:
        name: File name without any directory component.
        path: Path relative to the listed directory.
    """

    name: str
    path: str
    type: Literal["file"] = "file"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "name": self.name, "path": self.path}


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory in a directory listing.

    Attributes:
        name: Directory name.
        path: Path relative to the listed directory.
        children: Entries inside the directory. Empty for non-recursive listings.
    """

    name: str
    path: str
    children: tuple[FileEntry | DirectoryEntry, ...] = field(default_factory=tuple)
    type: Literal["directory"] = "directory"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "path": self.path,
            "children": [child.to_dict() for child in self.children],
        }


FSEntry = FileEntry | DirectoryEntry


def join_entry_path(parent: str, name: str) -> str:
    """Build a child entry path from its parent path and name."""
    return f"{parent}/{name}" if parent else name


def flatten_file_paths(entries: Iterable[FSEntry]) -> list[str]:
    """Collect the paths of every file in a (possibly nested) listing.

    Args:
        entries: Listing as returned by ``FileSystemBridge.listdir``.

    Returns:
        File paths in depth-first order.
    """
    paths: list[str] = []
    for entry in entries:
        if isinstance(entry, DirectoryEntry):
            paths.extend(flatten_file_paths(entry.children))
        else:
            paths.append(entry.path)
    return paths


class FileSystemBridge(ABC):
    """Abstract base class for filesystem bridges.

    Subclasses declare their supported operations in ``capabilities`` and
    override the matching methods. Optional operations that are not
    overridden raise ``BridgeUnsupportedOperation``.
    """

    name: ClassVar[str] = "bridge"
    capabilities: ClassVar[frozenset[Capability]] = REQUIRED_CAPABILITIES

    @abstractmethod
    async def read(self, path: str) -> str:
        """Read a file as text.

        Args:
            path: Path relative to the bridge root.

        Returns:
            File content.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a file or directory exists.

        Args:
            path: Path relative to the bridge root.

        Returns:
            True if the path exists.
        """

    async def write(self, path: str, data: str | bytes) -> None:
        """Write a file, creating parent directories as needed."""
        self._unsupported("write", Capability.WRITE)

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        """List a directory.

        Args:
            path: Directory path relative to the bridge root.
            recursive: Descend into subdirectories.

        Returns:
            Entries whose paths are relative to ``path``.
        """
        self._unsupported("listdir", Capability.LISTDIR)

    async def mkdir(self, path: str) -> None:
        """Create a directory and any missing parents."""
        self._unsupported("mkdir", Capability.MKDIR)

    async def rm(self, path: str, *, recursive: bool = False, force: bool = False) -> None:
        """Remove a file or directory.

        Args:
            path: Path relative to the bridge root.
            recursive: Remove directories with their contents.
            force: Do not fail when the path does not exist.
        """
        self._unsupported("rm", Capability.RM)

    def _unsupported(self, operation: str, capability: Capability) -> NoReturn:
        raise BridgeUnsupportedOperation(
            operation,
            [capability.value],
            [c.value for c in self.capabilities],
        )


def _as_capabilities(names: Capability | str | Iterable[Capability | str]) -> list[Capability]:
    if isinstance(names, (Capability, str)):
        names = [names]
    return [Capability(name) for name in names]


def has_capability(
    bridge: FileSystemBridge,
    names: Capability | str | Iterable[Capability | str],
) -> bool:
    """Check whether a bridge supports every named capability.

    Args:
        bridge: Bridge to inspect.
        names: One capability or several.

    Returns:
        True if all capabilities are supported.
    """
    return all(capability in bridge.capabilities for capability in _as_capabilities(names))


def assert_capability(
    bridge: FileSystemBridge,
    names: Capability | str | Iterable[Capability | str],
    operation: str | None = None,
) -> None:
    """Ensure a bridge supports every named capability.

    Args:
        bridge: Bridge to inspect.
        names: One capability or several.
        operation: Name of the operation needing them, for the error message.

    Raises:
        BridgeUnsupportedOperation: If any capability is missing.
    """
    required = _as_capabilities(names)
    missing = [c.value for c in required if c not in bridge.capabilities]
    if missing:
        raise BridgeUnsupportedOperation(
            operation or ", ".join(c.value for c in required),
            missing,
            [c.value for c in bridge.capabilities],
        )
