"""In-memory filesystem bridge.

Files live in a flat mapping of path to content. Directories are implicit:
a directory exists while at least one file sits beneath it.
"""

import logging

from ucdstore.bridge.base import (
    Capability,
    DirectoryEntry,
    FileEntry,
    FileSystemBridge,
    FSEntry,
    join_entry_path,
)
from ucdstore.bridge.errors import BridgeError, BridgeFileNotFoundError
from ucdstore.bridge.resolver import resolve_safe_path

logger = logging.getLogger(__name__)


class MemoryFileSystemBridge(FileSystemBridge):
    """Bridge keeping every file in memory. Intended for tests and dry runs."""

    name = "memory"
    capabilities = frozenset(Capability)

    def __init__(self, initial_files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = {}
        for path, content in (initial_files or {}).items():
            self._files[self._key(path)] = content

    @property
    def files(self) -> dict[str, str]:
        """Snapshot copy of the stored files."""
        return dict(self._files)

    @staticmethod
    def _key(path: str) -> str:
        return resolve_safe_path("/", path).lstrip("/")

    def _prefix(self, key: str) -> str:
        return f"{key}/" if key else ""

    async def read(self, path: str) -> str:
        key = self._key(path)
        if key not in self._files:
            raise BridgeFileNotFoundError(path)
        return self._files[key]

    async def exists(self, path: str) -> bool:
        key = self._key(path)
        if key in self._files:
            return True
        prefix = self._prefix(key)
        return any(file_path.startswith(prefix) for file_path in self._files)

    async def write(self, path: str, data: str | bytes) -> None:
        key = self._key(path)
        if not key:
            msg = "Cannot write file: path resolves to the root"
            raise BridgeError(msg)
        self._files[key] = data.decode("utf-8") if isinstance(data, bytes) else data

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        key = self._key(path)
        prefix = self._prefix(key)
        relative_paths = sorted(p[len(prefix) :] for p in self._files if p.startswith(prefix))
        if key and not relative_paths:
            raise BridgeFileNotFoundError(path)
        return _build_tree(relative_paths, "", recursive)

    async def mkdir(self, path: str) -> None:
        # Directories are implicit; only validate the path
        self._key(path)

    async def rm(self, path: str, *, recursive: bool = False, force: bool = False) -> None:
        key = self._key(path)

        if key in self._files:
            del self._files[key]
            return

        prefix = self._prefix(key)
        nested = [p for p in self._files if p.startswith(prefix)]
        if not nested:
            if force:
                return
            raise BridgeFileNotFoundError(path)

        if not recursive:
            msg = f"Directory not empty: {path}"
            raise BridgeError(msg)

        logger.debug("Removing %d file(s) under %s", len(nested), key or "/")
        for file_path in nested:
            del self._files[file_path]


def _build_tree(relative_paths: list[str], prefix: str, recursive: bool) -> list[FSEntry]:
    """Turn sorted relative file paths into listing entries."""
    files: list[str] = []
    directories: dict[str, list[str]] = {}

    for relative in relative_paths:
        head, sep, rest = relative.partition("/")
        if sep:
            directories.setdefault(head, []).append(rest)
        else:
            files.append(head)

    entries: list[FSEntry] = []
    for name in sorted({*files, *directories}):
        entry_path = join_entry_path(prefix, name)
        if name in directories:
            children = (
                tuple(_build_tree(directories[name], entry_path, recursive)) if recursive else ()
            )
            entries.append(DirectoryEntry(name=name, path=entry_path, children=children))
        else:
            entries.append(FileEntry(name=name, path=entry_path))
    return entries
