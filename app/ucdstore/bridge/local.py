"""Local-disk filesystem bridge."""

import asyncio
import logging
import os
import shutil
from pathlib import Path

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

# Directory references that may legitimately end with a slash
_DIRECTORY_REFERENCES = frozenset({"/", "./", "../"})


class LocalFileSystemBridge(FileSystemBridge):
    """Bridge backed by a directory on the local disk.

    All paths are resolved against ``base_path`` and can never escape it.

    Attributes:
        base_path: Absolute root directory of the bridge.
    """

    name = "local"
    capabilities = frozenset(Capability)

    def __init__(self, base_path: str | Path) -> None:
        """Initialize the bridge.

        Args:
            base_path: Root directory. Relative paths are resolved against
                the current working directory.
        """
        root = Path(base_path).expanduser().resolve()
        if str(root).startswith("\\\\"):
            msg = f"UNC paths are not supported as a bridge root: {root}"
            raise ValueError(msg)
        self.base_path = str(root)

    def _resolve(self, path: str) -> Path:
        return Path(resolve_safe_path(self.base_path, path))

    async def read(self, path: str) -> str:
        _reject_trailing_slash(path, "read")
        target = self._resolve(path)
        logger.debug("Reading %s", target)
        try:
            return await asyncio.to_thread(target.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise BridgeFileNotFoundError(path) from e
        except UnicodeDecodeError as e:
            msg = f"Cannot read {path}: not valid UTF-8"
            raise BridgeError(msg) from e

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)

    async def write(self, path: str, data: str | bytes) -> None:
        _reject_trailing_slash(path, "write")
        target = self._resolve(path)
        logger.debug("Writing %s", target)
        await asyncio.to_thread(_write_file, target, data)

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        target = self._resolve(path)
        if not await asyncio.to_thread(target.is_dir):
            raise BridgeFileNotFoundError(path)
        return await asyncio.to_thread(_scan_directory, target, "", recursive)

    async def mkdir(self, path: str) -> None:
        target = self._resolve(path)
        logger.debug("Creating directory %s", target)
        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)

    async def rm(self, path: str, *, recursive: bool = False, force: bool = False) -> None:
        target = self._resolve(path)
        logger.debug("Removing %s", target)
        try:
            await asyncio.to_thread(_remove, target, recursive)
        except FileNotFoundError as e:
            if force:
                return
            raise BridgeFileNotFoundError(path) from e


def _write_file(target: Path, data: str | bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        target.write_bytes(data)
    else:
        target.write_text(data, encoding="utf-8")


def _remove(target: Path, recursive: bool) -> None:
    if not target.exists() and not target.is_symlink():
        raise FileNotFoundError(str(target))

    if target.is_dir() and not target.is_symlink():
        if recursive:
            shutil.rmtree(target)
        else:
            # Fails with OSError when the directory is not empty
            target.rmdir()
        return

    target.unlink()


def _reject_trailing_slash(path: str, operation: str) -> None:
    trimmed = path.strip()
    if trimmed.endswith("/") and trimmed not in _DIRECTORY_REFERENCES:
        msg = f"Cannot {operation} file: path ends with '/'"
        raise BridgeError(msg)


def _scan_directory(directory: Path, prefix: str, recursive: bool) -> list[FSEntry]:
    """Build listing entries for a directory, sorted by name."""
    entries: list[FSEntry] = []
    with os.scandir(directory) as it:
        dir_entries = sorted(it, key=lambda e: e.name)

    for entry in dir_entries:
        entry_path = join_entry_path(prefix, entry.name)
        if entry.is_dir(follow_symlinks=False):
            children = (
                tuple(_scan_directory(Path(entry.path), entry_path, recursive))
                if recursive
                else ()
            )
            entries.append(DirectoryEntry(name=entry.name, path=entry_path, children=children))
        else:
            entries.append(FileEntry(name=entry.name, path=entry_path))

    return entries
