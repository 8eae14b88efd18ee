"""Snapshot I/O through a filesystem bridge.

Snapshots live at ``<base>/<version>/snapshot.json``. ``read_snapshot`` is
strict and raises on anything but a well-formed snapshot, while
``read_snapshot_or_default`` treats every failure as "no snapshot".
"""

import json
import logging
import posixpath
from collections.abc import Mapping

from pydantic import ValidationError

from ucdstore.bridge.base import Capability, FileSystemBridge, has_capability
from ucdstore.bridge.errors import BridgeError
from ucdstore.core.paths import SNAPSHOT_FILE_NAME
from ucdstore.lockfile.errors import LockfileBridgeUnsupportedOperation, LockfileInvalidError
from ucdstore.lockfile.hashing import compute_content_hash, compute_file_hash, content_size
from ucdstore.lockfile.models import Snapshot, SnapshotFile
from ucdstore.utils.paths import join_store_path

logger = logging.getLogger(__name__)


def get_snapshot_path(base_path: str, version: str) -> str:
    """Path of a version's snapshot file.

    Args:
        base_path: Store root inside the bridge.
        version: Unicode version.

    Returns:
        ``<base_path>/<version>/snapshot.json``.
    """
    return join_store_path(base_path, version, SNAPSHOT_FILE_NAME)


def can_use_lockfile(bridge: FileSystemBridge) -> bool:
    """Snapshots are only maintained on writable bridges."""
    return has_capability(bridge, Capability.WRITE)


async def read_snapshot(bridge: FileSystemBridge, base_path: str, version: str) -> Snapshot:
    """Read and validate a version's snapshot.

    Args:
        bridge: Bridge to read from.
        base_path: Store root inside the bridge.
        version: Unicode version.

    Returns:
        The validated snapshot.

    Raises:
        LockfileInvalidError: If the snapshot cannot be read, is empty, is
            not valid JSON or does not match the schema.
    """
    snapshot_path = get_snapshot_path(base_path, version)
    logger.debug("Reading snapshot from %s", snapshot_path)

    try:
        raw = await bridge.read(snapshot_path)
    except (BridgeError, OSError, UnicodeDecodeError) as e:
        raise LockfileInvalidError(snapshot_path, "snapshot could not be read") from e

    if not raw or not raw.strip():
        raise LockfileInvalidError(snapshot_path, "snapshot is empty")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LockfileInvalidError(snapshot_path, "snapshot is not valid JSON") from e

    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        details = [error["msg"] for error in e.errors()]
        raise LockfileInvalidError(
            snapshot_path,
            "snapshot does not match expected schema",
            details,
        ) from e


async def read_snapshot_or_default(
    bridge: FileSystemBridge,
    base_path: str,
    version: str,
) -> Snapshot | None:
    """Read a snapshot, returning None when it is missing or invalid.

    Args:
        bridge: Bridge to read from.
        base_path: Store root inside the bridge.
        version: Unicode version.

    Returns:
        The snapshot, or None.
    """
    try:
        return await read_snapshot(bridge, base_path, version)
    except LockfileInvalidError as e:
        logger.debug("No usable snapshot for %s: %s", version, e.reason)
        return None


async def write_snapshot(
    bridge: FileSystemBridge,
    base_path: str,
    version: str,
    snapshot: Snapshot,
) -> None:
    """Write a version's snapshot as pretty-printed JSON.

    Does nothing on bridges without the write capability.

    Args:
        bridge: Bridge to write to.
        base_path: Store root inside the bridge.
        version: Unicode version.
        snapshot: Snapshot to persist.

    Raises:
        LockfileBridgeUnsupportedOperation: If the version directory is
            missing and the bridge cannot create it.
    """
    if not can_use_lockfile(bridge):
        logger.debug("Bridge %s is read-only, skipping snapshot write", bridge.name)
        return

    snapshot_path = get_snapshot_path(base_path, version)
    snapshot_dir = posixpath.dirname(snapshot_path)

    if not await bridge.exists(snapshot_dir):
        if not has_capability(bridge, Capability.MKDIR):
            raise LockfileBridgeUnsupportedOperation(
                "write_snapshot",
                [Capability.MKDIR.value],
                [c.value for c in bridge.capabilities],
            )
        logger.debug("Creating snapshot directory %s", snapshot_dir)
        await bridge.mkdir(snapshot_dir)

    await bridge.write(snapshot_path, json.dumps(snapshot.to_json_dict(), indent=2) + "\n")
    logger.debug("Wrote snapshot for %s with %d file(s)", version, len(snapshot.files))


def build_snapshot(version: str, contents: Mapping[str, str | bytes]) -> Snapshot:
    """Build a snapshot from file contents.

    Args:
        version: Unicode version.
        contents: Mapping of relative path to file content.

    Returns:
        Snapshot with one record per file.
    """
    return Snapshot(
        unicode_version=version,
        files={path: snapshot_entry(content) for path, content in sorted(contents.items())},
    )


def snapshot_entry(content: str | bytes) -> SnapshotFile:
    """Hash record for a single file's content."""
    return SnapshotFile(
        hash=compute_content_hash(content),
        file_hash=compute_file_hash(content),
        size=content_size(content),
    )


async def verify_snapshot(
    bridge: FileSystemBridge,
    base_path: str,
    version: str,
    snapshot: Snapshot,
) -> dict[str, str]:
    """Compare a snapshot with the files it describes.

    Args:
        bridge: Bridge holding the files.
        base_path: Store root inside the bridge.
        version: Unicode version.
        snapshot: Snapshot to check.

    Returns:
        Mapping of path to problem ("missing" or "hash mismatch") for every
        file that does not match. Empty when the snapshot is accurate.
    """
    problems: dict[str, str] = {}
    for path, entry in sorted(snapshot.files.items()):
        try:
            content = await bridge.read(join_store_path(base_path, version, path))
        except (BridgeError, OSError):
            problems[path] = "missing"
            continue
        if compute_file_hash(content) != entry.file_hash:
            problems[path] = "hash mismatch"
    return problems
