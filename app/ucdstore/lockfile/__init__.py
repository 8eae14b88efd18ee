"""Per-version snapshot codec.

Public API:
- Snapshot, SnapshotFile: Snapshot models
- read_snapshot / read_snapshot_or_default / write_snapshot: Snapshot I/O
- build_snapshot: Build a snapshot from file contents
- verify_snapshot: Compare a snapshot with the stored files
- compute_file_hash / compute_content_hash: sha256 digests
- LockfileInvalidError / LockfileBridgeUnsupportedOperation: Codec errors
"""

from ucdstore.lockfile.errors import (
    LockfileBridgeUnsupportedOperation,
    LockfileError,
    LockfileInvalidError,
)
from ucdstore.lockfile.hashing import (
    compute_content_hash,
    compute_file_hash,
    strip_unicode_header,
)
from ucdstore.lockfile.models import Snapshot, SnapshotFile
from ucdstore.lockfile.snapshot import (
    build_snapshot,
    can_use_lockfile,
    get_snapshot_path,
    read_snapshot,
    read_snapshot_or_default,
    snapshot_entry,
    verify_snapshot,
    write_snapshot,
)

__all__ = [
    "LockfileBridgeUnsupportedOperation",
    "LockfileError",
    "LockfileInvalidError",
    "Snapshot",
    "SnapshotFile",
    "build_snapshot",
    "can_use_lockfile",
    "compute_content_hash",
    "compute_file_hash",
    "get_snapshot_path",
    "read_snapshot",
    "read_snapshot_or_default",
    "snapshot_entry",
    "strip_unicode_header",
    "verify_snapshot",
    "write_snapshot",
]
