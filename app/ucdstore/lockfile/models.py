"""Pydantic models for per-version snapshots.

A snapshot records, for every file of one version, the hash of its content
(Unicode header stripped), the hash of the raw file and its size in bytes.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

HASH_PATTERN = r"^sha256:[0-9a-f]{64}$"

Sha256Hash = Annotated[str, Field(pattern=HASH_PATTERN)]


class SnapshotFile(BaseModel):
    """Hash record of a single file.

    Attributes:
        hash: Hash of the content with the Unicode header stripped.
        file_hash: Hash of the raw file bytes.
        size: Size of the raw file in bytes.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    hash: Annotated[Sha256Hash, Field(description="Content hash (header stripped)")]
    file_hash: Annotated[
        Sha256Hash,
        Field(alias="fileHash", description="Hash of the raw file"),
    ]
    size: Annotated[int, Field(ge=0, description="File size in bytes")]


class Snapshot(BaseModel):
    """Snapshot of one version's files.

    Attributes:
        unicode_version: Version the snapshot describes.
        files: Mapping of path (relative to the version root) to its record.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    unicode_version: Annotated[
        str,
        Field(alias="unicodeVersion", min_length=1, description="Unicode version"),
    ]
    files: Annotated[
        dict[str, SnapshotFile],
        Field(description="Per-file hash records"),
    ]

    def to_json_dict(self) -> dict[str, object]:
        """Serialize using the on-disk camelCase field names."""
        return self.model_dump(by_alias=True)
