"""Data models for store operations.

Provides the expected-file records coming from the manifest source, the
drift report produced by analyze, and the categorized results of mirror,
clean and repair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


@dataclass(frozen=True, slots=True)
class ExpectedFile:
    """A file the manifest expects for a version.

    Attributes:
        name: File name.
        path: Path on the remote files API, e.g. "/16.0.0/ucd/UnicodeData.txt".
        store_path: Path inside the store, e.g. "/16.0.0/UnicodeData.txt".
    """

    name: str
    path: str
    store_path: str

    def relative_path(self, version: str) -> str:
        """Path of the file relative to the version directory.

        Args:
            version: Version the file belongs to.

        Returns:
            ``store_path`` without its leading ``/<version>/`` prefix.
        """
        relative = (self.store_path or self.path).lstrip("/")
        prefix = f"{version}/"
        if relative.startswith(prefix):
            relative = relative[len(prefix) :]
        return relative


@dataclass(frozen=True, slots=True)
class FetchedContent:
    """File content returned by a content source.

    Attributes:
        content: Text or binary body.
        content_type: Media type reported by the source, if any.
    """

    content: str | bytes
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """A version listed by the version registry.

    Attributes:
        version: Declared Unicode version.
        mapped_version: UCD version that actually backs it.
    """

    version: str
    mapped_version: str


class FileOperation(str, Enum):
    """Operation during which a file failed."""

    DOWNLOAD = "download"
    REMOVE = "remove"
    ANALYZE = "analyze"


@dataclass(frozen=True, slots=True)
class FailedFile:
    """A file an operation could not process.

    Attributes:
        file_path: Path relative to the version directory.
        operation: What was being attempted.
        error: Underlying error message.
    """

    file_path: str
    operation: FileOperation
    error: str

    def to_dict(self) -> dict[str, str]:
        return {
            "filePath": self.file_path,
            "operation": self.operation.value,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class VersionAnalysis:
    """Drift between the manifest and the files on disk for one version.

    Attributes:
        version: Analyzed version.
        files: Expected files that are present.
        missing_files: Expected files that are absent.
        orphaned_files: Present files the manifest does not list.
    """

    version: str
    files: tuple[str, ...]
    missing_files: tuple[str, ...]
    orphaned_files: tuple[str, ...]

    @property
    def file_count(self) -> int:
        """Number of expected files present on disk."""
        return len(self.files)

    @property
    def expected_file_count(self) -> int:
        """Number of files the manifest expects."""
        return len(self.files) + len(self.missing_files)

    @property
    def is_complete(self) -> bool:
        """True when nothing is missing and nothing is orphaned."""
        return not (self.missing_files or self.orphaned_files)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the analysis.
        """
        return {
            "version": self.version,
            "files": list(self.files),
            "missingFiles": list(self.missing_files),
            "orphanedFiles": list(self.orphaned_files),
            "fileCount": self.file_count,
            "expectedFileCount": self.expected_file_count,
            "isComplete": self.is_complete,
        }


@dataclass(slots=True)
class MirrorResult:
    """Outcome of mirroring one version.

    Attributes:
        version: Mirrored version.
        mirrored: Files fetched and written (or that would be, in dry-run).
        skipped: Files already present.
        failed: Files that could not be mirrored.
    """

    version: str
    mirrored: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[FailedFile] = field(default_factory=list)

    def finalize(self) -> MirrorResult:
        self.mirrored.sort()
        self.skipped.sort()
        self.failed.sort(key=lambda f: f.file_path)
        return self

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "mirrored": list(self.mirrored),
            "skipped": list(self.skipped),
            "failed": [f.to_dict() for f in self.failed],
        }


@dataclass(slots=True)
class CleanResult:
    """Outcome of cleaning one version.

    Attributes:
        version: Cleaned version.
        deleted: Orphaned files removed (or that would be, in dry-run).
        skipped: Orphaned files that were already gone.
        failed: Files that could not be removed.
        removed_directories: Empty directories removed afterwards.
    """

    version: str
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[FailedFile] = field(default_factory=list)
    removed_directories: list[str] = field(default_factory=list)

    def finalize(self) -> CleanResult:
        self.deleted.sort()
        self.skipped.sort()
        self.failed.sort(key=lambda f: f.file_path)
        return self

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "deleted": list(self.deleted),
            "skipped": list(self.skipped),
            "failed": [f.to_dict() for f in self.failed],
            "removedDirectories": list(self.removed_directories),
        }


RepairStatus = Literal["success", "failure"]


@dataclass(slots=True)
class RepairResult:
    """Outcome of repairing one version.

    Attributes:
        version: Repaired version.
        restored: Missing files that were mirrored back.
        removed: Orphaned files that were removed.
        skipped: Expected files that were already present.
        failed: Files that could not be restored or removed.
    """

    version: str
    restored: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[FailedFile] = field(default_factory=list)

    @property
    def status(self) -> RepairStatus:
        return "failure" if self.failed else "success"

    def finalize(self) -> RepairResult:
        self.restored.sort()
        self.removed.sort()
        self.skipped.sort()
        self.failed.sort(key=lambda f: (f.file_path, f.operation.value))
        return self

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "status": self.status,
            "restored": list(self.restored),
            "removed": list(self.removed),
            "skipped": list(self.skipped),
            "failed": [f.to_dict() for f in self.failed],
        }


@dataclass(frozen=True, slots=True)
class VersionComparison:
    """File-level differences between two versions.

    Attributes:
        from_version: Version compared from.
        to_version: Version compared to.
        added: Files only in ``to_version``.
        removed: Files only in ``from_version``.
        modified: Common files whose content hash differs.
        unchanged: Common files with equal content, or every common file when
            hashes were not compared.
        from_total: Number of files in ``from_version``.
        to_total: Number of files in ``to_version``.
    """

    from_version: str
    to_version: str
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
    from_total: int = 0
    to_total: int = 0

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the comparison.
        """
        return {
            "from": self.from_version,
            "to": self.to_version,
            "files": {
                "added": list(self.added),
                "removed": list(self.removed),
                "modified": list(self.modified),
                "unchanged": list(self.unchanged),
            },
            "counts": {
                "fromTotal": self.from_total,
                "toTotal": self.to_total,
                "added": len(self.added),
                "removed": len(self.removed),
                "modified": len(self.modified),
                "unchanged": len(self.unchanged),
            },
        }
