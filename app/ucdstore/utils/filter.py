"""Include/exclude path filtering built on glob patterns.

Patterns without a ``!`` prefix include paths, patterns with one exclude
them. When only exclusions are given every other path is included. Later
patterns override earlier ones, and the default exclusions are appended
last so they always win unless disabled.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from ucdstore.bridge.base import DirectoryEntry, FSEntry
from ucdstore.utils.glob import (
    GlobLimits,
    InvalidGlobPatternError,
    create_glob_matcher,
    is_valid_glob_pattern,
)

DEFAULT_EXCLUSIONS: tuple[str, ...] = (
    "**/*.zip",
    "**/*.pdf",
    "**/.DS_Store",
)

# Ready-made filters for common UCD clean-ups
EXCLUDE_TEST_FILES = "!**/*Test*"
EXCLUDE_README_FILES = "!**/ReadMe.txt"
EXCLUDE_HTML_FILES = "!**/*.html"


@dataclass(slots=True)
class PathFilter:
    """Callable include/exclude filter.

    Attributes:
        patterns: Active patterns in evaluation order, default exclusions included.
        limits: Limits every pattern is validated against.
    """

    patterns: list[str] = field(default_factory=list)
    limits: GlobLimits | None = None

    def __post_init__(self) -> None:
        for pattern in self.patterns:
            _validate(pattern, self.limits)

    def __call__(self, path: str, extra_filters: Iterable[str] | None = None) -> bool:
        """Decide whether a path passes the filter.

        Args:
            path: Slash-separated relative path.
            extra_filters: Additional patterns evaluated after the stored ones.

        Returns:
            True if the path is included.

        Raises:
            InvalidGlobPatternError: If an extra filter is invalid.
        """
        extra = list(extra_filters or [])
        for pattern in extra:
            _validate(pattern, self.limits)
        return matches_patterns(path, [*self.patterns, *extra])

    def extend(self, additional: Iterable[str]) -> None:
        """Append patterns, validating each one first."""
        additional = list(additional)
        for pattern in additional:
            _validate(pattern, self.limits)
        self.patterns.extend(additional)

    def filter_tree(
        self,
        entries: Iterable[FSEntry],
        extra_filters: Iterable[str] | None = None,
    ) -> list[FSEntry]:
        """Apply the filter to a listing, dropping directories left empty.

        Args:
            entries: Listing with paths relative to the same root.
            extra_filters: Additional patterns for this call only.

        Returns:
            New listing containing only included files.
        """
        extra = list(extra_filters or [])
        result: list[FSEntry] = []
        for entry in entries:
            if isinstance(entry, DirectoryEntry):
                children = self.filter_tree(entry.children, extra)
                if children:
                    result.append(
                        DirectoryEntry(name=entry.name, path=entry.path, children=tuple(children))
                    )
            elif self(entry.path, extra):
                result.append(entry)
        return result


def create_path_filter(
    filters: Iterable[str] | None = None,
    *,
    disable_default_exclusions: bool = False,
    limits: GlobLimits | None = None,
) -> PathFilter:
    """Create a PathFilter.

    Args:
        filters: Include patterns and ``!``-prefixed exclude patterns.
        disable_default_exclusions: Leave out ``DEFAULT_EXCLUSIONS``.
        limits: Limits every pattern is validated against.

    Returns:
        Configured PathFilter.

    Raises:
        InvalidGlobPatternError: If any pattern is invalid.
    """
    patterns = list(filters or [])
    if not disable_default_exclusions:
        patterns.extend(f"!{pattern}" for pattern in DEFAULT_EXCLUSIONS)
    return PathFilter(patterns=patterns, limits=limits)


def matches_patterns(path: str, patterns: list[str]) -> bool:
    """Evaluate include/exclude patterns against a path, last match wins."""
    if not patterns:
        return True

    has_inclusions = any(not pattern.startswith("!") for pattern in patterns)
    result = not has_inclusions

    for pattern in patterns:
        negated = pattern.startswith("!")
        clean = pattern[1:] if negated else pattern
        if create_glob_matcher(clean)(path):
            result = not negated

    return result


def _validate(pattern: str, limits: GlobLimits | None) -> None:
    clean = pattern[1:] if pattern.startswith("!") else pattern
    if not is_valid_glob_pattern(clean, limits):
        raise InvalidGlobPatternError(pattern)
