"""Path safety resolution.

Every path handed to a filesystem bridge goes through ``resolve_safe_path``
before any backend sees it. The resolver is purely lexical: it never touches
the filesystem and never follows symlinks.

Resolution order:
1. Reject NUL bytes and control characters.
2. Decode percent-escapes (repeatedly) and re-check for illegal characters.
3. Normalize backslashes to forward slashes.
4. Treat empty input as the base root.
5. Accept absolute input already inside the base; otherwise fold
   absolute-looking prefixes (``//host``, drive letters, leading ``/``)
   into a path relative to the base root. Authority-looking segments such
   as ``@host`` or ``:8080`` carry no meaning here and stay ordinary
   segments below the root.
6. Resolve ``.`` and ``..`` segments, refusing to climb above the root.
"""

import posixpath
import re
from urllib.parse import unquote

from ucdstore.bridge.errors import (
    FailedToDecodePathError,
    IllegalCharacterInPathError,
    PathTraversalError,
)

MAX_DECODING_ITERATIONS = 10

CONTROL_CHARACTER_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:")

_MANUAL_ESCAPES = (
    (re.compile(r"%2e", re.IGNORECASE), "."),
    (re.compile(r"%2f", re.IGNORECASE), "/"),
    (re.compile(r"%5c", re.IGNORECASE), r"\\"),
)


def decode_path_safely(encoded_path: str) -> str:
    """Percent-decode a path until it stops changing.

    Args:
        encoded_path: Possibly (multiply) percent-encoded path.

    Returns:
        The fully decoded path.

    Raises:
        TypeError: If encoded_path is not a string.
        FailedToDecodePathError: If the value is still changing after
            MAX_DECODING_ITERATIONS rounds.
    """
    if not isinstance(encoded_path, str):
        msg = "Encoded path must be a string"
        raise TypeError(msg)

    decoded = encoded_path
    for _ in range(MAX_DECODING_ITERATIONS):
        previous = decoded
        try:
            decoded = unquote(decoded, errors="strict")
        except UnicodeDecodeError:
            # Malformed escapes are left for the manual pass below
            pass
        for pattern, replacement in _MANUAL_ESCAPES:
            decoded = pattern.sub(replacement, decoded)
        if decoded == previous:
            return decoded

    raise FailedToDecodePathError()


def is_within_base(resolved_path: str, base_path: str) -> bool:
    """Check whether resolved_path equals base_path or lies beneath it.

    Partial matches such as ``/root2`` against ``/root`` are rejected.

    Args:
        resolved_path: Path to check.
        base_path: Root the path must stay within.

    Returns:
        True if the path is inside the base.
    """
    if not isinstance(resolved_path, str) or not isinstance(base_path, str):
        return False
    if not resolved_path.strip() or not base_path.strip():
        return False

    resolved = _normalize_absolute(resolved_path.strip())
    base = _normalize_absolute(base_path.strip())

    base_with_sep = base if base.endswith("/") else base + "/"
    return resolved == base or resolved.startswith(base_with_sep)


def resolve_safe_path(base_path: str, input_path: str) -> str:
    """Resolve input_path against base_path without escaping it.

    Args:
        base_path: Root of the virtual filesystem.
        input_path: Untrusted path requested by a caller.

    Returns:
        Absolute, normalized path inside base_path.

    Raises:
        TypeError: If either argument is not a string.
        ValueError: If base_path is empty.
        IllegalCharacterInPathError: If the raw or decoded path contains a
            NUL byte or a control character.
        FailedToDecodePathError: If percent-decoding does not settle.
        PathTraversalError: If resolution climbs above the base root.
    """
    if not isinstance(base_path, str):
        msg = "Base path must be a string"
        raise TypeError(msg)
    if not isinstance(input_path, str):
        msg = "Input path must be a string"
        raise TypeError(msg)

    base_path = base_path.strip()
    if not base_path:
        msg = "Base path cannot be empty"
        raise ValueError(msg)

    raw_path = input_path.strip()
    _reject_illegal_characters(raw_path)
    decoded = decode_path_safely(raw_path)
    _reject_illegal_characters(decoded)

    base_root = _normalize_absolute(base_path)
    unix_path = decoded.replace("\\", "/")

    if not unix_path.strip():
        return base_root

    if unix_path.startswith("/"):
        candidate = _normalize_absolute(unix_path)
        if is_within_base(candidate, base_root):
            return candidate

    relative = _fold_absolute_prefix(unix_path)

    segments: list[str] = []
    for segment in relative.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not segments:
                raise PathTraversalError(base_root, decoded)
            segments.pop()
            continue
        segments.append(segment)

    resolved = posixpath.join(base_root, *segments) if segments else base_root

    if not is_within_base(resolved, base_root):
        raise PathTraversalError(base_root, resolved)

    return resolved


def _reject_illegal_characters(path: str) -> None:
    if "\0" in path:
        raise IllegalCharacterInPathError("\0")
    match = CONTROL_CHARACTER_RE.search(path)
    if match is not None:
        raise IllegalCharacterInPathError(match.group(0))


def _fold_absolute_prefix(unix_path: str) -> str:
    """Strip drive letters and leading slashes so the path is root-relative."""
    path = unix_path
    if WINDOWS_DRIVE_RE.match(path):
        path = path[2:]
    return path.lstrip("/")


def _normalize_absolute(path: str) -> str:
    path = path.replace("\\", "/")
    if WINDOWS_DRIVE_RE.match(path):
        path = path[2:]
    # normpath keeps a leading "//", so collapse it first
    normalized = posixpath.normpath("/" + path.lstrip("/"))
    return normalized
