"""Glob pattern validation and matching.

User-supplied filter patterns are validated against a set of independent
limits before they are compiled, so that hostile patterns cannot blow up
matching cost. Matching supports the usual shell syntax plus ``**``,
brace groups and extglobs:

- ``*`` / ``?`` / ``[...]``: within a single path segment
- ``**``: any number of path segments
- ``{a,b}``: alternatives (nestable)
- ``@(a|b)``, ``?(a|b)``, ``+(a|b)``, ``*(a|b)``, ``!(a|b)``: extglobs

Matching is case-insensitive and includes dotfiles unless told otherwise.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

MAX_GLOB_LENGTH = 256
MAX_GLOB_SEGMENTS = 16
MAX_GLOB_BRACE_EXPANSIONS = 24
MAX_GLOB_STARS = 32
MAX_GLOB_QUESTIONS = 32
MAX_GLOB_EXTGLOB_DEPTH = 2

_EXTGLOB_CHARS = frozenset("!@+*?")
_CLOSERS = {"{": "}", "(": ")", "[": "]"}


@dataclass(frozen=True, slots=True)
class GlobLimits:
    """Upper bounds enforced by ``is_valid_glob_pattern``.

    Attributes:
        max_length: Maximum pattern length in characters.
        max_segments: Maximum number of ``/``-separated segments.
        max_brace_expansions: Maximum number of alternatives braces expand to.
        max_stars: Maximum number of ``*`` characters.
        max_questions: Maximum number of ``?`` characters.
        max_extglob_depth: Maximum nesting of extglob groups.
    """

    max_length: int = MAX_GLOB_LENGTH
    max_segments: int = MAX_GLOB_SEGMENTS
    max_brace_expansions: int = MAX_GLOB_BRACE_EXPANSIONS
    max_stars: int = MAX_GLOB_STARS
    max_questions: int = MAX_GLOB_QUESTIONS
    max_extglob_depth: int = MAX_GLOB_EXTGLOB_DEPTH


DEFAULT_GLOB_LIMITS = GlobLimits()


class GlobError(Exception):
    """Base exception for glob errors."""


class InvalidGlobPatternError(GlobError):
    """Raised when a pattern fails validation."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid glob pattern: {pattern!r}")


def is_valid_glob_pattern(pattern: object, limits: GlobLimits | None = None) -> bool:
    """Check a pattern against syntax rules and complexity limits.

    Args:
        pattern: Candidate pattern. Anything but a non-empty string is invalid.
        limits: Limits to enforce. Defaults to ``DEFAULT_GLOB_LIMITS``.

    Returns:
        True if the pattern is safe to compile.
    """
    limits = limits or DEFAULT_GLOB_LIMITS

    if not isinstance(pattern, str) or not pattern.strip():
        return False
    if "\0" in pattern:
        return False
    if len(pattern) > limits.max_length:
        return False
    if len(pattern.split("/")) > limits.max_segments:
        return False
    if pattern.count("*") > limits.max_stars:
        return False
    if pattern.count("?") > limits.max_questions:
        return False
    if not _is_balanced(pattern):
        return False
    if count_brace_expansions(pattern) > limits.max_brace_expansions:
        return False
    if extglob_depth(pattern) > limits.max_extglob_depth:
        return False

    try:
        _compile(pattern, True, True)
    except re.error:
        return False
    return True


def count_brace_expansions(pattern: str) -> int:
    """Count how many alternatives a pattern's brace groups expand to.

    Sequential groups multiply (``{a,b}{c,d}`` is 4) and nested groups
    multiply into the option that contains them.

    Args:
        pattern: Pattern with balanced braces.

    Returns:
        Number of expansions; 1 for a pattern without braces.
    """
    total = 1
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            close = _find_closing(pattern, i)
            body = pattern[i + 1 : close]
            total *= sum(count_brace_expansions(option) for option in _split_top_level(body, ","))
            i = close + 1
            continue
        i += 1
    return total


def extglob_depth(pattern: str) -> int:
    """Compute the deepest extglob nesting in a pattern.

    A negation ``!`` inside a group counts as one more level even when it
    is not followed by a parenthesis.

    Args:
        pattern: Pattern to inspect.

    Returns:
        Maximum nesting depth, 0 when the pattern has no extglobs.
    """
    stack: list[bool] = []
    depth = 0
    deepest = 0
    i = 0
    while i < len(pattern):
        char = pattern[i]
        nxt = pattern[i + 1] if i + 1 < len(pattern) else ""
        if char == "\\":
            i += 2
            continue
        if char in _EXTGLOB_CHARS and nxt == "(":
            depth += 1
            deepest = max(deepest, depth)
            stack.append(True)
            i += 2
            continue
        if char == "!" and depth > 0:
            deepest = max(deepest, depth + 1)
        elif char == "(":
            stack.append(False)
        elif char == ")" and stack and stack.pop():
            depth -= 1
        i += 1
    return deepest


def match_glob(pattern: str, path: str, *, nocase: bool = True, dot: bool = True) -> bool:
    """Match a path against a glob pattern.

    Args:
        pattern: Glob pattern.
        path: Slash-separated path to test.
        nocase: Match case-insensitively.
        dot: Let wildcards match names starting with a dot.

    Returns:
        True if the whole path matches.
    """
    return _compile(pattern, nocase, dot).fullmatch(path) is not None


def create_glob_matcher(
    pattern: str,
    *,
    nocase: bool = True,
    dot: bool = True,
) -> Callable[[str], bool]:
    """Compile a pattern into a reusable, stateless predicate.

    Args:
        pattern: Glob pattern.
        nocase: Match case-insensitively.
        dot: Let wildcards match names starting with a dot.

    Returns:
        Function taking a path and returning whether it matches.
    """
    regex = _compile(pattern, nocase, dot)

    def matcher(path: str) -> bool:
        return regex.fullmatch(path) is not None

    return matcher


@lru_cache(maxsize=512)
def _compile(pattern: str, nocase: bool, dot: bool) -> re.Pattern[str]:
    flags = re.IGNORECASE if nocase else 0
    return re.compile(_translate(pattern, dot, True), flags)


def _is_balanced(pattern: str) -> bool:
    stack: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char in "{(":
            stack.append(_CLOSERS[char])
        elif char in "})":
            if not stack or stack.pop() != char:
                return False
        i += 1
    return not stack


def _find_closing(pattern: str, start: int) -> int:
    """Index of the bracket closing the one at ``start``, or -1."""
    opener = pattern[start]
    closer = _CLOSERS[opener]
    depth = 0
    i = start
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _split_top_level(body: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            current.append(body[i : i + 2])
            i += 2
            continue
        if char in "{([":
            depth += 1
        elif char in "})]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append("".join(current))
    return parts


def _segment_wildcard(dot: bool, at_segment_start: bool) -> str:
    if dot or not at_segment_start:
        return "[^/]*"
    return "(?!\\.)[^/]*"


def _translate(pattern: str, dot: bool, at_segment_start: bool) -> str:
    """Translate a glob into a regular expression body."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    segment_start = at_segment_start

    while i < n:
        char = pattern[i]
        nxt = pattern[i + 1] if i + 1 < n else ""

        if char == "\\" and nxt:
            out.append(re.escape(nxt))
            i += 2
            segment_start = False
            continue

        if char in _EXTGLOB_CHARS and nxt == "(":
            close = _find_closing(pattern, i + 1)
            if close != -1:
                options = _split_top_level(pattern[i + 2 : close], "|")
                alternatives = "|".join(_translate(o, dot, segment_start) for o in options)
                if char == "!":
                    rest = _translate(pattern[close + 1 :], dot, False)
                    out.append(f"(?:(?!(?:{alternatives}){rest}$)[^/]*?){rest}")
                    return "".join(out)
                suffix = {"@": "", "?": "?", "+": "+", "*": "*"}[char]
                out.append(f"(?:{alternatives}){suffix}")
                i = close + 1
                segment_start = False
                continue

        if char == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            after = pattern[j] if j < n else ""
            if j - i >= 2 and segment_start and after in ("/", ""):
                segment = "[^/]*" if dot else "(?!\\.)[^/]+"
                if after == "/":
                    out.append(f"(?:{segment}/)*")
                    i = j + 1
                    segment_start = True
                else:
                    out.append(f"(?:{segment}(?:/{segment})*)?")
                    i = j
                continue
            out.append(_segment_wildcard(dot, segment_start))
            i = j
            segment_start = False
            continue

        if char == "?":
            out.append("[^/]" if dot or not segment_start else "(?!\\.)[^/]")
            i += 1
            segment_start = False
            continue

        if char == "[":
            end = pattern.find("]", i + 2)
            if end != -1:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = end + 1
                segment_start = False
                continue

        if char == "{":
            close = _find_closing(pattern, i)
            if close != -1:
                options = _split_top_level(pattern[i + 1 : close], ",")
                branches = [_translate(option, dot, segment_start) for option in options]
                out.append("(?:" + "|".join(branches) + ")")
                i = close + 1
                segment_start = False
                continue

        out.append(re.escape(char))
        segment_start = char == "/"
        i += 1

    return "".join(out)
