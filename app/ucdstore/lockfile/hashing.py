"""Content hashing for snapshot records."""

import hashlib
import re

HASH_PREFIX = "sha256:"

# Lines identifying a UCD file header: file name with version, date, copyright
_HEADER_LINE_RES = (
    re.compile(r"^#\s*[\w.-]+-\d+\.\d+\.\d+(?:d\d+)?\.txt\s*$"),
    re.compile(r"^#\s*Date:", re.IGNORECASE),
    re.compile(r"^#\s*(?:©|\(c\)|Copyright)", re.IGNORECASE),
    re.compile(r"^#.*Unicode®?,\s*Inc\.", re.IGNORECASE),
)


def _to_bytes(content: str | bytes) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


def compute_file_hash(content: str | bytes) -> str:
    """Hash raw file content.

    Text is UTF-8 encoded first, so text and the equivalent bytes hash the same.

    Args:
        content: File content.

    Returns:
        Digest in the form ``sha256:<64 lowercase hex>``.
    """
    return HASH_PREFIX + hashlib.sha256(_to_bytes(content)).hexdigest()


def strip_unicode_header(content: str) -> str:
    """Remove the leading UCD header block from file content.

    The header is the run of lines at the top naming the file version, its
    date and copyright, followed by blank lines. Content that does not
    start with such a line is returned unchanged.

    Args:
        content: File content.

    Returns:
        Content without the header block.
    """
    lines = content.split("\n")
    index = 0
    found_header = False

    while index < len(lines):
        line = lines[index].strip()
        if any(pattern.match(line) for pattern in _HEADER_LINE_RES):
            found_header = True
        elif not (line == "" and found_header):
            break
        index += 1

    if not found_header:
        return content
    return "\n".join(lines[index:])


def compute_content_hash(content: str | bytes) -> str:
    """Hash file content with the UCD header stripped.

    A new release date in the header leaves this hash unchanged, which makes
    it suitable for comparing data across releases.

    Args:
        content: File content.

    Returns:
        Digest in the form ``sha256:<64 lowercase hex>``.
    """
    text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    return compute_file_hash(strip_unicode_header(text))


def content_size(content: str | bytes) -> int:
    """Size of content in bytes once encoded."""
    return len(_to_bytes(content))
