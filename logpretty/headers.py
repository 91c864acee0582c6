"""Minimal HTTP/1.x header-block parser.

Accepts a raw blob as written by Node's ``res._header`` (or a request
head) and returns a flat header map:

    HTTP/1.1 200 OK\\r\\n
    Content-Type: text/html\\r\\n
    Content-Length: 2048\\r\\n
    \\r\\n
    <body, ignored>

Returns None for anything that is not a complete header block.
"""

import logging
import re

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

_STATUS_LINE_RE = re.compile(r"^HTTP/\d\.\d \d{3}(?: .*)?$")

_REQUEST_LINE_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+ \S+ HTTP/\d\.\d$")

# RFC 7230 token characters
_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

_LINE_BREAK_RE = re.compile(r"\r?\n")

_HEAD_END_RE = re.compile(r"\r?\n\r?\n")


def _is_start_line(line: str) -> bool:
    return bool(_STATUS_LINE_RE.match(line) or _REQUEST_LINE_RE.match(line))


def _split_head(text: str) -> list[str] | None:
    """Return the start line and header lines, or None if the head never ends."""
    end = _HEAD_END_RE.search(text)
    if end is None:
        return None
    return _LINE_BREAK_RE.split(text[:end.start()])


def parse_header(raw: bytes | str) -> dict[str, str] | None:
    """Parse a raw header block into a lower-cased header map.

    Duplicate names are last-write-wins. Returns None when the block is
    truncated, lacks a status/request line, or contains a malformed
    header line.
    """
    if isinstance(raw, bytes):
        text = raw.decode("utf-8", errors="replace")
    elif isinstance(raw, str):
        text = raw
    else:
        return None

    lines = _split_head(text)
    if lines is None:
        logger.debug("Header blob has no complete head section")
        return None

    start, header_lines = lines[0], lines[1:]
    if not _is_start_line(start):
        logger.debug("Header blob has no valid start line: %r", start[:40])
        return None

    headers: dict[str, str] = {}
    last_name = None
    for line in header_lines:
        if line[:1] in (" ", "\t"):
            # obs-fold continuation
            if last_name is None:
                return None
            headers[last_name] = f"{headers[last_name]} {line.strip()}".strip()
            continue

        name, sep, value = line.partition(":")
        if not sep or not _HEADER_NAME_RE.match(name):
            logger.debug("Malformed header line: %r", line[:40])
            return None

        last_name = name.lower()
        headers[last_name] = value.strip()

    return headers
