"""
Header Block Parser
Splits a raw message or MIME part into its header block and body bytes

The header block is turned into an ``email.message.Message`` so the rest of
the pipeline gets case-insensitive lookups and ordered ``items()`` the same
way it would from ``email.message_from_bytes``. Unlike the stdlib feed parser,
a malformed header line is an error here, not a silently recorded defect.
"""

import re
from email.message import Message
from email.policy import compat32
from typing import Iterator, List, Optional, Tuple

from .errors import ConversionError, ErrorKind
from ..utils.sanitization import sanitize_for_logging


_HEADER_END_PATTERN = re.compile(rb"\r?\n\r?\n")
_LINE_BREAK_PATTERN = re.compile(rb"\r?\n")
# RFC 5322 field-name: printable ASCII except colon
_FIELD_PATTERN = re.compile(r"^([!-9;-~]+)[ \t]*:(.*)$")


def parse_header_block(raw: bytes) -> Tuple[Message, bytes]:
    """
    Parse the header block at the start of ``raw``

    Args:
        raw: A message or a MIME part, headers first

    Returns:
        Tuple of (headers, body). ``body`` is everything after the first
        empty line, byte for byte.

    Raises:
        ConversionError: HEADER_PARSE if a header line is malformed
    """
    if raw.startswith(b"\r\n"):
        return Message(policy=compat32), raw[2:]
    if raw.startswith(b"\n"):
        return Message(policy=compat32), raw[1:]

    end = _HEADER_END_PATTERN.search(raw)
    if end is None:
        # No empty line: the whole block is headers
        header_bytes, body = raw, b""
    else:
        header_bytes, body = raw[:end.start()], raw[end.end():]

    headers = Message(policy=compat32)
    for name, value in _iter_fields(header_bytes):
        headers[name] = value
    return headers, body


def _iter_fields(header_bytes: bytes) -> Iterator[Tuple[str, str]]:
    """Yield unfolded (name, value) pairs in block order."""
    name: Optional[str] = None
    chunks: List[str] = []

    for line_no, raw_line in enumerate(_LINE_BREAK_PATTERN.split(header_bytes), start=1):
        line = raw_line.decode("utf-8", errors="replace")
        if not line:
            continue

        if line[0] in " \t":
            if name is None:
                raise ConversionError(
                    ErrorKind.HEADER_PARSE,
                    f"header block starts with a continuation line: "
                    f"{sanitize_for_logging(line)!r}"
                )
            chunks.append(line.strip())
            continue

        match = _FIELD_PATTERN.match(line)
        if match is None:
            raise ConversionError(
                ErrorKind.HEADER_PARSE,
                f"malformed header line {line_no}: {sanitize_for_logging(line)!r}"
            )

        if name is not None:
            yield name, _unfold(chunks)
        name, chunks = match.group(1), [match.group(2).strip()]

    if name is not None:
        yield name, _unfold(chunks)


def _unfold(chunks: List[str]) -> str:
    return " ".join(chunk for chunk in chunks if chunk)


def canonical_header_key(name: str) -> str:
    """
    Return the canonical MIME form of a header name

    Example:
        >>> canonical_header_key("content-TYPE")
        'Content-Type'
    """
    return "-".join(word.capitalize() for word in name.split("-"))
