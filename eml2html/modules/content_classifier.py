"""
Content Classifier
Parses Content-Type values and decides what a MIME part is

A part is one of four things: the plain-text body, the HTML body, a nested
multipart container, or an opaque attachment that needs a filename.
"""

import re
from dataclasses import dataclass
from email.message import Message
from enum import Enum
from typing import Dict, Tuple

from .errors import ConversionError, ErrorKind
from ..utils.sanitization import sanitize_for_logging


# RFC 2045 §5.2: no Content-Type means plain US-ASCII text
DEFAULT_CONTENT_TYPE = "text/plain"

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MEDIA_TYPE_PATTERN = re.compile(rf"{_TOKEN}(?:/{_TOKEN})?")
_PARAM_SEPARATOR_PATTERN = re.compile(r"[\s;]*")
# Unquoted values may carry '=' and '/', which real-world boundaries do
_PARAM_PATTERN = re.compile(
    rf'({_TOKEN})\s*=\s*("(?:[^"\\]|\\.)*"|[^\s;"]+)\s*(?:;|\Z)',
    re.DOTALL
)
_QUOTED_PAIR_PATTERN = re.compile(r"\\(.)", re.DOTALL)

FALLBACK_FILENAMES = {
    "text/plain": "attachment.txt",
    "text/html": "attachment.html",
}


class ContentKind(Enum):
    PLAIN_TEXT = "plain_text"
    HTML = "html"
    MULTIPART = "multipart"
    ATTACHMENT = "attachment"


@dataclass(frozen=True)
class Classification:
    """Outcome of classify(); boundary and filename are set for their kind only"""
    kind: ContentKind
    boundary: str = ""
    filename: str = ""


def parse_media_type(value: str) -> Tuple[str, Dict[str, str]]:
    """
    Parse a Content-Type value into a media type and its parameters

    Args:
        value: Header value, e.g. 'multipart/mixed; boundary="abc"'

    Returns:
        Tuple of (lower-cased media type, parameters keyed by lower-cased name)

    Raises:
        ConversionError: MEDIA_TYPE_PARSE on invalid syntax
    """
    head, _, rest = value.partition(";")
    media_type = head.strip().lower()
    if not media_type:
        raise _media_type_error("no media type", value)
    if not _MEDIA_TYPE_PATTERN.fullmatch(media_type):
        raise _media_type_error("invalid media type", value)

    params: Dict[str, str] = {}
    pos = 0
    while True:
        pos = _PARAM_SEPARATOR_PATTERN.match(rest, pos).end()
        if pos >= len(rest):
            break

        match = _PARAM_PATTERN.match(rest, pos)
        if match is None:
            raise _media_type_error("invalid media parameter", value)

        name, raw_value = match.group(1).lower(), match.group(2)
        if raw_value.startswith('"'):
            raw_value = _QUOTED_PAIR_PATTERN.sub(r"\1", raw_value[1:-1])
        if name in params:
            raise _media_type_error(f"duplicate parameter {name!r}", value)

        params[name] = raw_value
        pos = match.end()

    return media_type, params


def content_type_of(headers: Message) -> Tuple[str, Dict[str, str]]:
    """Parse the Content-Type of a header block, defaulting when it is absent."""
    value = headers.get("Content-Type")
    if value is None:
        value = DEFAULT_CONTENT_TYPE
    return parse_media_type(value)


def _media_type_error(reason: str, value: str) -> ConversionError:
    return ConversionError(
        ErrorKind.MEDIA_TYPE_PARSE,
        f"mime: {reason}: {sanitize_for_logging(value)!r}"
    )


def is_plain_text(media_type: str) -> bool:
    return media_type.startswith("text/plain")


def is_html(media_type: str) -> bool:
    return media_type.startswith("text/html")


def is_multipart(media_type: str) -> bool:
    return media_type.startswith("multipart/")


def filename_from_disposition(disposition: str) -> str:
    """
    Pull the filename out of a Content-Disposition value

    Only the shape ``<type>; filename="name"`` is understood: the second
    semicolon segment, right of its first '='. Anything else gives "".

    Example:
        >>> filename_from_disposition('attachment; filename="report.pdf"')
        'report.pdf'
    """
    segments = disposition.split(";")
    if len(segments) < 2:
        return ""

    pieces = segments[1].split("=")
    if len(pieces) < 2:
        return ""

    return pieces[1].strip('"')


def resolve_filename(media_type: str, disposition: str) -> str:
    """
    Filename for an attachment, falling back on a per-type default

    Raises:
        ConversionError: UNKNOWN_ATTACHMENT_TYPE when there is neither a
            filename nor a default for the media type
    """
    filename = filename_from_disposition(disposition)
    if filename:
        return filename

    if is_plain_text(media_type):
        return FALLBACK_FILENAMES["text/plain"]
    if is_html(media_type):
        return FALLBACK_FILENAMES["text/html"]

    raise ConversionError(
        ErrorKind.UNKNOWN_ATTACHMENT_TYPE,
        f"don't know how to generate filename for {sanitize_for_logging(media_type)}"
    )


def classify(media_type: str, params: Dict[str, str], disposition: str) -> Classification:
    """
    Decide how a part with this media type is handled

    Args:
        media_type: Lower-cased media type from parse_media_type()
        params: Its parameters (only 'boundary' is used)
        disposition: Raw Content-Disposition value, "" when absent

    Returns:
        Classification for the part

    Raises:
        ConversionError: UNKNOWN_ATTACHMENT_TYPE, see resolve_filename()
    """
    if is_plain_text(media_type):
        return Classification(ContentKind.PLAIN_TEXT)
    if is_html(media_type):
        return Classification(ContentKind.HTML)
    if is_multipart(media_type):
        return Classification(ContentKind.MULTIPART, boundary=params.get("boundary", ""))
    return Classification(
        ContentKind.ATTACHMENT,
        filename=resolve_filename(media_type, disposition)
    )
