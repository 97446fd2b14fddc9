"""
Conversion Errors
A closed set of failure kinds raised by the decoding core

Callers branch on ``error.kind`` rather than on exception subclasses, so a
new failure mode means a new ErrorKind member, never a new class.
"""

from enum import Enum


class ErrorKind(Enum):
    """Every way a conversion can fail. All of them are fatal."""
    HEADER_PARSE = "header_parse"
    MEDIA_TYPE_PARSE = "media_type_parse"
    UNSUPPORTED_CHARSET = "unsupported_charset"
    TRANSFER_DECODE = "transfer_decode"
    UNKNOWN_ATTACHMENT_TYPE = "unknown_attachment_type"
    IO = "io"
    MULTIPART_FORMAT = "multipart_format"
    NESTING_TOO_DEEP = "nesting_too_deep"


class ConversionError(Exception):
    """
    Terminal error for a single message conversion

    Args:
        kind: Which failure class this is
        message: Human readable description (already safe to print)
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ConversionError({self.kind.name}, {self.message!r})"
