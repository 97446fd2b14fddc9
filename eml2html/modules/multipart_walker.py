"""
Multipart Walker
Recursive descent over a multipart body, filling in a MessageRecord

PATTERN RECOGNITION: Each part goes through the same pipeline whether it
sits at the top of the message or five containers deep: parse its headers,
undo quoted-printable, classify it, then either keep it as a body, recurse
into it, or store it as an attachment. Ordering falls out of the traversal:
depth-first, document order.
"""

import logging
import re
from email.message import Message
from typing import Iterator, Optional

from .content_classifier import ContentKind, classify, content_type_of
from .errors import ConversionError, ErrorKind
from .header_block import parse_header_block
from .message_record import HTML_BODY_FILENAME, Attachment, MessageRecord
from .transfer_decoder import TransferDecoder, normalize_encoding
from ..utils.sanitization import sanitize_for_logging
from ..utils.security_validators import DEFAULT_MAX_MULTIPART_DEPTH


def iter_parts(body: bytes, boundary: str) -> Iterator[bytes]:
    """
    Split a multipart body on its boundary

    The preamble before the first delimiter and the epilogue after the
    closing ``--boundary--`` are dropped. The line break in front of a
    delimiter belongs to the delimiter, not to the part.

    Args:
        body: Raw multipart body
        boundary: Boundary parameter of the container's Content-Type

    Yields:
        Raw bytes of each part (header block, blank line, payload)

    Raises:
        ConversionError: MULTIPART_FORMAT when the boundary is empty, never
            appears, or the closing delimiter is missing
    """
    if not boundary:
        raise ConversionError(ErrorKind.MULTIPART_FORMAT,
                              "multipart body declares no boundary")

    delimiter = re.compile(
        rb"(?:\A|\r?\n)--" + re.escape(boundary.encode("utf-8"))
        + rb"(--)?[ \t]*(?:\r?\n|\Z)"
    )
    safe_boundary = sanitize_for_logging(boundary, max_length=80)

    previous = None
    for match in delimiter.finditer(body):
        if previous is not None:
            yield body[previous.end():match.start()]
        if match.group(1):
            return
        previous = match

    if previous is None:
        raise ConversionError(
            ErrorKind.MULTIPART_FORMAT,
            f"multipart: no delimiter for boundary {safe_boundary!r}"
        )
    raise ConversionError(
        ErrorKind.MULTIPART_FORMAT,
        f"multipart: body ended before closing delimiter for boundary {safe_boundary!r}"
    )


class MultipartWalker:
    """
    Walks a (possibly nested) multipart body into a MessageRecord

    Only the first text/plain and the first text/html part anywhere in the
    tree become bodies; later ones are dropped, not turned into attachments.
    """

    def __init__(
        self,
        transfer_decoder: Optional[TransferDecoder] = None,
        max_depth: int = DEFAULT_MAX_MULTIPART_DEPTH
    ):
        """
        Args:
            transfer_decoder: Decoder for part payloads
            max_depth: Most multipart containers allowed on one path,
                counting the outermost one
        """
        self.transfer_decoder = transfer_decoder or TransferDecoder()
        self.max_depth = max_depth
        self.logger = logging.getLogger("MultipartWalker")

    def walk(self, record: MessageRecord, boundary: str, body: bytes, depth: int = 1) -> None:
        """
        Add every part of a multipart body to ``record``

        Raises:
            ConversionError: the first failure anywhere below this container
        """
        if depth > self.max_depth:
            raise ConversionError(
                ErrorKind.NESTING_TOO_DEEP,
                f"multipart nesting exceeds {self.max_depth} levels"
            )

        for index, raw_part in enumerate(iter_parts(body, boundary)):
            headers, payload = parse_header_block(raw_part)
            self.logger.debug("Depth %d, part %d: %d bytes", depth, index, len(payload))
            self.add_content(record, headers, payload, depth)

    def add_content(
        self,
        record: MessageRecord,
        headers: Message,
        body: bytes,
        depth: int = 0
    ) -> None:
        """
        Run one part through decode, classify and dispatch

        Also used for a single-part message, with the message headers.
        """
        encoding = normalize_encoding(headers.get("Content-Transfer-Encoding"))
        data = self.transfer_decoder.unwrap(encoding, body)

        media_type, params = content_type_of(headers)
        classification = classify(media_type, params, headers.get("Content-Disposition", ""))

        if classification.kind is ContentKind.PLAIN_TEXT:
            if record.text:
                self.logger.debug("Dropping additional %s part", media_type)
                return
            text = self._decode_bytes(data, params.get("charset"))
            record.text = text.replace("\n", "<br>\n")

        elif classification.kind is ContentKind.HTML:
            if record.html is not None:
                self.logger.debug("Dropping additional %s part", media_type)
                return
            record.html = Attachment(data=data, filename=HTML_BODY_FILENAME)

        elif classification.kind is ContentKind.MULTIPART:
            self.walk(record, classification.boundary, data, depth + 1)

        else:
            payload = self.transfer_decoder.decode_attachment(encoding, data)
            record.attachments.append(
                Attachment(data=payload, filename=classification.filename)
            )
            self.logger.debug(
                "Attachment %s (%s, %d bytes)",
                sanitize_for_logging(classification.filename),
                media_type,
                len(payload)
            )

    @staticmethod
    def _decode_bytes(data: bytes, charset: Optional[str]) -> str:
        """
        Decode bytes to string with charset fallback

        Malformed bytes become U+FFFD rather than failing the message, and an
        unknown charset falls back to UTF-8.
        """
        encoding = charset or "utf-8"
        try:
            return data.decode(encoding, errors="replace")
        except (LookupError, UnicodeError):
            # Unknown charset, or a codec such as idna that refuses "replace"
            return data.decode("utf-8", errors="replace")
