"""
Email Assembler
Turns one raw message into a MessageRecord

MAINTENANCE WISDOM: This module does no I/O beyond reading the input stream
it is handed. Writing the result and rendering it live in result_writer and
index_renderer, so the decoding core can be tested on byte strings alone.
"""

import logging
from email.message import Message
from typing import BinaryIO, Dict, List, Optional

from .content_classifier import content_type_of, is_multipart
from .errors import ConversionError, ErrorKind
from .header_block import canonical_header_key, parse_header_block
from .header_decoder import CharsetPolicy, HeaderDecoder
from .message_record import MessageRecord
from .multipart_walker import MultipartWalker
from ..utils.config import DecoderConfig


class EmailAssembler:
    """Orchestrates header decoding and body walking for one message"""

    def __init__(
        self,
        header_decoder: Optional[HeaderDecoder] = None,
        walker: Optional[MultipartWalker] = None
    ):
        self.header_decoder = header_decoder or HeaderDecoder()
        self.walker = walker or MultipartWalker()
        self.logger = logging.getLogger("EmailAssembler")

    @classmethod
    def from_config(cls, config: DecoderConfig) -> "EmailAssembler":
        """Build an assembler with the charset policy and depth limit from config."""
        policy = CharsetPolicy(config.header_charsets or None)
        return cls(
            header_decoder=HeaderDecoder(policy),
            walker=MultipartWalker(max_depth=config.max_multipart_depth)
        )

    def parse_stream(self, stream: BinaryIO) -> MessageRecord:
        """
        Read a whole message from a binary stream and assemble it

        Raises:
            ConversionError: IO if the stream cannot be read, otherwise
                whatever parse_bytes() raises
        """
        try:
            raw = stream.read()
        except OSError as e:
            raise ConversionError(ErrorKind.IO, f"could not read message: {e}") from e
        return self.parse_bytes(raw)

    def parse_bytes(self, raw: bytes) -> MessageRecord:
        """
        Assemble a message held in memory

        Args:
            raw: Header block, blank line, body

        Returns:
            The fully populated MessageRecord
        """
        headers, body = parse_header_block(self._strip_envelope_line(raw))
        media_type, params = content_type_of(headers)
        self.logger.debug("Top-level media type %s, %d body bytes", media_type, len(body))
        return self.assemble(headers, media_type, params, body)

    def assemble(
        self,
        headers: Message,
        top_media_type: str,
        top_params: Dict[str, str],
        body: bytes
    ) -> MessageRecord:
        """
        Build the record from parsed top-level headers and the raw body

        Date is copied as is; From, To and Subject and then every header value
        go through the HeaderDecoder, and an unsupported charset anywhere
        aborts the conversion.
        """
        from_ = self.header_decoder.decode_strict(headers.get("From", ""))
        to = self.header_decoder.decode_strict(headers.get("To", ""))
        subject = self.header_decoder.decode_strict(headers.get("Subject", ""))

        record = MessageRecord(
            date=headers.get("Date", ""),
            from_=from_,
            to=to,
            subject=subject,
            headers=self._decode_headers(headers),
        )

        if is_multipart(top_media_type):
            self.walker.walk(record, top_params.get("boundary", ""), body)
        else:
            self.walker.add_content(record, headers, body)

        return record

    def _decode_headers(self, headers: Message) -> Dict[str, List[str]]:
        """Decode every header value, grouping repeats under one canonical name."""
        decoded: Dict[str, List[str]] = {}
        for name, value in headers.items():
            key = canonical_header_key(name)
            decoded.setdefault(key, []).append(self.header_decoder.decode_strict(value))
        return decoded

    @staticmethod
    def _strip_envelope_line(raw: bytes) -> bytes:
        """Drop a leading mbox 'From ' envelope line, if any."""
        if not raw.startswith(b"From "):
            return raw
        newline = raw.find(b"\n")
        return b"" if newline == -1 else raw[newline + 1:]
