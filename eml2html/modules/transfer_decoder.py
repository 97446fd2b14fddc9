"""
Transfer Decoder
Reverses the Content-Transfer-Encoding of a part's payload

Quoted-printable is undone on the read path of every part, before anything
looks at the content. Base64 is undone only for parts that end up as
attachments; a text/plain or text/html body marked base64 is kept encoded.
"""

import base64
import binascii
import quopri
import re
from typing import Optional

from .errors import ConversionError, ErrorKind


QUOTED_PRINTABLE = "quoted-printable"
BASE64 = "base64"

_LINE_BREAK_PATTERN = re.compile(rb"[\r\n]")


def normalize_encoding(value: Optional[str]) -> str:
    """Lower-case and strip a Content-Transfer-Encoding value ('' when absent)."""
    return (value or "").strip().lower()


class TransferDecoder:
    """Decodes quoted-printable and base64 payloads; anything else is identity"""

    def decode(self, encoding: Optional[str], body: bytes) -> bytes:
        """
        Reverse ``encoding`` on ``body``

        Raises:
            ConversionError: TRANSFER_DECODE on invalid base64
        """
        encoding = normalize_encoding(encoding)
        if encoding == QUOTED_PRINTABLE:
            return self._decode_quoted_printable(body)
        if encoding == BASE64:
            return self._decode_base64(body)
        return body

    def unwrap(self, encoding: Optional[str], raw: bytes) -> bytes:
        """Read-path decoding: only quoted-printable is reversed."""
        if normalize_encoding(encoding) == QUOTED_PRINTABLE:
            return self._decode_quoted_printable(raw)
        return raw

    def decode_attachment(self, encoding: Optional[str], data: bytes) -> bytes:
        """Attachment-path decoding: only base64 is reversed."""
        if normalize_encoding(encoding) == BASE64:
            return self._decode_base64(data)
        return data

    @staticmethod
    def _decode_quoted_printable(body: bytes) -> bytes:
        return quopri.decodestring(body)

    @staticmethod
    def _decode_base64(data: bytes) -> bytes:
        # Line breaks are transport framing; every other stray byte is an error
        try:
            return base64.b64decode(_LINE_BREAK_PATTERN.sub(b"", data), validate=True)
        except binascii.Error as e:
            raise ConversionError(
                ErrorKind.TRANSFER_DECODE,
                f"illegal base64 data in attachment: {e}"
            ) from e
