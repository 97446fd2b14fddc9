"""
Header Decoder
Decodes RFC 2047 encoded words in header values

Two failure classes are kept apart on purpose:

- an encoded word naming a charset we cannot decode is reported back to the
  caller, which treats it as fatal;
- a malformed encoded word is left as it was, since broken encoders are
  common and the rest of the header is still readable.
"""

import codecs
import logging
from email.errors import HeaderParseError
from email.header import decode_header
from typing import Iterable, Optional, Tuple

from .errors import ConversionError, ErrorKind
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)


class CharsetPolicy:
    """
    Decides which charsets the HeaderDecoder may decode

    Args:
        allowed: Charset names to accept. None accepts every text encoding
            Python ships a codec for. us-ascii is always accepted.
    """

    def __init__(self, allowed: Optional[Iterable[str]] = None):
        self.allowed = None
        if allowed is not None:
            self.allowed = {"ascii"}
            for charset in allowed:
                charset = charset.strip()
                if charset:
                    self.allowed.add(self._codec_name(charset) or charset.lower())

    @staticmethod
    def _codec_name(charset: str) -> Optional[str]:
        try:
            name = codecs.lookup(charset).name
            # Rejects bytes-to-bytes codecs such as base64 or rot13
            b"".decode(name)
        except LookupError:
            return None
        return name

    def supports(self, charset: str) -> bool:
        name = self._codec_name(charset)
        if name is None:
            return False
        return self.allowed is None or name in self.allowed


class HeaderDecoder:
    """Applies RFC 2047 decoding to header values under a CharsetPolicy"""

    def __init__(self, charset_policy: Optional[CharsetPolicy] = None):
        self.charset_policy = charset_policy or CharsetPolicy()

    def decode(self, raw: str) -> Tuple[str, Optional[ConversionError]]:
        """
        Decode every encoded word in ``raw``

        Args:
            raw: Header value as it appeared in the message (unfolded)

        Returns:
            Tuple of (text, error). On success error is None. On an
            unsupported charset, text is ``raw`` unchanged and error has kind
            UNSUPPORTED_CHARSET. Malformed encoded words give ``raw`` and None.
        """
        if not raw or "=?" not in raw:
            return raw, None

        try:
            chunks = decode_header(raw)
        except HeaderParseError as e:
            logger.debug("Leaving malformed encoded word as is (%s): %s",
                         e, sanitize_for_logging(raw))
            return raw, None

        normalized = []
        for chunk, charset in chunks:
            if charset is not None:
                # RFC 2231 language suffix, e.g. "utf-8*en"
                charset = charset.split("*", 1)[0]
                if not self.charset_policy.supports(charset):
                    return raw, self._unsupported(charset)
            normalized.append((chunk, charset))

        # decode_header keeps the whitespace around unencoded spans and drops
        # it between adjacent encoded words, so the pieces join with ""
        pieces = []
        for chunk, charset in normalized:
            if isinstance(chunk, str):
                pieces.append(chunk)
            elif charset is None:
                # Unencoded spans come back as raw-unicode-escape bytes
                pieces.append(chunk.decode("raw-unicode-escape"))
            else:
                try:
                    pieces.append(chunk.decode(charset))
                except UnicodeError as e:
                    logger.debug("Leaving undecodable header as is (%s): %s",
                                 e, sanitize_for_logging(raw))
                    return raw, None
        return "".join(pieces), None

    def decode_strict(self, raw: str) -> str:
        """Like decode(), but raises the unsupported-charset error."""
        text, error = self.decode(raw)
        if error is not None:
            raise error
        return text

    @staticmethod
    def _unsupported(charset: str) -> ConversionError:
        return ConversionError(
            ErrorKind.UNSUPPORTED_CHARSET,
            f"charset not supported: {sanitize_for_logging(charset, max_length=64)}"
        )
