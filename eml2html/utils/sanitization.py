"""
Sanitization Utility Module
Makes message-supplied text safe to put in a log line.
"""

import re
import unicodedata

_ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: str, max_length: int = 255) -> str:
    """
    Sanitize text for safe logging to prevent Log Injection (CRLF) and terminal manipulation.

    Args:
        text: The input string to sanitize.
        max_length: Maximum allowed length for the log entry (truncates if longer).

    Returns:
        Sanitized string safe for logging.
    """
    if not text:
        return ""

    # Header values can be huge; nothing past this point survives truncation
    if len(text) > max_length * 4:
        text = text[:max_length * 4]

    text = unicodedata.normalize('NFKC', text)
    text = text.replace('\n', '\\n').replace('\r', '\\r')
    text = _ANSI_ESCAPE_PATTERN.sub('', text)

    # Remaining C0 controls, tab excepted
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text
