"""
Security Validators Module
Centralizes limits and filename hardening for message conversion

SECURITY STORY: The decoding core trusts nothing about message structure
but keeps attachment names verbatim. These helpers are where the hostile
parts get bounded:
- DEFAULT_MAX_MULTIPART_DEPTH: Bounds recursion into nested multiparts
- sanitize_filename: Keeps attachment names from escaping the output directory
"""

import re

# Limits recursion on adversarial nesting (CWE-674: Uncontrolled Recursion)
DEFAULT_MAX_MULTIPART_DEPTH = 100
# Deeper limits would hit the interpreter recursion limit before NESTING_TOO_DEEP
MAX_MULTIPART_DEPTH_CEILING = 200

# Filename sanitization patterns to prevent path traversal (CWE-22)
# Whitelist approach - only allow safe characters
FILENAME_SANITIZE_PATTERN = re.compile(r"[^\w\s\-_\.]")
FILENAME_COLLAPSE_DOTS_PATTERN = re.compile(r"\.{2,}")

# Windows reserved filenames that cannot be used regardless of extension
WINDOWS_RESERVED_NAMES = {
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9"
}

UNNAMED_ATTACHMENT = "unnamed_attachment"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal attacks (CWE-22)

    Only alphanumerics, whitespace, hyphens, underscores and single dots
    survive, and only the last path component is kept.

    Args:
        filename: Attachment filename as resolved from the message

    Returns:
        Filename safe to join onto the output directory

    Example:
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("email-content.html")
        'email-content.html'
    """
    if not filename:
        return UNNAMED_ATTACHMENT

    # Keep the last path component only
    filename = filename.split("/")[-1].split("\\")[-1]

    sanitized = FILENAME_SANITIZE_PATTERN.sub("", filename)
    sanitized = FILENAME_COLLAPSE_DOTS_PATTERN.sub(".", sanitized)
    sanitized = sanitized.strip(". ")

    if not sanitized:
        return UNNAMED_ATTACHMENT

    # Reserved regardless of extension (CON.txt is still CON)
    base_name = sanitized.split('.')[0].strip().upper()
    if base_name in WINDOWS_RESERVED_NAMES:
        sanitized = "_" + sanitized

    # 255 is the usual filesystem limit
    return sanitized[:255]
