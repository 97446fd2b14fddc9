"""
Message Record Model
Contains the dataclasses produced by a conversion
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# Fixed name of the synthetic HTML body. Not deduplicated against real
# attachment names.
HTML_BODY_FILENAME = "email-content.html"


@dataclass(frozen=True)
class Attachment:
    """One extracted body part: decoded bytes plus the name it is stored under"""
    data: bytes
    filename: str


@dataclass
class MessageRecord:
    """
    Container for a converted email

    Built once per message during a single decoding pass and not touched
    afterwards. ``text`` holds the first text/plain body with every newline
    rendered as ``<br>\\n``; ``html`` holds the first text/html body.
    """
    date: str = ""
    from_: str = ""
    to: str = ""
    subject: str = ""
    headers: Dict[str, List[str]] = field(default_factory=dict)
    html: Optional[Attachment] = None
    text: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)
