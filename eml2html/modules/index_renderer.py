"""
Index Renderer
Renders a MessageRecord into the email.html overview page
"""

import html
from string import Template
from typing import List, Optional
from urllib.parse import quote

from .message_record import MessageRecord


LINE_BREAK = "<br>\n"

_PAGE = Template("""<html>
<head>
	<meta charset="utf-8">
	<script>
		function toggleHeaders() {
			var e = document.getElementById("headers-all")
			e.style.display = (e.style.display == 'none') ? 'block' : 'none';
		}
	</script>
</head>
<body>
	<div>
		Date: $date<br>
		From: $from_<br>
		To: $to<br>
		Subject: $subject<br>
	</div>

	<a onclick="toggleHeaders()" href="#">Toggle all headers</a><br><br>

	<div id="headers-all" style="display: none">
$headers	</div>
$html_section$text_section$attachments_section</body>
</html>
""")

_HEADER_LINE = Template("\t\t$name: $value<br>\n")

_HTML_SECTION = Template("""
	<div>
	<hr>
	<div class="html-content"><iframe width="1280" height="720" src="$src"></iframe></div>
	</div>
""")

_TEXT_SECTION = Template("""
	<div>
	<hr>
	<div class="text-content">$text</div>
	</div>
""")

_ATTACHMENTS_SECTION = Template("""
	<div>
	<hr>
	Attachments:<br><br>
$links	</div>
""")

_ATTACHMENT_LINK = Template('\t<a href="$href">$name</a><br>\n')


def _escape(value: str) -> str:
    return html.escape(value, quote=True)


def _href(filename: str) -> str:
    return _escape(quote(filename))


def render_text(text: str) -> str:
    """Escape a text body, keeping the <br> line breaks the walker inserted."""
    return LINE_BREAK.join(html.escape(line, quote=False) for line in text.split(LINE_BREAK))


def render_index(record: MessageRecord, attachment_names: Optional[List[str]] = None) -> str:
    """
    Render the overview page for a converted message

    Args:
        record: The converted message
        attachment_names: Names the attachments were stored under, in
            record order. Defaults to their own filenames.

    Returns:
        HTML document as a string
    """
    if attachment_names is None:
        attachment_names = [attachment.filename for attachment in record.attachments]

    headers = "".join(
        _HEADER_LINE.substitute(name=_escape(name), value=_escape(value))
        for name in sorted(record.headers)
        for value in record.headers[name]
    )

    html_section = ""
    if record.html is not None:
        html_section = _HTML_SECTION.substitute(src=_href(record.html.filename))

    text_section = ""
    if record.text:
        text_section = _TEXT_SECTION.substitute(text=render_text(record.text))

    attachments_section = ""
    if attachment_names:
        links = "".join(
            _ATTACHMENT_LINK.substitute(href=_href(name), name=_escape(name))
            for name in attachment_names
        )
        attachments_section = _ATTACHMENTS_SECTION.substitute(links=links)

    return _PAGE.substitute(
        date=_escape(record.date),
        from_=_escape(record.from_),
        to=_escape(record.to),
        subject=_escape(record.subject),
        headers=headers,
        html_section=html_section,
        text_section=text_section,
        attachments_section=attachments_section,
    )
