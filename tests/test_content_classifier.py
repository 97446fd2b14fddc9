"""
Tests for media type parsing, classification and filename resolution
"""

import pytest

from eml2html.modules.content_classifier import (
    ContentKind,
    classify,
    filename_from_disposition,
    parse_media_type,
    resolve_filename,
)
from eml2html.modules.errors import ConversionError, ErrorKind


class TestParseMediaType:
    def test_quoted_boundary(self):
        assert parse_media_type('multipart/mixed; boundary="abc def"') == (
            "multipart/mixed", {"boundary": "abc def"}
        )

    def test_type_and_parameter_names_are_lower_cased(self):
        assert parse_media_type("Text/HTML; Charset=UTF-8") == (
            "text/html", {"charset": "UTF-8"}
        )

    def test_unquoted_boundary_with_equals_and_slash(self):
        _, params = parse_media_type("multipart/alternative; boundary=----=_Part_1/2.3")
        assert params == {"boundary": "----=_Part_1/2.3"}

    def test_quoted_pair_is_unescaped(self):
        _, params = parse_media_type('text/plain; name="a\\"b"')
        assert params == {"name": 'a"b'}

    def test_quoted_value_may_contain_semicolon(self):
        _, params = parse_media_type('application/pdf; name="a;b.pdf"; x=1')
        assert params == {"name": "a;b.pdf", "x": "1"}

    def test_trailing_semicolon_and_lone_type(self):
        assert parse_media_type("text/plain;") == ("text/plain", {})
        assert parse_media_type("text") == ("text", {})

    @pytest.mark.parametrize("value", [
        "",
        "   ",
        "text/",
        "/plain",
        "text plain",
        "text/plain; charset",
        "text/plain; a=1; a=2",
        'text/plain; name="unterminated',
        "text/plain; a=b c",
    ])
    def test_invalid_values(self, value):
        with pytest.raises(ConversionError) as exc_info:
            parse_media_type(value)
        assert exc_info.value.kind is ErrorKind.MEDIA_TYPE_PARSE


class TestFilenameFromDisposition:
    def test_quoted_filename(self):
        assert filename_from_disposition('attachment; filename="report.pdf"') == "report.pdf"

    def test_unquoted_filename(self):
        assert filename_from_disposition("inline; filename=logo.png") == "logo.png"

    def test_no_parameters(self):
        assert filename_from_disposition("attachment") == ""
        assert filename_from_disposition("") == ""

    def test_parameter_without_value(self):
        assert filename_from_disposition("attachment; filename") == ""

    def test_only_second_segment_is_read(self):
        # Extra leading parameters are not skipped over
        assert filename_from_disposition('attachment; size=10; filename="x.bin"') == "10"

    def test_equals_inside_name_truncates(self):
        assert filename_from_disposition("attachment; filename=a=b.txt") == "a"


class TestResolveFilename:
    def test_disposition_filename_wins(self):
        assert resolve_filename("image/png", 'attachment; filename="a.png"') == "a.png"

    def test_text_fallbacks(self):
        assert resolve_filename("text/plain", "") == "attachment.txt"
        assert resolve_filename("text/html", "attachment") == "attachment.html"

    def test_unknown_type_without_filename(self):
        with pytest.raises(ConversionError) as exc_info:
            resolve_filename("application/octet-stream", "")
        assert exc_info.value.kind is ErrorKind.UNKNOWN_ATTACHMENT_TYPE
        assert "application/octet-stream" in str(exc_info.value)


class TestClassify:
    def test_plain_text(self):
        assert classify("text/plain", {"charset": "utf-8"}, "").kind is ContentKind.PLAIN_TEXT

    def test_html(self):
        assert classify("text/html", {}, "attachment").kind is ContentKind.HTML

    def test_multipart_carries_boundary(self):
        result = classify("multipart/related", {"boundary": "b1"}, "")
        assert result.kind is ContentKind.MULTIPART
        assert result.boundary == "b1"

    def test_attachment_carries_filename(self):
        result = classify("image/jpeg", {}, 'inline; filename="cat.jpg"')
        assert result.kind is ContentKind.ATTACHMENT
        assert result.filename == "cat.jpg"

    def test_attachment_without_filename_fails(self):
        with pytest.raises(ConversionError) as exc_info:
            classify("application/octet-stream", {}, "")
        assert exc_info.value.kind is ErrorKind.UNKNOWN_ATTACHMENT_TYPE
