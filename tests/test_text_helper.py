"""Tests for HTML sanitizing helpers."""

from shared.helper.text_helper import BODY_LIMIT, EXCERPT_LIMIT, sanitize, strip_tags, truncate


class TestStripTags:
    def test_removes_tags_keeps_text(self):
        assert strip_tags("<p>Hello <b>world</b></p>") == "Hello world"

    def test_drops_unterminated_trailing_tag(self):
        assert strip_tags("text <img src='x'") == "text "

    def test_leaves_entities_untouched(self):
        assert strip_tags("<p>A &amp; B</p>") == "A &amp; B"

    def test_none_becomes_empty(self):
        assert strip_tags(None) == ""


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("abc", 3) == "abc"

    def test_long_text_cut_with_ellipsis(self):
        assert truncate("abcdef", 3) == "abc..."


class TestSanitize:
    def test_excerpt_limit(self):
        html = "<p>" + "あ" * 250 + "</p>"
        result = sanitize(html, EXCERPT_LIMIT)
        assert result == "あ" * 200 + "..."

    def test_body_within_limit_has_no_ellipsis(self):
        html = "<div>" + "x" * BODY_LIMIT + "</div>"
        assert sanitize(html, BODY_LIMIT) == "x" * BODY_LIMIT

    def test_limit_counts_text_after_tag_removal(self):
        assert sanitize("<b>12345</b>", 5) == "12345"
