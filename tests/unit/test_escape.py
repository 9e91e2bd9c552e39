#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for HTML escaping helpers."""

import pytest

from bb2html.utils.escape import char_reference_length, escape_char, escape_html, escape_unescaped


@pytest.mark.unit
class TestEscapeHtml:
    """Test unconditional escaping."""

    def test_all_special_characters(self) -> None:
        """Test that each special character is replaced."""
        assert escape_html("<a href='x'>\"&") == "&lt;a href=&#x27;x&#x27;&gt;&quot;&amp;"

    def test_entities_are_escaped_again(self) -> None:
        """Test that existing references are not recognised."""
        assert escape_html("&amp;") == "&amp;amp;"


@pytest.mark.unit
class TestCharReferences:
    """Test recognition of character references."""

    @pytest.mark.parametrize(
        "text, expected",
        [("&amp;x", 5), ("&copy;", 6), ("&#169;", 6), ("&#xA9;", 6), ("&foo;", 0), ("&#x;", 0), ("&amp", 0)],
    )
    def test_length(self, text: str, expected: int) -> None:
        """Test the length of valid and invalid references."""
        assert char_reference_length(text, 0) == expected

    def test_offset(self) -> None:
        """Test a reference in the middle of the text."""
        assert char_reference_length("a &lt; b", 2) == 4

    def test_escape_char(self) -> None:
        """Test escaping a single character."""
        assert escape_char("&amp;", 0) == ("&amp;", 5)
        assert escape_char("&x", 0) == ("&amp;", 1)
        assert escape_char("<", 0) == ("&lt;", 1)
        assert escape_char("a", 0) == ("a", 1)


@pytest.mark.unit
@pytest.mark.security
class TestEscapeUnescaped:
    """Test escaping that leaves existing references alone."""

    def test_mixed(self) -> None:
        """Test text with both escaped and raw characters."""
        assert escape_unescaped("a &amp; b < c") == "a &amp; b &lt; c"

    def test_idempotent(self) -> None:
        """Test that escaping twice changes nothing."""
        once = escape_unescaped("<script>&foo; &copy; \"'")
        assert escape_unescaped(once) == once

    def test_plain_text(self) -> None:
        """Test text without special characters."""
        assert escape_unescaped("hello") == "hello"
