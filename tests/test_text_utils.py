"""Tests for text utilities."""

import pytest
from md_translator.text_utils import (
    comparable_text, message_lines, normalize_whitespace, slugify,
)


class TestNormalizeWhitespace:

    def test_collapse(self):
        assert normalize_whitespace("  hello \n\t world  ") == "hello world"

    def test_empty(self):
        assert normalize_whitespace("") == ""
        assert normalize_whitespace(" \n ") == ""

    def test_comparable_text_folds_case(self):
        assert comparable_text("Straße\nIS  here") == "strasse is here"


class TestMessageLines:

    def test_bullets(self):
        assert message_lines("- foo\n- bar\n") == ["foo", "bar"]

    def test_ordered_and_headings(self):
        assert message_lines("# Title\n\n1. one\n2) two\n> quote") == [
            "Title", "one", "two", "quote",
        ]

    def test_plain_text_is_kept(self):
        assert message_lines("foo  bar") == ["foo bar"]
        assert message_lines("-not a bullet") == ["-not a bullet"]


class TestSlugify:

    @pytest.mark.parametrize("heading,slug", [
        ("Getting Started", "getting-started"),
        ("Hello, World!", "hello-world"),
        ("  Many   spaces  ", "many-spaces"),
        ("[Docs][1] page", "docs-page"),
        ("***", "section"),
        ("", "section"),
    ])
    def test_slug(self, heading, slug):
        assert slugify(heading) == slug
