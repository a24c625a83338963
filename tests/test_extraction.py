"""Tests for template catalog construction."""

from datetime import datetime, timezone

import pytest

from md_translator.catalog import parse_catalog, serialize_catalog
from md_translator.extraction import (
    SectionPathBuilder, build_location, create_catalogs, create_template,
    generate_metadata, partition_units,
)
from md_translator.grouper import build_units
from md_translator.models import Location
from md_translator.parser import parse_markdown


def _extract(text, document="doc.md"):
    return build_units(parse_markdown(text), document)


def _partition_keys(texts, depth):
    extractions = [_extract(text, f"doc{i}.md") for i, text in enumerate(texts)]
    return {
        path: [unit.message_key for unit in units]
        for path, units in partition_units(extractions, depth).items()
    }


class TestBuildLocation:

    @pytest.mark.parametrize("line,granularity,expected", [
        (17, 1, 17),
        (17, 0, None),
        (17, 10, 10),
        (7, 10, 1),
        (20, 10, 20),
        (0, 1, None),
    ])
    def test_rounding(self, line, granularity, expected):
        assert build_location("a.md", line, granularity) == Location("a.md", expected)


class TestGenerateMetadata:

    def test_fields(self):
        now = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        metadata = generate_metadata("fr", "demo", now=now)
        assert metadata["Language"] == "fr"
        assert metadata["Project-Id-Version"] == "demo"
        assert metadata["POT-Creation-Date"] == "2024-05-01 12:30+0000"
        assert metadata["Content-Type"] == "text/plain; charset=UTF-8"
        assert "Plural-Forms" not in metadata


class TestCreateTemplate:

    def test_messages_and_locations(self):
        extractions = [
            _extract("# Hello\n\nWorld\n", "a.md"),
            _extract("World\n", "b.md"),
        ]
        template = create_template(extractions, metadata={})
        assert [entry.msgid for entry in template] == ["Hello", "World"]
        assert template.get("World").locations == [Location("a.md", 3), Location("b.md", 1)]
        assert all(not entry.is_translated for entry in template)

    def test_granularity_zero_merges_locations(self):
        template = create_template([_extract("Hi\n\nHi\n")], granularity=0, metadata={})
        assert template.get("Hi").locations == [Location("doc.md")]

    def test_comments_become_extracted_comments(self):
        text = "<!-- i18n:comment: One\ntwo -->\n\nHello\n"
        template = create_template([_extract(text)], metadata={})
        assert template.get("Hello").comments == ["One", "two"]

    def test_multi_paragraph_comment_survives_serialization(self):
        text = "<!-- i18n:comment: First para\n\nSecond para -->\n\nHello\n"
        template = create_template([_extract(text)], metadata={"Language": "fr"})
        assert template.get("Hello").comments == ["First para", "Second para"]
        assert parse_catalog(serialize_catalog(template)) == template

    def test_skipped_units_are_left_out(self):
        text = "<!-- i18n:skip -->\n\nSecret\n\nPublic\n"
        template = create_template([_extract(text)], metadata={})
        assert [entry.msgid for entry in template] == ["Public"]

    def test_empty_documents(self):
        catalogs = create_catalogs([_extract("")], metadata={})
        assert list(catalogs) == ["messages.pot"]
        assert len(catalogs["messages.pot"]) == 0


class TestPartition:

    def test_depth_zero(self):
        assert _partition_keys(["# A\n\nx\n"], 0) == {"messages.pot": ["A", "x"]}

    def test_preamble_goes_to_default_bucket(self):
        assert _partition_keys(["Intro\n\n# A\n\nx\n"], 1) == {
            "messages.pot": ["Intro"],
            "a.pot": ["A", "x"],
        }

    def test_repeated_titles(self):
        texts = ["# Getting Started\n\nA\n", "# Getting Started\n\nB\n"]
        assert _partition_keys(texts, 1) == {
            "getting-started.pot": ["Getting Started", "A"],
            "getting-started-1.pot": ["Getting Started", "B"],
        }

    def test_nested_sections(self):
        text = "# A\n\n## B\n\nx\n\n## C\n\ny\n\n### Deep\n\nz\n"
        assert _partition_keys([text], 2) == {
            "a.pot": ["A"],
            "a/b.pot": ["B", "x"],
            "a/c.pot": ["C", "y", "Deep", "z"],
        }

    def test_create_catalogs_with_depth(self):
        catalogs = create_catalogs([_extract("# A\n\nx\n\n# B\n\ny\n")], depth=1, metadata={})
        assert list(catalogs) == ["a.pot", "b.pot"]
        assert [entry.msgid for entry in catalogs["b.pot"]] == ["B", "y"]


class TestSectionPathBuilder:

    def test_unique_paths(self):
        builder = SectionPathBuilder(2)
        builder.enter(1, "foo")
        builder.enter(2, "bar")
        assert builder.path() == "foo/bar.pot"
        builder.enter(3, "baz")
        assert builder.path() == "foo/bar.pot"
        builder.enter(1, "foo")
        builder.enter(2, "bar")
        assert builder.path() == "foo-1/bar.pot"
        builder.enter(2, "bar")
        assert builder.path() == "foo-1/bar-1.pot"

    def test_reset(self):
        builder = SectionPathBuilder(1)
        builder.enter(1, "foo")
        builder.reset()
        assert builder.path() == "messages.pot"
