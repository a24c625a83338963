"""Tests for catalog merging and normalization."""

import pytest

from md_translator.merger import merge_catalogs, normalize_catalog
from md_translator.models import Catalog, CatalogEntry, Location


def _template(*msgids, metadata=None):
    return Catalog([CatalogEntry(msgid) for msgid in msgids], metadata=metadata or {})


def _snapshot(catalog):
    return Catalog([entry.copy() for entry in catalog], catalog.metadata, catalog.header)


class TestMergeCatalogs:

    def test_exact_match_keeps_translation(self):
        old = Catalog([
            CatalogEntry(
                "Hello",
                translations=["Bonjour"],
                translator_comments=["checked"],
                fuzzy=True,
            ),
        ])
        template = Catalog([CatalogEntry("Hello", locations=[Location("a.md", 3)])])
        merged = merge_catalogs(old, template)
        entry = merged.get("Hello")
        assert entry.msgstr == "Bonjour"
        assert entry.translator_comments == ["checked"]
        assert entry.locations == [Location("a.md", 3)]
        assert not entry.fuzzy
        assert entry.previous_msgid is None

    def test_similar_message_is_fuzzy(self):
        old = Catalog([CatalogEntry("The quick brown fox", translations=["Le renard"])])
        merged = merge_catalogs(old, _template("The quick brown foxes"))
        entry = merged.get("The quick brown foxes")
        assert entry.msgstr == "Le renard"
        assert entry.fuzzy
        assert entry.previous_msgid == "The quick brown fox"
        assert merged.obsolete_entries() == []

    def test_case_and_wrapping_changes_are_similar(self):
        old = Catalog([CatalogEntry("Hello  World", translations=["Bonjour"])])
        merged = merge_catalogs(old, _template("hello\nworld"))
        entry = merged.get("hello\nworld")
        assert entry.msgstr == "Bonjour"
        assert entry.fuzzy

    def test_unrelated_message_is_not_matched(self):
        old = Catalog([CatalogEntry("abc", translations=["def"])])
        merged = merge_catalogs(old, _template("xyz"))
        assert not merged.get("xyz").is_translated
        assert [entry.msgid for entry in merged.obsolete_entries()] == ["abc"]

    def test_split_message_carries_whole_translation(self):
        old = Catalog([CatalogEntry("- foo\n- bar\n", translations=["- le foo\n- le bar\n"])])
        merged = merge_catalogs(old, _template("foo", "bar"))
        for msgid in ("foo", "bar"):
            entry = merged.get(msgid)
            assert entry.fuzzy
            assert entry.msgstr == "- le foo\n- le bar\n"
            assert entry.previous_msgid == "- foo\n- bar\n"
        assert merged.obsolete_entries() == []

    def test_unmatched_old_messages_become_obsolete(self):
        old = Catalog([
            CatalogEntry("Hello", translations=["Bonjour"]),
            CatalogEntry("Completely different text", translations=["Autre"],
                         locations=[Location("a.md", 1)]),
        ])
        merged = merge_catalogs(old, _template("Hello"))
        assert [entry.msgid for entry in merged.live_entries()] == ["Hello"]
        stale = merged.obsolete_entries()
        assert [entry.msgid for entry in stale] == ["Completely different text"]
        assert stale[0].msgstr == "Autre"
        assert stale[0].locations == []

    def test_new_messages_are_untranslated(self):
        merged = merge_catalogs(Catalog(), _template("One", "Two"))
        assert [(e.msgid, e.msgstr, e.fuzzy) for e in merged] == [
            ("One", "", False),
            ("Two", "", False),
        ]

    def test_template_order_is_kept(self):
        old = Catalog([
            CatalogEntry("b", translations=["B"]),
            CatalogEntry("a", translations=["A"]),
        ])
        merged = merge_catalogs(old, _template("a", "x", "b"))
        assert [entry.msgid for entry in merged.live_entries()] == ["a", "x", "b"]

    def test_exact_match_is_not_stolen(self):
        old = Catalog([CatalogEntry("Hello world", translations=["Bonjour le monde"])])
        merged = merge_catalogs(old, _template("Hello worlds", "Hello world"))
        assert merged.get("Hello world").msgstr == "Bonjour le monde"
        assert not merged.get("Hello world").fuzzy
        assert merged.get("Hello worlds").msgstr == ""

    def test_ties_go_to_earliest_entry(self):
        old = Catalog([
            CatalogEntry("Hello there", msgctxt="a", translations=["Salut A"]),
            CatalogEntry("Hello there", msgctxt="b", translations=["Salut B"]),
        ])
        merged = merge_catalogs(old, _template("Hello there!"))
        assert merged.get("Hello there!").msgstr == "Salut A"
        assert [e.msgctxt for e in merged.obsolete_entries()] == ["b"]

    def test_metadata(self):
        old = Catalog(metadata={"Language": "fr", "POT-Creation-Date": "old"})
        template = _template("x", metadata={"POT-Creation-Date": "new"})
        merged = merge_catalogs(old, template)
        assert merged.metadata == {"Language": "fr", "POT-Creation-Date": "new"}

    def test_inputs_are_not_modified(self):
        old = Catalog([
            CatalogEntry("Hello", translations=["Bonjour"], fuzzy=True),
            CatalogEntry("Old text here", translations=["Vieux"]),
        ], metadata={"Language": "fr"})
        template = _template("Hello", "Old text here!")
        before_old, before_template = _snapshot(old), _snapshot(template)
        merge_catalogs(old, template)
        assert old == before_old
        assert template == before_template


class TestNormalizeCatalog:

    def test_split_with_translation(self):
        catalog = Catalog([CatalogEntry("- foo\n- bar\n", translations=["- le foo\n- le bar\n"])])
        normalized = normalize_catalog(catalog)
        assert [(e.msgid, e.msgstr, e.fuzzy) for e in normalized] == [
            ("foo", "le foo", False),
            ("bar", "le bar", False),
        ]

    def test_part_count_mismatch_is_fuzzy(self):
        catalog = Catalog([CatalogEntry("- foo\n- bar\n", translations=["- le foo\n"])])
        normalized = normalize_catalog(catalog)
        assert [(e.msgid, e.msgstr, e.fuzzy) for e in normalized] == [
            ("foo", "le foo", True),
            ("bar", "", True),
        ]

    def test_extra_translation_parts_are_joined(self):
        catalog = Catalog([CatalogEntry("- foo\n- bar\n", translations=["- a\n- b\n- c\n"])])
        normalized = normalize_catalog(catalog)
        assert normalized.get("bar").msgstr == "b\n\nc"
        assert normalized.get("bar").fuzzy

    def test_untranslated_split(self):
        normalized = normalize_catalog(Catalog([CatalogEntry("# Title\n\nBody\n")]))
        assert [(e.msgid, e.msgstr) for e in normalized] == [("Title", ""), ("Body", "")]

    def test_normalized_messages_are_unchanged(self):
        catalog = Catalog([
            CatalogEntry("Hello **world**!", translations=["Bonjour **monde**!"]),
            CatalogEntry("See [docs][1].", translations=["Voir [la doc][1]."]),
        ])
        assert normalize_catalog(catalog) == catalog

    def test_links_become_references(self):
        catalog = Catalog([
            CatalogEntry("[docs](http://x)", translations=["[la doc](http://x)"]),
        ])
        entry = list(normalize_catalog(catalog))[0]
        assert (entry.msgid, entry.msgstr) == ("[docs][1]", "[la doc][1]")

    def test_messages_without_text_are_dropped(self):
        assert len(normalize_catalog(Catalog([CatalogEntry("---")]))) == 0

    def test_merged_keys_take_first_translation(self):
        catalog = Catalog([
            CatalogEntry("Hello"),
            CatalogEntry("- Hello\n- World\n", translations=["- Bonjour\n- Monde\n"]),
        ])
        normalized = normalize_catalog(catalog)
        assert normalized.get("Hello").msgstr == "Bonjour"
        assert normalized.get("World").msgstr == "Monde"

    def test_normalize_is_idempotent(self):
        catalog = Catalog([
            CatalogEntry("- [a](http://x)\n- b\n", translations=["- [A](http://x)\n- B\n"]),
        ])
        once = normalize_catalog(catalog)
        assert normalize_catalog(once) == once
