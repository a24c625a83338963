"""Tests for the command-line interface."""

from pathlib import Path
import tempfile

import pytest

from md_translator.catalog import load_catalog, save_catalog
from md_translator.cli import find_documents, parse_arguments, run
from md_translator.models import Catalog, CatalogEntry, Location


@pytest.fixture
def workspace():
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        docs = root / "docs"
        (docs / "guide").mkdir(parents=True)
        (docs / "intro.md").write_text("# Hello\n\nWorld\n", encoding="utf-8")
        (docs / "guide" / "usage.md").write_text("World\n\nUsage\n", encoding="utf-8")
        (docs / "notes.txt").write_text("ignored", encoding="utf-8")
        yield root


def _run(*argv):
    return run(parse_arguments(list(argv)))


class TestParseArguments:

    def test_extract_defaults(self):
        args = parse_arguments(["extract", "docs"])
        assert args.command == "extract"
        assert args.output_dir == "po"
        assert args.granularity is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])


class TestCommands:

    def test_find_documents(self, workspace):
        documents = find_documents([str(workspace / "docs")])
        assert [p.name for p in documents] == ["usage.md", "intro.md"]

    def test_extract(self, workspace):
        po = workspace / "po"
        code = _run(
            "extract", str(workspace / "docs"), "-o", str(po),
            "--root", str(workspace), "--project", "demo",
        )
        assert code == 0
        template = load_catalog(po / "messages.pot")
        assert [entry.msgid for entry in template] == ["World", "Usage", "Hello"]
        assert template.get("World").locations == [
            Location("docs/guide/usage.md", 1),
            Location("docs/intro.md", 3),
        ]
        assert template.metadata["Project-Id-Version"] == "demo"

    def test_extract_with_depth(self, workspace):
        po = workspace / "po"
        assert _run("extract", str(workspace / "docs" / "intro.md"), "-o", str(po), "--depth", "1") == 0
        assert (po / "hello.pot").exists()

    def test_invalid_granularity(self, workspace):
        assert _run("extract", str(workspace / "docs"), "--granularity", "-1") == 1

    def test_merge_translate_and_stats(self, workspace, capsys):
        po = workspace / "po"
        assert _run("extract", str(workspace / "docs" / "intro.md"), "-o", str(po)) == 0

        catalog = workspace / "fr.po"
        save_catalog(
            Catalog([CatalogEntry("World", translations=["Monde"])], metadata={"Language": "fr"}),
            catalog,
        )
        assert _run("merge", str(catalog), str(po / "messages.pot")) == 0
        merged = load_catalog(catalog)
        assert merged.get("World").msgstr == "Monde"
        assert merged.get("Hello").msgstr == ""

        output = workspace / "out" / "intro.fr.md"
        assert _run(
            "translate", str(workspace / "docs" / "intro.md"),
            "-c", str(catalog), "-o", str(output),
        ) == 0
        assert output.read_text(encoding="utf-8") == "# Hello\n\nMonde\n"

        assert _run("stats", str(catalog)) == 0
        assert "fr: 1 (0, 0) / 2, 50% complete" in capsys.readouterr().out

    def test_translate_with_locale(self, workspace):
        po = workspace / "po"
        save_catalog(Catalog([CatalogEntry("World", translations=["Welt"])]), po / "de.po")
        source = workspace / "docs" / "intro.md"
        assert _run("translate", str(source), "-l", "de", "--catalog-dir", str(po)) == 0
        assert (workspace / "docs" / "intro.de.md").read_text(encoding="utf-8") == "# Hello\n\nWelt\n"

    def test_normalize(self, workspace):
        catalog = workspace / "fr.po"
        save_catalog(Catalog([CatalogEntry("- a\n- b\n", translations=["- A\n- B\n"])]), catalog)
        assert _run("normalize", str(catalog)) == 0
        assert [(e.msgid, e.msgstr) for e in load_catalog(catalog)] == [("a", "A"), ("b", "B")]

    def test_missing_catalog(self, workspace):
        assert _run("stats", str(workspace / "missing.po")) == 1

    def test_broken_catalog(self, workspace):
        catalog = workspace / "broken.po"
        catalog.write_text('msgid "abc\n', encoding="utf-8")
        assert _run("stats", str(catalog)) == 1

    def test_from_translation_directories(self, workspace, monkeypatch):
        translated = workspace / "fr"
        translated.mkdir()
        (translated / "intro.md").write_text("# Bonjour\n\nMonde\n", encoding="utf-8")
        monkeypatch.chdir(workspace)

        assert _run("from-translation", "docs", "fr", "-o", "po/fr.po", "-l", "fr") == 0
        catalog = load_catalog(workspace / "po" / "fr.po")
        assert [(e.msgid, e.msgstr) for e in catalog] == [("Hello", "Bonjour"), ("World", "Monde")]
        assert catalog.get("World").locations == [Location("docs/intro.md", 3)]
        assert catalog.metadata["Language"] == "fr"

    def test_from_translation_updates_existing_catalog(self, workspace):
        output = workspace / "fr.po"
        save_catalog(
            Catalog([CatalogEntry("Hello", translations=["Salut"]), CatalogEntry("World")]),
            output,
        )
        translated = workspace / "intro.fr.md"
        translated.write_text("# Bonjour\n\nMonde\n", encoding="utf-8")
        source = workspace / "docs" / "intro.md"

        assert _run("from-translation", str(source), str(translated), "-o", str(output)) == 0
        catalog = load_catalog(output)
        assert catalog.get("Hello").msgstr == "Salut"
        assert catalog.get("World").msgstr == "Monde"

    def test_from_translation_without_counterpart(self, workspace):
        translated = workspace / "fr"
        translated.mkdir()
        output = workspace / "fr.po"
        assert _run("from-translation", str(workspace / "docs"), str(translated), "-o", str(output)) == 1
        assert not output.exists()

    def test_from_translation_needs_output(self):
        with pytest.raises(SystemExit):
            parse_arguments(["from-translation", "en.md", "fr.md"])
